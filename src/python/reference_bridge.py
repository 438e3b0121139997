#!/usr/bin/env python3
"""
Bible Reference Parser Bridge

JSON-based subprocess interface for the app to:
1. Parse voice search transcripts into Bible references
2. Find parenthesized references in assistant answers
3. Search and list the book catalog

Protocol: Reads one JSON command from stdin, writes one JSON response to stdout.
Diagnostics go to stderr (enable with BIBLE_PARSER_VERBOSE=1).
"""

import sys
import json
import os
import traceback
from typing import Optional, Dict, Any, List

# Ensure proper stdout encoding for JSON output (Korean book names)
for _stream in (sys.stdout, sys.stderr):
    if hasattr(_stream, "reconfigure"):
        _stream.reconfigure(encoding="utf-8")  # type: ignore[union-attr]

from bible_books import BookSortOrder, Language, sorted_books
from korean_search import search_books
from reference_links import find_reference_links
from reference_parser import BibleReferenceParser

# ============================================================================
# CONFIGURATION
# ============================================================================

VERBOSE = os.environ.get('BIBLE_PARSER_VERBOSE', '').lower() in ('1', 'true', 'yes')

MAX_BATCH_SIZE = 500


# ============================================================================
# OUTPUT
# ============================================================================

def emit_error(error: str):
    """Emit an error to stdout as JSON."""
    result = {
        "type": "error",
        "error": error,
    }
    print(json.dumps(result, ensure_ascii=False), flush=True)


def emit_result(data: Dict[str, Any]):
    """Emit the final result to stdout as JSON."""
    result = {
        "type": "result",
        **data
    }
    print(json.dumps(result, ensure_ascii=False), flush=True)


# ============================================================================
# LAZY PARSER
# ============================================================================

_parser: Optional[BibleReferenceParser] = None


def get_parser() -> BibleReferenceParser:
    """Build the parser on first use (cached afterwards)."""
    global _parser
    if _parser is None:
        _parser = BibleReferenceParser(verbose=VERBOSE)
    return _parser


def _parse_language(value: Optional[str]) -> Optional[Language]:
    if not value:
        return None
    return Language.from_code(value)


def _parse_sort_order(value: Optional[str]) -> BookSortOrder:
    try:
        return BookSortOrder(value or BookSortOrder.CANONICAL.value)
    except ValueError:
        raise ValueError(f"Unknown sortOrder: {value}")


# ============================================================================
# COMMANDS
# ============================================================================

def parse_transcript(transcript: str) -> Dict[str, Any]:
    return get_parser().parse(transcript).to_dict()


def parse_batch(transcripts: List[str]) -> Dict[str, Any]:
    parser = get_parser()
    return {'results': [parser.parse(transcript).to_dict() for transcript in transcripts]}


def find_references(text: str) -> Dict[str, Any]:
    links = find_reference_links(text, get_parser())
    return {'links': [link.to_dict() for link in links]}


def handle_command(command: Dict[str, Any]) -> Dict[str, Any]:
    """
    Handle a command from the app.

    Commands:
        - parse: Parse one transcript ({"transcript": "..."})
        - parse_batch: Parse a list of transcripts ({"transcripts": [...]})
        - find_references: Find "(John 3:16)" style references ({"text": "..."})
        - search_books: Filter books by a partial query ({"query", "language"})
        - list_books: All books ({"sortOrder": "canonical"|"alphabetical", "language"})
        - check_dependencies: Check if all required packages are installed
    """
    cmd = command.get('command', '')

    if cmd == 'check_dependencies':
        return check_dependencies()

    elif cmd == 'parse':
        transcript = command.get('transcript')
        if transcript is None:
            return {'error': 'transcript is required'}
        if not isinstance(transcript, str):
            return {'error': 'transcript must be a string'}
        return parse_transcript(transcript)

    elif cmd == 'parse_batch':
        transcripts = command.get('transcripts')
        if transcripts is None:
            return {'error': 'transcripts is required'}
        if not isinstance(transcripts, list) or not all(isinstance(t, str) for t in transcripts):
            return {'error': 'transcripts must be a list of strings'}
        if len(transcripts) > MAX_BATCH_SIZE:
            return {'error': f'At most {MAX_BATCH_SIZE} transcripts per batch'}
        return parse_batch(transcripts)

    elif cmd == 'find_references':
        text = command.get('text')
        if text is None:
            return {'error': 'text is required'}
        if not isinstance(text, str):
            return {'error': 'text must be a string'}
        return find_references(text)

    elif cmd == 'search_books':
        query = command.get('query')
        if query is None:
            return {'error': 'query is required'}
        if not isinstance(query, str):
            return {'error': 'query must be a string'}
        language = _parse_language(command.get('language'))
        return {'books': [book.to_dict() for book in search_books(query, language)]}

    elif cmd == 'list_books':
        try:
            sort_order = _parse_sort_order(command.get('sortOrder'))
        except ValueError as e:
            return {'error': str(e)}
        language = _parse_language(command.get('language')) or Language.ENGLISH
        return {'books': [book.to_dict() for book in sorted_books(sort_order, language)]}

    else:
        return {'error': f'Unknown command: {cmd}'}


def check_dependencies() -> Dict[str, Any]:
    """Check if all required Python packages are installed."""
    deps: Dict[str, Any] = {
        'numpy': False,
        'rapidfuzz': False,
        'langdetect': False,
    }

    try:
        import numpy
        deps['numpy'] = True
        deps['numpy_version'] = str(numpy.__version__)
    except ImportError:
        pass

    try:
        import rapidfuzz
        deps['rapidfuzz'] = True
        deps['rapidfuzz_version'] = str(rapidfuzz.__version__)
    except ImportError:
        pass

    try:
        import langdetect
        deps['langdetect'] = True
    except ImportError:
        pass

    all_installed = all(deps.get(k, False) for k in ['numpy', 'rapidfuzz', 'langdetect'])

    return {
        'dependencies': deps,
        'all_installed': all_installed,
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main():
    """
    Main entry point for subprocess mode.
    Reads a JSON command from stdin and writes a JSON response to stdout.
    """
    try:
        input_data = sys.stdin.read()
        if not input_data.strip():
            emit_error("No input provided")
            return

        command = json.loads(input_data)
    except json.JSONDecodeError as e:
        emit_error(f"Invalid JSON input: {e}")
        return
    except Exception as e:
        emit_error(f"Error reading input: {e}")
        return

    if not isinstance(command, dict):
        emit_error("Command must be a JSON object")
        return

    try:
        result = handle_command(command)
        emit_result(result)
    except Exception as e:
        emit_error(f"Error processing command: {e}\n{traceback.format_exc()}")


if __name__ == "__main__":
    main()
