"""
Scripture References in Assistant Answers

The chat assistant cites verses in parentheses, e.g. "(창세기 1:1)",
"(시편 23편)", "(John 3:16)". This module finds those citations so the UI can
render them as tappable links, and leaves everything else untouched.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from reference_parser import BibleReferenceParser, ParsedReference, shared_parser

# Parenthesized citations only: "(Book N:M)", "(Book N M)", "(책 N장 M절)", "(시편 N편)"
PARENTHESIZED_REFERENCE_PATTERN = re.compile(
    r'\((?P<reference>'
    r'[^()]+?\s+\d+[:\s]\d+'
    r'|[^()]+?\s*\d+장\s*(?:\d+절?)?'
    r'|[^()]+?\s*\d+편\s*(?:\d+절?)?'
    r')\)'
)


@dataclass(frozen=True)
class ReferenceLink:
    start: int  # Offset of "(" in the source text
    end: int    # Offset just past ")"
    display_text: str  # Citation without the parentheses
    reference: ParsedReference

    def to_dict(self) -> Dict[str, object]:
        return {
            'start': self.start,
            'end': self.end,
            'displayText': self.display_text,
            'reference': self.reference.to_dict(),
        }


def find_reference_links(text: str,
                         parser: Optional[BibleReferenceParser] = None) -> List[ReferenceLink]:
    """
    Find parenthesized scripture citations that parse to a book and chapter.

    Args:
        text: Assistant answer text
        parser: Parser to use (defaults to the shared instance)

    Returns:
        Links in order of appearance. Parenthesized text that does not parse
        is skipped.
    """
    parser = parser or shared_parser
    links = []
    for match in PARENTHESIZED_REFERENCE_PATTERN.finditer(text):
        display_text = match.group('reference').strip()
        parsed = parser.parse(display_text)
        if parsed.is_valid:
            links.append(ReferenceLink(
                start=match.start(),
                end=match.end(),
                display_text=display_text,
                reference=parsed,
            ))
    return links


def replace_reference_links(text: str, formatter: Callable[[ReferenceLink], str],
                            parser: Optional[BibleReferenceParser] = None) -> str:
    """
    Rewrite every valid parenthesized citation with formatter(link).

    Example:
        replace_reference_links(answer, lambda link: f"[{link.display_text}](bible://...)")
    """
    pieces = []
    last_end = 0
    for link in find_reference_links(text, parser):
        pieces.append(text[last_end:link.start])
        pieces.append(formatter(link))
        last_end = link.end
    pieces.append(text[last_end:])
    return ''.join(pieces)
