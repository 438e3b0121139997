#!/usr/bin/env python3
"""
Bible Reference Parser for Voice Search

Turns a raw speech-to-text transcript (Korean or English) into a structured
scripture reference:

1. Detect the transcript language (statistical identifier, Hangul fallback)
2. Normalize it (lowercase, punctuation, filler words and particles)
3. Try the per-language reference patterns ("요한복음 3장 16절", "John 3:16")
4. Fall back to number-word conversion and free-form number extraction
5. Fall back to a book name on its own ("창세기", "Genesis")

Book names are resolved against the alias table with exact, prefix, contains
and Levenshtein fuzzy matching. Ambiguous names return one primary book plus
ordered alternatives.

The parser never raises: "no match", "partial match" and "ambiguous match"
are all represented in the returned ParsedReference.
"""

import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

import numpy as np
from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException
from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from bible_books import BIBLE_BOOKS, BibleBook, Language
from book_aliases import ALIAS_MAP, build_alias_map
from number_words import replace_number_words

# ============================================================================
# CONFIGURATION
# ============================================================================

# langdetect is non-deterministic unless seeded
DetectorFactory.seed = 0

# Minimum probability for the statistical language guess to be trusted
LANGUAGE_CONFIDENCE_THRESHOLD = 0.5

# Fuzzy matching: a book survives if its best alias is within
# max(FUZZY_MIN_DISTANCE, len(candidate) // 2) edits
FUZZY_MIN_DISTANCE = 2
FUZZY_ALTERNATIVE_SLACK = 1  # Alternatives may be this much worse than the best
MAX_FUZZY_ALTERNATIVES = 5

HANGUL_PATTERN = re.compile(r"[\uac00-\ud7af\u1100-\u11ff\u3130-\u318f]")

ENGLISH_FILLER_PHRASES = [
    'show me', 'take me to', 'go to', 'turn to', 'open up', 'open', 'find',
    'please', 'read', 'the gospel according to', 'gospel according to',
    'the gospel of', 'gospel of', 'the book of', 'book of', 'the',
]

KOREAN_FILLER_PHRASES = [
    '보여주세요', '보여줘', '찾아주세요', '찾아줘', '읽어주세요', '읽어줘',
    '들려주세요', '들려줘', '펴주세요', '펴줘', '열어줘', '가주세요', '가줘', '말씀',
]

# Particles attached to the end of a word ("요한복음을", "3장으로")
KOREAN_PARTICLE_PATTERN = re.compile(r'(?<=[가-힣\d])(?:으로|의|을|를)(?=\s|$)')

ENGLISH_FILLER_PATTERN = re.compile(
    r'\b(?:' + '|'.join(
        re.escape(phrase) for phrase in sorted(ENGLISH_FILLER_PHRASES, key=len, reverse=True)
    ) + r')\b'
)

# Everything except word characters, whitespace and the chapter:verse colon
PUNCTUATION_PATTERN = re.compile(r'[^\w\s:]')

# Reference templates, most specific first. Each captures <book>, <chapter>
# and optionally <verse>. Matched from the start of the normalized text.
KOREAN_PATTERNS = [
    r'(?P<book>.+?)\s*(?P<chapter>\d+)\s*장\s*(?P<verse>\d+)\s*절',   # 요한복음 3장 16절
    r'(?P<book>.+?)\s*(?P<chapter>\d+)\s*편\s*(?P<verse>\d+)\s*절',   # 시편 23편 1절
    r'(?P<book>.+?)\s*(?P<chapter>\d+)\s*장',                          # 요한복음 3장
    r'(?P<book>.+?)\s*(?P<chapter>\d+)\s*편',                          # 시편 23편
    r'(?P<book>.+?)\s+(?P<chapter>\d+)\s*[:\s]\s*(?P<verse>\d+)',      # 요한 3:16, 요한 3 16
    r'(?P<book>.+?)\s+(?P<chapter>\d+)$',                              # 요한 3
]

# "chapter N" is tried before the bare "N" template, and "N verse M" is accepted,
# so the "chapter"/"verse" keywords never end up inside the book span.
ENGLISH_PATTERNS = [
    r'(?P<book>.+?)\s+(?P<chapter>\d+)\s*:\s*(?P<verse>\d+)',                       # John 3:16
    r'(?P<book>.+?)\s+chapter\s+(?P<chapter>\d+)\s+verses?\s+(?P<verse>\d+)',       # John chapter 3 verse 16
    r'(?P<book>.+?)\s+(?P<chapter>\d+)\s+verses?\s+(?P<verse>\d+)',                 # John 3 verse 16
    r'(?P<book>.+?)\s+(?P<chapter>\d+)\s+(?P<verse>\d+)$',                          # John 3 16
    r'(?P<book>.+?)\s+chapter\s+(?P<chapter>\d+)',                                  # John chapter 3
    r'(?P<book>.+?)\s+(?P<chapter>\d+)$',                                           # John 3
]

COMPILED_PATTERNS: Dict[Language, List[Pattern]] = {
    Language.KOREAN: [re.compile(p, re.IGNORECASE) for p in KOREAN_PATTERNS],
    Language.ENGLISH: [re.compile(p, re.IGNORECASE) for p in ENGLISH_PATTERNS],
}

# Tokens that mark a number's role but are never part of a book name
NUMBER_KEYWORDS = frozenset(['chapter', 'chapters', 'chap', 'verse', 'verses', '장', '절', '편'])

_TRAILING_KEYWORDS = re.compile(r'(?:\s+(?:chapter|chap|verses?))+$')
_NUMBER_TOKEN = re.compile(r'^(\d+)(?:장|절|편)?$')
_HANGUL_DIGIT_BOUNDARY = re.compile(r'(?<=[가-힣])(?=\d)|(?<=\d)(?=[가-힣])')


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class ParseConfidence(str, Enum):
    HIGH = 'high'        # Exact alias match
    MEDIUM = 'medium'    # Prefix/contains match, or fuzzy match within 1 edit
    LOW = 'low'          # No confident match


@dataclass(frozen=True)
class BookMatch:
    """Result of resolving a book-name candidate against the alias table."""
    book: Optional[BibleBook]
    confidence: ParseConfidence
    alternatives: Tuple[BibleBook, ...] = ()
    distance: Optional[int] = None  # Edit distance of the winning alias (fuzzy/exact only)


NO_BOOK_MATCH = BookMatch(book=None, confidence=ParseConfidence.LOW)


@dataclass(frozen=True)
class ParsedReference:
    """A transcript parsed into book, chapter and verse."""
    book: Optional[BibleBook]
    chapter: Optional[int]
    verse: Optional[int]
    detected_language: Language
    raw_transcript: str
    confidence: ParseConfidence
    alternative_books: Tuple[BibleBook, ...] = ()  # Other candidates when ambiguous

    @property
    def is_valid(self) -> bool:
        return self.book is not None and self.chapter is not None

    @property
    def is_complete(self) -> bool:
        return self.is_valid and self.verse is not None

    @property
    def is_ambiguous(self) -> bool:
        return len(self.alternative_books) > 0

    def to_standard_format(self) -> str:
        """
        Format as a citation in the detected language.

        English: "John 3:16", "John 3", "John"
        Korean: "요한복음 3장 16절", "시편 23편", "창세기"
        """
        if self.book is None:
            return ""

        if self.detected_language is Language.KOREAN:
            parts = [self.book.name_kr]
            if self.chapter is not None:
                counter = '편' if self.book.id == 'psalms' else '장'
                parts.append(f"{self.chapter}{counter}")
                if self.verse is not None:
                    parts.append(f"{self.verse}절")
            return ' '.join(parts)

        if self.chapter is None:
            return self.book.name_en
        if self.verse is None:
            return f"{self.book.name_en} {self.chapter}"
        return f"{self.book.name_en} {self.chapter}:{self.verse}"

    def to_dict(self) -> Dict[str, object]:
        return {
            'book': self.book.to_dict() if self.book else None,
            'chapter': self.chapter,
            'verse': self.verse,
            'detectedLanguage': self.detected_language.value,
            'rawTranscript': self.raw_transcript,
            'confidence': self.confidence.value,
            'alternativeBooks': [book.to_dict() for book in self.alternative_books],
            'reference': self.to_standard_format(),
            'isValid': self.is_valid,
            'isComplete': self.is_complete,
            'isAmbiguous': self.is_ambiguous,
        }


# ============================================================================
# HELPERS
# ============================================================================

def levenshtein_distance(first: str, second: str) -> int:
    """Edit distance (insertions, deletions, substitutions) between two strings."""
    return Levenshtein.distance(first, second)


def split_book_and_numbers(text: str) -> Tuple[str, List[int]]:
    """
    Split free-form text into a book-name candidate and its numbers.

    A leading 1-3 followed by words is kept with the book name, so
    "1 john 3 16" gives ("1 john", [3, 16]). Counter and keyword tokens
    (장, 절, chapter, verse) are dropped.

    Returns:
        Tuple of (book candidate, numbers in order of appearance)
    """
    tokens = [token for token in re.split(r'[\s:]+', text) if token]
    words: List[str] = []
    numbers: List[int] = []

    for index, token in enumerate(tokens):
        if token in NUMBER_KEYWORDS:
            continue

        number = _NUMBER_TOKEN.match(token)
        if number is None:
            words.append(token)
            continue

        is_book_number = (
            index == 0
            and token in ('1', '2', '3')
            and index + 1 < len(tokens)
            and _NUMBER_TOKEN.match(tokens[index + 1]) is None
            and tokens[index + 1] not in NUMBER_KEYWORDS
        )
        if is_book_number:
            words.append(token)
        else:
            numbers.append(int(number.group(1)))

    return ' '.join(words), numbers


def _confidence_for_distance(distance: int) -> ParseConfidence:
    if distance == 0:
        return ParseConfidence.HIGH
    if distance <= 1:
        return ParseConfidence.MEDIUM
    return ParseConfidence.LOW


# ============================================================================
# PARSER
# ============================================================================

class BibleReferenceParser:
    """
    Parses natural-language Bible references.

    The alias table and its numpy lookup arrays are built once in __init__
    and never mutated, so a single instance can be shared across threads.
    """

    def __init__(self, books: Sequence[BibleBook] = BIBLE_BOOKS,
                 alias_map: Optional[Mapping[str, str]] = None,
                 verbose: bool = False):
        self.books: Tuple[BibleBook, ...] = tuple(sorted(books, key=lambda b: b.order))
        self.books_by_id: Dict[str, BibleBook] = {book.id: book for book in self.books}

        if alias_map is None:
            alias_map = ALIAS_MAP if books is BIBLE_BOOKS else build_alias_map(self.books)
        self.alias_map: Mapping[str, str] = alias_map
        self.verbose = verbose

        # Parallel arrays for vectorized fuzzy matching
        self._aliases: List[str] = [a for a, book_id in alias_map.items() if book_id in self.books_by_id]
        self._alias_books: List[BibleBook] = [self.books_by_id[alias_map[a]] for a in self._aliases]
        self._alias_orders = np.array([book.order for book in self._alias_books], dtype=np.int32)

    def _log(self, message: str):
        if self.verbose:
            print(message, file=sys.stderr)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def parse(self, transcript: str) -> ParsedReference:
        """
        Parse a transcript into book, chapter and verse.

        Args:
            transcript: Raw speech-to-text output, e.g. "John 3:16",
                        "요한복음 3장 16절", "show me genesis one"

        Returns:
            ParsedReference. When nothing matches, book is None and
            confidence is LOW; the raw transcript is always preserved.
        """
        transcript = transcript or ""
        language = self.detect_language(transcript)
        normalized = self.normalize_text(transcript, language)
        self._log(f"  ℹ Parsing '{transcript}' as {language.full_name}: '{normalized}'")

        if normalized:
            strategies: List[Tuple[str, Callable[..., Optional[ParsedReference]]]] = [
                ('pattern', self._try_pattern_parsing),
                ('fuzzy', self._try_fuzzy_parsing),
                ('book-only', self._try_book_only_parsing),
            ]
            for name, strategy in strategies:
                result = strategy(normalized, language, transcript)
                if result is not None:
                    self._log(f"  ✓ {name} match: {result.to_standard_format()} ({result.confidence.value})")
                    return result

        self._log(f"  ⚠ No reference found in '{transcript}'")
        return ParsedReference(
            book=None,
            chapter=None,
            verse=None,
            detected_language=language,
            raw_transcript=transcript,
            confidence=ParseConfidence.LOW,
        )

    # ------------------------------------------------------------------
    # Language detection & normalization
    # ------------------------------------------------------------------

    def detect_language(self, text: str) -> Language:
        """
        Classify text as Korean or English.

        Uses langdetect; if it cannot decide (no features, or a weak top
        guess), falls back to checking for Hangul characters.
        """
        try:
            guesses = detect_langs(text)
        except LangDetectException:
            guesses = []

        if guesses and guesses[0].prob >= LANGUAGE_CONFIDENCE_THRESHOLD:
            return Language.KOREAN if guesses[0].lang == 'ko' else Language.ENGLISH

        return Language.KOREAN if HANGUL_PATTERN.search(text) else Language.ENGLISH

    def normalize_text(self, text: str, language: Language) -> str:
        """
        Lowercase, strip punctuation and filler words, collapse whitespace.

        "Show me John 3.16, please!" -> "john 3:16"
        "요한복음 3장을 보여줘" -> "요한복음 3장"
        """
        normalized = text.lower()
        normalized = re.sub(r'(?<=\d)\.(?=\d)', ':', normalized)  # "3.16" spoken as "3:16"
        normalized = PUNCTUATION_PATTERN.sub(' ', normalized)

        if language is Language.KOREAN:
            for phrase in KOREAN_FILLER_PHRASES:
                normalized = normalized.replace(phrase, ' ')
            normalized = KOREAN_PARTICLE_PATTERN.sub('', normalized)
        else:
            normalized = ENGLISH_FILLER_PATTERN.sub(' ', normalized)

        return ' '.join(normalized.split())

    # ------------------------------------------------------------------
    # Parsing strategies
    # ------------------------------------------------------------------

    def _try_pattern_parsing(self, text: str, language: Language,
                             raw_transcript: str) -> Optional[ParsedReference]:
        for pattern in COMPILED_PATTERNS[language]:
            result = self._match_pattern(pattern, text, language, raw_transcript)
            if result is not None:
                return result
        return None

    def _match_pattern(self, pattern: Pattern, text: str, language: Language,
                       raw_transcript: str) -> Optional[ParsedReference]:
        # Anchored: the lazy book group absorbs any leading words
        match = pattern.match(text)
        if not match:
            return None

        book_text = _TRAILING_KEYWORDS.sub('', match.group('book').strip())
        chapter = int(match.group('chapter'))
        verse_text = match.groupdict().get('verse')
        verse = int(verse_text) if verse_text else None

        book_match = self.find_book(book_text)
        return self._build_reference(book_match, chapter, verse, language, raw_transcript)

    def _try_fuzzy_parsing(self, text: str, language: Language,
                           raw_transcript: str) -> Optional[ParsedReference]:
        converted = replace_number_words(text, language)
        converted = _HANGUL_DIGIT_BOUNDARY.sub(' ', converted)

        # Spelled-out numbers may now fit one of the reference patterns
        if converted != text:
            self._log(f"      ℹ Number words converted: '{text}' → '{converted}'")
            result = self._try_pattern_parsing(converted, language, raw_transcript)
            if result is not None:
                return result

        book_candidate, numbers = split_book_and_numbers(converted)
        if not book_candidate or not numbers:
            return None

        chapter = numbers[0]
        verse = numbers[1] if len(numbers) > 1 else None
        book_match = self.find_book(book_candidate)
        return self._build_reference(book_match, chapter, verse, language, raw_transcript)

    def _try_book_only_parsing(self, text: str, language: Language,
                               raw_transcript: str) -> Optional[ParsedReference]:
        _, numbers = split_book_and_numbers(replace_number_words(text, language))
        if numbers:
            return None

        book_match = self.find_book(text)
        if book_match.book is None or book_match.confidence is ParseConfidence.LOW:
            return None

        # Chapter and verse are left for the caller to default
        return ParsedReference(
            book=book_match.book,
            chapter=None,
            verse=None,
            detected_language=language,
            raw_transcript=raw_transcript,
            confidence=book_match.confidence,
            alternative_books=book_match.alternatives,
        )

    def _build_reference(self, book_match: BookMatch, chapter: int, verse: Optional[int],
                         language: Language, raw_transcript: str) -> Optional[ParsedReference]:
        book = book_match.book
        if book is None:
            return None
        if not book.has_chapter(chapter):
            self._log(f"      ⚠ Rejected {book.name_en} {chapter}: only {book.chapter_count} chapters")
            return None
        if verse is not None and verse < 1:
            return None

        return ParsedReference(
            book=book,
            chapter=chapter,
            verse=verse,
            detected_language=language,
            raw_transcript=raw_transcript,
            confidence=book_match.confidence,
            alternative_books=book_match.alternatives,
        )

    # ------------------------------------------------------------------
    # Book matching
    # ------------------------------------------------------------------

    def find_book(self, text: str) -> BookMatch:
        """
        Resolve a book-name candidate.

        Stages, first hit wins:
        1. Exact alias (HIGH)
        2. Prefix in either direction (MEDIUM, all hits in canonical order)
        3. Substring in either direction (MEDIUM, all hits in canonical order)
        4. Levenshtein distance within max(2, len/2) (HIGH/MEDIUM/LOW by distance)

        Args:
            text: Candidate book name, e.g. "john", "사무엘", "genisis"

        Returns:
            BookMatch; book is None if nothing is close enough
        """
        search = text.lower().strip()
        if len(search) < 1 or not any(char.isalpha() for char in search):
            return NO_BOOK_MATCH

        book_id = self.alias_map.get(search)
        if book_id in self.books_by_id:
            return BookMatch(
                book=self.books_by_id[book_id],
                confidence=ParseConfidence.HIGH,
                distance=0,
            )

        prefix_hits = self._collect_books(
            lambda alias: alias.startswith(search) or search.startswith(alias)
        )
        if prefix_hits:
            return self._ordered_match(prefix_hits)

        contains_hits = self._collect_books(
            lambda alias: alias in search or search in alias
        )
        if contains_hits:
            return self._ordered_match(contains_hits)

        return self._fuzzy_match(search)

    def _collect_books(self, predicate: Callable[[str], bool]) -> List[BibleBook]:
        """Books with at least one alias matching predicate, in canonical order."""
        found: Dict[str, BibleBook] = {}
        for alias, book in zip(self._aliases, self._alias_books):
            if book.id not in found and predicate(alias):
                found[book.id] = book
        return sorted(found.values(), key=lambda b: b.order)

    @staticmethod
    def _ordered_match(books: List[BibleBook]) -> BookMatch:
        # Earlier books win ties (사무엘상 before 사무엘하)
        return BookMatch(
            book=books[0],
            confidence=ParseConfidence.MEDIUM,
            alternatives=tuple(books[1:]),
        )

    def _fuzzy_match(self, search: str) -> BookMatch:
        if not self._aliases:
            return NO_BOOK_MATCH

        distances = process.cdist(
            [search], self._aliases, scorer=Levenshtein.distance, dtype=np.int32
        )[0]
        max_allowed = max(FUZZY_MIN_DISTANCE, len(search) // 2)
        within = np.flatnonzero(distances <= max_allowed)
        if within.size == 0:
            self._log(f"      ⚠ No alias within {max_allowed} edits of '{search}'")
            return NO_BOOK_MATCH

        # Sort by distance, then canonical order; first hit per book is its best alias
        ranked = within[np.lexsort((self._alias_orders[within], distances[within]))]
        best_per_book: List[Tuple[BibleBook, int, str]] = []
        seen = set()
        for index in ranked:
            book = self._alias_books[index]
            if book.id in seen:
                continue
            seen.add(book.id)
            best_per_book.append((book, int(distances[index]), self._aliases[index]))

        best_book, best_distance, best_alias = best_per_book[0]
        self._log(f"      ℹ Fuzzy match '{search}' → '{best_alias}' ({best_distance} edits)")
        alternatives = tuple(
            book for book, distance, _ in best_per_book[1:]
            if distance <= best_distance + FUZZY_ALTERNATIVE_SLACK
        )[:MAX_FUZZY_ALTERNATIVES]

        return BookMatch(
            book=best_book,
            confidence=_confidence_for_distance(best_distance),
            alternatives=alternatives,
            distance=best_distance,
        )


# ============================================================================
# SHARED INSTANCE
# ============================================================================

shared_parser = BibleReferenceParser()


def parse_reference(transcript: str) -> ParsedReference:
    """Parse a transcript with the process-wide parser."""
    return shared_parser.parse(transcript)


def find_book(text: str) -> BookMatch:
    return shared_parser.find_book(text)


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    parser = BibleReferenceParser(verbose=True)
    for argument in sys.argv[1:] or ["John 3:16"]:
        parsed = parser.parse(argument)
        print(f"{argument!r} → {parsed.to_standard_format() or '(no match)'} "
              f"[{parsed.confidence.value}]")
        if parsed.is_ambiguous:
            print(f"   alternatives: {', '.join(b.name_en for b in parsed.alternative_books)}")
