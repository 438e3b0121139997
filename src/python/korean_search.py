"""
Korean 초성 / Partial-Syllable Search

Lets the book picker match Korean book names while the user is still typing
or speaking:

- Substring:        "세기"  -> 창세기
- Initial sounds:   "ㅊㅅ"  -> 창세기 (초성 search)
- Partial syllable: "차"    -> 창세기 (the last syllable has no final
                                consonant yet, so it matches 창, 찬, 참, ...)
"""

from typing import List, Optional, Sequence

from bible_books import BIBLE_BOOKS, BibleBook, Language

# The 19 initial consonants (초성), in Unicode composition order
CHOSEONG = (
    'ㄱ', 'ㄲ', 'ㄴ', 'ㄷ', 'ㄸ', 'ㄹ', 'ㅁ', 'ㅂ', 'ㅃ',
    'ㅅ', 'ㅆ', 'ㅇ', 'ㅈ', 'ㅉ', 'ㅊ', 'ㅋ', 'ㅌ', 'ㅍ', 'ㅎ',
)

HANGUL_BASE = 0xAC00  # 가
HANGUL_END = 0xD7A3   # 힣
CHOSEONG_UNIT = 588   # 21 medials x 28 finals
JONGSEONG_UNIT = 28


def _is_syllable(char: str) -> bool:
    return HANGUL_BASE <= ord(char) <= HANGUL_END


def get_choseong(char: str) -> Optional[str]:
    """Initial consonant of a Hangul syllable (or the consonant itself)."""
    if char in CHOSEONG:
        return char
    if _is_syllable(char):
        return CHOSEONG[(ord(char) - HANGUL_BASE) // CHOSEONG_UNIT]
    return None


def extract_choseong(text: str) -> str:
    """"창세기" -> "ㅊㅅㄱ". Non-Hangul characters are dropped."""
    return ''.join(c for c in (get_choseong(char) for char in text) if c)


def is_all_choseong(text: str) -> bool:
    return bool(text) and all(char in CHOSEONG for char in text)


def _syllable_matches(query: str, target: str, allow_partial: bool) -> bool:
    if query == target:
        return True

    if query in CHOSEONG:
        return get_choseong(target) == query

    if allow_partial and _is_syllable(query) and _is_syllable(target):
        query_offset = ord(query) - HANGUL_BASE
        if query_offset % JONGSEONG_UNIT == 0:
            # No final consonant: compare initial + medial only
            target_offset = ord(target) - HANGUL_BASE
            return query_offset // JONGSEONG_UNIT == target_offset // JONGSEONG_UNIT

    return False


def _matches_at(query: str, target: str, start: int) -> bool:
    if start + len(query) > len(target):
        return False
    last = len(query) - 1
    for offset, query_char in enumerate(query):
        target_char = target[start + offset]
        if offset == last:
            if not _syllable_matches(query_char, target_char, allow_partial=True):
                return False
        elif query_char != target_char:
            return False
    return True


def matches(query: str, target: str) -> bool:
    """
    Check whether a (possibly incomplete) Korean query matches a target.

    Args:
        query: What the user has typed so far, e.g. "ㅊ", "차", "창세"
        target: Name to match against, e.g. "창세기"

    Returns:
        True on a substring, 초성 or partial-syllable match. An empty query
        matches everything.
    """
    query = query.strip()
    if not query:
        return True

    if query in target:
        return True

    if is_all_choseong(query):
        return query in extract_choseong(target)

    return any(_matches_at(query, target, start) for start in range(len(target)))


def search_books(query: str, language: Optional[Language] = None,
                 books: Sequence[BibleBook] = BIBLE_BOOKS) -> List[BibleBook]:
    """
    Filter books by a search query, keeping canonical order.

    Korean names use the 초성/partial matching above. English names, ids and
    abbreviations use a case-insensitive substring match. With no language
    given, a book matches if either side matches.
    """
    query = query.strip()
    if not query:
        return list(books)

    lowered = query.lower()
    results = []
    for book in books:
        korean_hit = matches(query, book.name_kr) or matches(query, book.abbr_kr)
        english_hit = any(
            lowered in field.lower() for field in (book.name_en, book.id, book.abbr_en)
        )
        if language is Language.KOREAN:
            hit = korean_hit
        elif language is Language.ENGLISH:
            hit = english_hit
        else:
            hit = korean_hit or english_hit
        if hit:
            results.append(book)
    return results
