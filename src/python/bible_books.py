"""
Bible Book Catalog

The fixed, ordered list of the 66 Protestant canon books used by the reference
parser and the voice search UI. Each book carries a stable id, English and
Korean display names, standard abbreviations, its canonical order (1-66) and
its chapter count (used for chapter range validation).

The catalog is built once at import time and never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
import re


# ============================================================================
# LANGUAGE
# ============================================================================

class Language(str, Enum):
    """Language of a transcript or display name."""
    KOREAN = 'kr'
    ENGLISH = 'en'

    @classmethod
    def from_code(cls, code: str) -> 'Language':
        """
        Map a language code to a Language.

        Korean ("ko") maps to KOREAN; every other code falls back to ENGLISH.
        """
        if (code or '').lower() in ('ko', 'kr'):
            return cls.KOREAN
        return cls.ENGLISH

    @property
    def display_name(self) -> str:
        return 'KR' if self is Language.KOREAN else 'EN'

    @property
    def full_name(self) -> str:
        return '한국어' if self is Language.KOREAN else 'English'


class BookSortOrder(str, Enum):
    CANONICAL = 'canonical'
    ALPHABETICAL = 'alphabetical'


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class BibleBook:
    """A canonical Bible book."""
    id: str  # Stable identifier, e.g. "genesis", "1samuel"
    name_en: str
    name_kr: str
    abbr_en: str  # Unique 3-character abbreviation, e.g. "Gen", "1Sa"
    abbr_kr: str  # Standard Korean abbreviation, e.g. "창", "삼상"
    chapter_count: int
    order: int  # Canonical order, 1-66

    @property
    def is_single_chapter(self) -> bool:
        return self.chapter_count == 1

    @property
    def is_old_testament(self) -> bool:
        return self.order <= 39

    @property
    def is_new_testament(self) -> bool:
        return self.order > 39

    def has_chapter(self, chapter: int) -> bool:
        return 1 <= chapter <= self.chapter_count

    def name(self, language: Language) -> str:
        return self.name_kr if language is Language.KOREAN else self.name_en

    def abbreviation(self, language: Language) -> str:
        return self.abbr_kr if language is Language.KOREAN else self.abbr_en

    def to_dict(self) -> Dict[str, object]:
        return {
            'id': self.id,
            'nameEn': self.name_en,
            'nameKr': self.name_kr,
            'abbrEn': self.abbr_en,
            'abbrKr': self.abbr_kr,
            'chapterCount': self.chapter_count,
            'order': self.order,
        }


# ============================================================================
# BIBLE BOOK DATA
# ============================================================================

# (id, English name, Korean name, English abbr, Korean abbr, chapters)
_BOOK_ROWS: List[Tuple[str, str, str, str, str, int]] = [
    # Old Testament
    ('genesis', 'Genesis', '창세기', 'Gen', '창', 50),
    ('exodus', 'Exodus', '출애굽기', 'Exo', '출', 40),
    ('leviticus', 'Leviticus', '레위기', 'Lev', '레', 27),
    ('numbers', 'Numbers', '민수기', 'Num', '민', 36),
    ('deuteronomy', 'Deuteronomy', '신명기', 'Deu', '신', 34),
    ('joshua', 'Joshua', '여호수아', 'Jos', '수', 24),
    ('judges', 'Judges', '사사기', 'Jdg', '삿', 21),
    ('ruth', 'Ruth', '룻기', 'Rut', '룻', 4),
    ('1samuel', '1 Samuel', '사무엘상', '1Sa', '삼상', 31),
    ('2samuel', '2 Samuel', '사무엘하', '2Sa', '삼하', 24),
    ('1kings', '1 Kings', '열왕기상', '1Ki', '왕상', 22),
    ('2kings', '2 Kings', '열왕기하', '2Ki', '왕하', 25),
    ('1chronicles', '1 Chronicles', '역대상', '1Ch', '대상', 29),
    ('2chronicles', '2 Chronicles', '역대하', '2Ch', '대하', 36),
    ('ezra', 'Ezra', '에스라', 'Ezr', '스', 10),
    ('nehemiah', 'Nehemiah', '느헤미야', 'Neh', '느', 13),
    ('esther', 'Esther', '에스더', 'Est', '에', 10),
    ('job', 'Job', '욥기', 'Job', '욥', 42),
    ('psalms', 'Psalms', '시편', 'Psa', '시', 150),
    ('proverbs', 'Proverbs', '잠언', 'Pro', '잠', 31),
    ('ecclesiastes', 'Ecclesiastes', '전도서', 'Ecc', '전', 12),
    ('songofsolomon', 'Song of Solomon', '아가', 'Sng', '아', 8),
    ('isaiah', 'Isaiah', '이사야', 'Isa', '사', 66),
    ('jeremiah', 'Jeremiah', '예레미야', 'Jer', '렘', 52),
    ('lamentations', 'Lamentations', '예레미야애가', 'Lam', '애', 5),
    ('ezekiel', 'Ezekiel', '에스겔', 'Ezk', '겔', 48),
    ('daniel', 'Daniel', '다니엘', 'Dan', '단', 12),
    ('hosea', 'Hosea', '호세아', 'Hos', '호', 14),
    ('joel', 'Joel', '요엘', 'Jol', '욜', 3),
    ('amos', 'Amos', '아모스', 'Amo', '암', 9),
    ('obadiah', 'Obadiah', '오바댜', 'Oba', '옵', 1),
    ('jonah', 'Jonah', '요나', 'Jon', '욘', 4),
    ('micah', 'Micah', '미가', 'Mic', '미', 7),
    ('nahum', 'Nahum', '나훔', 'Nam', '나', 3),
    ('habakkuk', 'Habakkuk', '하박국', 'Hab', '합', 3),
    ('zephaniah', 'Zephaniah', '스바냐', 'Zep', '습', 3),
    ('haggai', 'Haggai', '학개', 'Hag', '학', 2),
    ('zechariah', 'Zechariah', '스가랴', 'Zec', '슥', 14),
    ('malachi', 'Malachi', '말라기', 'Mal', '말', 4),
    # New Testament
    ('matthew', 'Matthew', '마태복음', 'Mat', '마', 28),
    ('mark', 'Mark', '마가복음', 'Mrk', '막', 16),
    ('luke', 'Luke', '누가복음', 'Luk', '눅', 24),
    ('john', 'John', '요한복음', 'Jhn', '요', 21),
    ('acts', 'Acts', '사도행전', 'Act', '행', 28),
    ('romans', 'Romans', '로마서', 'Rom', '롬', 16),
    ('1corinthians', '1 Corinthians', '고린도전서', '1Co', '고전', 16),
    ('2corinthians', '2 Corinthians', '고린도후서', '2Co', '고후', 13),
    ('galatians', 'Galatians', '갈라디아서', 'Gal', '갈', 6),
    ('ephesians', 'Ephesians', '에베소서', 'Eph', '엡', 6),
    ('philippians', 'Philippians', '빌립보서', 'Php', '빌', 4),
    ('colossians', 'Colossians', '골로새서', 'Col', '골', 4),
    ('1thessalonians', '1 Thessalonians', '데살로니가전서', '1Th', '살전', 5),
    ('2thessalonians', '2 Thessalonians', '데살로니가후서', '2Th', '살후', 3),
    ('1timothy', '1 Timothy', '디모데전서', '1Ti', '딤전', 6),
    ('2timothy', '2 Timothy', '디모데후서', '2Ti', '딤후', 4),
    ('titus', 'Titus', '디도서', 'Tit', '딛', 3),
    ('philemon', 'Philemon', '빌레몬서', 'Phm', '몬', 1),
    ('hebrews', 'Hebrews', '히브리서', 'Heb', '히', 13),
    ('james', 'James', '야고보서', 'Jas', '약', 5),
    ('1peter', '1 Peter', '베드로전서', '1Pe', '벧전', 5),
    ('2peter', '2 Peter', '베드로후서', '2Pe', '벧후', 3),
    ('1john', '1 John', '요한일서', '1Jn', '요일', 5),
    ('2john', '2 John', '요한이서', '2Jn', '요이', 1),
    ('3john', '3 John', '요한삼서', '3Jn', '요삼', 1),
    ('jude', 'Jude', '유다서', 'Jud', '유', 1),
    ('revelation', 'Revelation', '요한계시록', 'Rev', '계', 22),
]

BIBLE_BOOKS: Tuple[BibleBook, ...] = tuple(
    BibleBook(
        id=book_id, name_en=name_en, name_kr=name_kr,
        abbr_en=abbr_en, abbr_kr=abbr_kr,
        chapter_count=chapters, order=index,
    )
    for index, (book_id, name_en, name_kr, abbr_en, abbr_kr, chapters)
    in enumerate(_BOOK_ROWS, start=1)
)

BOOKS_BY_ID: Mapping[str, BibleBook] = MappingProxyType({book.id: book for book in BIBLE_BOOKS})

BOOK_CHAPTER_COUNTS: Mapping[str, int] = MappingProxyType(
    {book.id: book.chapter_count for book in BIBLE_BOOKS}
)

SINGLE_CHAPTER_BOOK_IDS = frozenset(book.id for book in BIBLE_BOOKS if book.is_single_chapter)


# ============================================================================
# LOOKUPS
# ============================================================================

def book_by_id(book_id: str) -> Optional[BibleBook]:
    return BOOKS_BY_ID.get(book_id)


def book_at(order: int) -> Optional[BibleBook]:
    """Get the book at a canonical position (1-66)."""
    if 1 <= order <= len(BIBLE_BOOKS):
        return BIBLE_BOOKS[order - 1]
    return None


def next_book(book: BibleBook) -> Optional[BibleBook]:
    return book_at(book.order + 1)


def previous_book(book: BibleBook) -> Optional[BibleBook]:
    return book_at(book.order - 1)


def is_valid_chapter(book_id: str, chapter: int) -> bool:
    """
    Check that a chapter number exists in the given book.

    Args:
        book_id: Canonical book id (e.g., "genesis")
        chapter: Chapter number to validate

    Returns:
        True if 1 <= chapter <= the book's chapter count. Unknown books are
        never valid.
    """
    book = BOOKS_BY_ID.get(book_id)
    return book is not None and book.has_chapter(chapter)


def _english_sort_key(name: str) -> Tuple[str, int]:
    # "1 John" and "2 John" sort next to each other, by number
    match = re.match(r'^(\d+)\s+(.*)$', name)
    if match:
        return (match.group(2).lower(), int(match.group(1)))
    return (name.lower(), 0)


def sorted_books(sort_order: BookSortOrder = BookSortOrder.CANONICAL,
                 language: Language = Language.ENGLISH,
                 books: Tuple[BibleBook, ...] = BIBLE_BOOKS) -> List[BibleBook]:
    """
    Return the books in canonical or alphabetical order.

    Korean alphabetical order (가나다순) is the Hangul syllable code point order,
    so plain string comparison of the Korean names is sufficient.
    """
    if sort_order is BookSortOrder.ALPHABETICAL:
        if language is Language.KOREAN:
            return sorted(books, key=lambda b: b.name_kr)
        return sorted(books, key=lambda b: _english_sort_key(b.name_en))
    return sorted(books, key=lambda b: b.order)
