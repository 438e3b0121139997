"""
Book Alias Table

Maps every spoken or written form of a book name (full names, abbreviations,
Korean short forms, spelled-out numbered books) to its canonical book id.

The table is generated from the catalog and then extended with curated
aliases. It is built once at import and exposed read-only as ALIAS_MAP.

Bare Korean names shared by a numbered pair (사무엘, 열왕기, 역대, 고린도,
데살로니가, 디모데, 베드로) are NOT aliases. They resolve through the prefix
stage of book matching, which returns the first book in canonical order and
offers the others as alternatives.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Set

from bible_books import BIBLE_BOOKS, BibleBook


# ============================================================================
# CURATED ALIASES
# ============================================================================

ENGLISH_ALIASES: Dict[str, str] = {
    # Old Testament
    'gen': 'genesis',
    'ex': 'exodus', 'exod': 'exodus',
    'lev': 'leviticus',
    'num': 'numbers',
    'deut': 'deuteronomy',
    'josh': 'joshua',
    'judg': 'judges',
    '1 sam': '1samuel', '1sam': '1samuel',
    '2 sam': '2samuel', '2sam': '2samuel',
    '1 kgs': '1kings', '1kgs': '1kings',
    '2 kgs': '2kings', '2kgs': '2kings',
    '1 chron': '1chronicles', '1chron': '1chronicles',
    '2 chron': '2chronicles', '2chron': '2chronicles',
    'neh': 'nehemiah',
    'esth': 'esther',
    'ps': 'psalms', 'psalm': 'psalms', 'psa': 'psalms',
    'prov': 'proverbs', 'pro': 'proverbs',
    'eccl': 'ecclesiastes', 'ecc': 'ecclesiastes', 'qoheleth': 'ecclesiastes',
    'song': 'songofsolomon', 'song of songs': 'songofsolomon', 'sos': 'songofsolomon',
    'canticles': 'songofsolomon',
    'isa': 'isaiah',
    'jer': 'jeremiah',
    'lam': 'lamentations',
    'ezek': 'ezekiel', 'eze': 'ezekiel',
    'dan': 'daniel',
    'hos': 'hosea',
    'joe': 'joel',
    'amo': 'amos',
    'obad': 'obadiah', 'oba': 'obadiah',
    'jon': 'jonah',
    'mic': 'micah',
    'nah': 'nahum',
    'hab': 'habakkuk',
    'zeph': 'zephaniah', 'zep': 'zephaniah',
    'hag': 'haggai',
    'zech': 'zechariah', 'zec': 'zechariah',
    'mal': 'malachi',
    # New Testament
    'matt': 'matthew', 'mat': 'matthew',
    'mar': 'mark', 'mk': 'mark',
    'luk': 'luke', 'lk': 'luke',
    'joh': 'john', 'jn': 'john',
    'act': 'acts',
    'rom': 'romans',
    '1 cor': '1corinthians', '1cor': '1corinthians',
    '2 cor': '2corinthians', '2cor': '2corinthians',
    'gal': 'galatians',
    'eph': 'ephesians',
    'phil': 'philippians', 'php': 'philippians',
    'col': 'colossians',
    '1 thess': '1thessalonians', '1thess': '1thessalonians',
    '2 thess': '2thessalonians', '2thess': '2thessalonians',
    '1 tim': '1timothy', '1tim': '1timothy',
    '2 tim': '2timothy', '2tim': '2timothy',
    'tit': 'titus',
    'phm': 'philemon', 'phlm': 'philemon',
    'heb': 'hebrews',
    'jas': 'james', 'jam': 'james',
    '1 pet': '1peter', '1pet': '1peter',
    '2 pet': '2peter', '2pet': '2peter',
    '1 jn': '1john', '1jn': '1john',
    '2 jn': '2john', '2jn': '2john',
    '3 jn': '3john', '3jn': '3john',
    'jud': 'jude',
    'rev': 'revelation', 'revelations': 'revelation', 'apocalypse': 'revelation',
}

KOREAN_ALIASES: Dict[str, str] = {
    '창세': 'genesis', '창': 'genesis',
    '출애굽': 'exodus', '출': 'exodus',
    '레위': 'leviticus', '레': 'leviticus',
    '민수': 'numbers', '민': 'numbers',
    '신명': 'deuteronomy',
    '여호수아': 'joshua', '여호': 'joshua',
    '사사': 'judges', '삿': 'judges',
    '룻': 'ruth',
    '삼상': '1samuel', '삼하': '2samuel',
    '왕상': '1kings', '왕하': '2kings',
    '대상': '1chronicles', '대하': '2chronicles',
    '느혜미야': 'nehemiah', '느': 'nehemiah',
    '욥': 'job',
    '시편': 'psalms', '시': 'psalms',
    '잠언': 'proverbs', '잠': 'proverbs',
    '전도서': 'ecclesiastes', '전도': 'ecclesiastes',
    '아가': 'songofsolomon',
    '이사야': 'isaiah', '사야': 'isaiah',
    '예레미야': 'jeremiah', '렘': 'jeremiah',
    '애가': 'lamentations', '애': 'lamentations',
    '에스겔': 'ezekiel', '겔': 'ezekiel',
    '다니엘': 'daniel', '단': 'daniel',
    '욜': 'joel',
    '암': 'amos',
    '옵': 'obadiah',
    '욘': 'jonah',
    '합': 'habakkuk',
    '습': 'zephaniah',
    '슥': 'zechariah',
    '마태': 'matthew', '마': 'matthew',
    '마가': 'mark', '막': 'mark',
    '누가': 'luke', '눅': 'luke',
    '요한': 'john', '요': 'john',
    '행전': 'acts', '행': 'acts',
    '롬': 'romans',
    '고전': '1corinthians', '고후': '2corinthians',
    '갈': 'galatians',
    '엡': 'ephesians',
    '빌': 'philippians',
    '골': 'colossians',
    '살전': '1thessalonians', '살후': '2thessalonians',
    '딤전': '1timothy', '딤후': '2timothy',
    '딛': 'titus',
    '몬': 'philemon',
    '히': 'hebrews',
    '약': 'james',
    '벧전': '1peter', '벧후': '2peter',
    '요일': '1john', '요이': '2john', '요삼': '3john',
    '요한서': '1john',
    '유': 'jude',
    '계시록': 'revelation', '계': 'revelation',
}


# ============================================================================
# GENERATED ALIASES
# ============================================================================

_NUMBER_PREFIXES = {
    '1': ('first', '1st', 'i'),
    '2': ('second', '2nd', 'ii'),
    '3': ('third', '3rd', 'iii'),
}

# Korean suffixes that distinguish numbered pairs (상/하, 전서/후서, 일서/이서/삼서)
_KOREAN_PAIR_SUFFIXES = ('상', '하', '전서', '후서', '일서', '이서', '삼서')


def _english_forms(book: BibleBook) -> List[str]:
    name = book.name_en.lower()
    forms = [book.id.lower(), name, name.replace(' ', ''), book.abbr_en.lower()]

    number, _, rest = name.partition(' ')
    if number in _NUMBER_PREFIXES and rest:
        forms.extend(f"{prefix} {rest}" for prefix in _NUMBER_PREFIXES[number])
    return forms


def _korean_forms(book: BibleBook) -> List[str]:
    name = book.name_kr
    forms = [name]
    for suffix in _KOREAN_PAIR_SUFFIXES:
        stem = name[:-len(suffix)]
        if name.endswith(suffix) and len(stem) >= 2:
            # "사무엘 상" as well as "사무엘상"
            forms.append(f"{stem} {suffix}")
            break
    return forms


def _unique_short_forms(books: Iterable[BibleBook]) -> Dict[str, str]:
    """Two-syllable Korean short forms that belong to exactly one book."""
    owners: Dict[str, Set[str]] = {}
    for book in books:
        if len(book.name_kr) >= 2:
            owners.setdefault(book.name_kr[:2], set()).add(book.id)
    return {
        short_form: next(iter(ids))
        for short_form, ids in owners.items()
        if len(ids) == 1
    }


def build_alias_map(books: Iterable[BibleBook] = BIBLE_BOOKS) -> Mapping[str, str]:
    """
    Build the alias -> canonical book id mapping.

    Generated forms are added first, then the curated English and Korean
    aliases, which take precedence. Aliases pointing at ids that are not in
    the given catalog are dropped.

    Returns:
        Read-only mapping from normalized alias to book id
    """
    books = list(books)
    known_ids = {book.id for book in books}
    aliases: Dict[str, str] = {}

    for short_form, book_id in _unique_short_forms(books).items():
        aliases[short_form] = book_id

    for book in books:
        for form in _english_forms(book) + _korean_forms(book):
            aliases[form] = book.id

    for curated in (ENGLISH_ALIASES, KOREAN_ALIASES):
        for alias, book_id in curated.items():
            if book_id in known_ids:
                aliases[alias] = book_id

    return MappingProxyType(aliases)


ALIAS_MAP: Mapping[str, str] = build_alias_map()
