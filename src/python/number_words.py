"""
Spoken Number Normalization

Speech recognizers often spell numbers out ("John three sixteen",
"요한복음 삼장 십육절"). These helpers turn spelled-out English and Korean
numbers into digits so the reference patterns can pick them up.

Only whole words are converted. A Korean token is converted only when the
entire token (minus an optional counter suffix such as 장/절/편) is a number,
so book names that contain number syllables (이사야, 사사기, 요일) are left
alone.
"""

import re
from typing import List, Optional, Tuple

from bible_books import Language


# ============================================================================
# ENGLISH NUMBER WORDS
# ============================================================================

ENGLISH_SMALL_NUMBERS = {
    'one': 1, 'two': 2, 'three': 3, 'four': 4, 'five': 5,
    'six': 6, 'seven': 7, 'eight': 8, 'nine': 9, 'ten': 10,
    'eleven': 11, 'twelve': 12, 'thirteen': 13, 'fourteen': 14, 'fifteen': 15,
    'sixteen': 16, 'seventeen': 17, 'eighteen': 18, 'nineteen': 19,
}

ENGLISH_TENS = {
    'twenty': 20, 'thirty': 30, 'forty': 40, 'fifty': 50,
    'sixty': 60, 'seventy': 70, 'eighty': 80, 'ninety': 90,
}

ENGLISH_ORDINALS = {
    'first': 1, 'second': 2, 'third': 3, 'fourth': 4, 'fifth': 5,
    'sixth': 6, 'seventh': 7, 'eighth': 8, 'ninth': 9, 'tenth': 10,
    'eleventh': 11, 'twelfth': 12, 'thirteenth': 13, 'fourteenth': 14,
    'fifteenth': 15, 'sixteenth': 16, 'seventeenth': 17, 'eighteenth': 18,
    'nineteenth': 19, 'twentieth': 20, 'thirtieth': 30, 'fortieth': 40,
    'fiftieth': 50,
}

NUMERIC_ORDINAL_PATTERN = re.compile(r'^(\d+)(st|nd|rd|th)$')


def _ordinal_suffix(value: int) -> str:
    if value % 100 in (11, 12, 13):
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(value % 10, 'th')


def _parse_numeric_ordinal(token: str) -> Optional[int]:
    """"3rd" -> 3. Mismatched suffixes ("2th", as in the abbreviation 2Th) are not ordinals."""
    match = NUMERIC_ORDINAL_PATTERN.match(token)
    if match and _ordinal_suffix(int(match.group(1))) == match.group(2):
        return int(match.group(1))
    return None


def _read_below_hundred(tokens: List[str], start: int) -> Tuple[int, int]:
    """Read a 1-99 number at tokens[start]. Returns (value, tokens consumed)."""
    if start >= len(tokens):
        return 0, 0

    token = tokens[start]
    if token in ENGLISH_TENS:
        value = ENGLISH_TENS[token]
        if start + 1 < len(tokens):
            following = tokens[start + 1]
            if ENGLISH_SMALL_NUMBERS.get(following, 0) in range(1, 10):
                return value + ENGLISH_SMALL_NUMBERS[following], 2
            if ENGLISH_ORDINALS.get(following, 0) in range(1, 10):
                # "twenty first"
                return value + ENGLISH_ORDINALS[following], 2
        return value, 1

    if token in ENGLISH_SMALL_NUMBERS:
        return ENGLISH_SMALL_NUMBERS[token], 1
    if token in ENGLISH_ORDINALS:
        return ENGLISH_ORDINALS[token], 1
    return 0, 0


def parse_english_number(tokens: List[str], start: int = 0) -> Tuple[Optional[int], int]:
    """
    Parse a spelled-out English number beginning at tokens[start].

    Consecutive standalone numbers are NOT merged: ["three", "sixteen"] reads
    as 3 (consuming one token), leaving "sixteen" for the next call.

    Args:
        tokens: Lowercase word tokens
        start: Index of the first token to read

    Returns:
        Tuple of (value, tokens consumed), or (None, 0) if no number starts here
    """
    if start >= len(tokens):
        return None, 0

    token = tokens[start]
    numeric = _parse_numeric_ordinal(token)
    if numeric is not None:
        return numeric, 1

    unit = ENGLISH_SMALL_NUMBERS.get(token)
    if unit is not None and 1 <= unit <= 9 and start + 1 < len(tokens) and tokens[start + 1] == 'hundred':
        # "one hundred fifty", "one hundred and nineteen"
        value = unit * 100
        position = start + 2
        if position < len(tokens) and tokens[position] == 'and':
            rest, used = _read_below_hundred(tokens, position + 1)
            if used:
                return value + rest, position + 1 + used - start
            return value, position - start
        rest, used = _read_below_hundred(tokens, position)
        return value + rest, position + used - start

    value, used = _read_below_hundred(tokens, start)
    if used:
        return value, used
    return None, 0


def replace_english_number_words(text: str) -> str:
    """
    Replace spelled-out English numbers with digits.

    "john three sixteen" -> "john 3 16"
    "psalm one hundred and nineteen" -> "psalm 119"
    "first john chapter twenty-one" -> "1 john chapter 21"
    """
    # Hyphenated compounds read the same as spaced ones
    spaced = re.sub(r'(?<=[a-z])-(?=[a-z])', ' ', text.lower())
    tokens = spaced.split()

    output: List[str] = []
    index = 0
    while index < len(tokens):
        value, used = parse_english_number(tokens, index)
        if used:
            output.append(str(value))
            index += used
        else:
            output.append(tokens[index])
            index += 1
    return ' '.join(output)


# ============================================================================
# KOREAN NUMBER WORDS
# ============================================================================

# Sino-Korean digits and units (일, 이, 삼 ... 십, 백)
SINO_KOREAN_DIGITS = {
    '일': 1, '이': 2, '삼': 3, '사': 4, '오': 5,
    '육': 6, '륙': 6, '칠': 7, '팔': 8, '구': 9,
}
SINO_KOREAN_UNITS = {'십': 10, '백': 100}

# Native Korean counting words, including the determiner forms used before
# counters (한 장, 두 절, 스무 편)
NATIVE_KOREAN_TENS = {
    '열': 10, '스물': 20, '스무': 20, '서른': 30, '마흔': 40,
    '쉰': 50, '예순': 60, '일흔': 70, '여든': 80, '아흔': 90,
}
NATIVE_KOREAN_UNITS = {
    '하나': 1, '한': 1, '둘': 2, '두': 2, '셋': 3, '세': 3, '석': 3,
    '넷': 4, '네': 4, '다섯': 5, '여섯': 6, '일곱': 7, '여덟': 8, '아홉': 9,
}

KOREAN_ORDINAL_SUFFIX = '째'
KOREAN_COUNTERS = ('번째', '장', '절', '편')

_KOREAN_NUMBER_TOKEN = re.compile(
    r'^(?P<number>[가-힣]+?)(?P<counter>' + '|'.join(KOREAN_COUNTERS) + r')?$'
)


def _parse_sino_korean(word: str) -> Optional[int]:
    total = 0
    pending: Optional[int] = None
    last_unit: Optional[int] = None

    for char in word:
        if char in SINO_KOREAN_DIGITS:
            if pending is not None:
                return None  # two digits in a row ("사사")
            pending = SINO_KOREAN_DIGITS[char]
        elif char in SINO_KOREAN_UNITS:
            unit = SINO_KOREAN_UNITS[char]
            if last_unit is not None and unit >= last_unit:
                return None
            total += (pending if pending is not None else 1) * unit
            pending = None
            last_unit = unit
        else:
            return None

    total += pending or 0
    return total if total > 0 else None


def _parse_native_korean(word: str) -> Optional[int]:
    tens = 0
    rest = word
    for tens_word in sorted(NATIVE_KOREAN_TENS, key=len, reverse=True):
        if rest.startswith(tens_word):
            tens = NATIVE_KOREAN_TENS[tens_word]
            rest = rest[len(tens_word):]
            break

    if not rest:
        return tens or None
    if rest in NATIVE_KOREAN_UNITS:
        return tens + NATIVE_KOREAN_UNITS[rest]
    return None


def parse_korean_number(word: str) -> Optional[int]:
    """
    Parse a single Korean number word.

    Handles Sino-Korean (삼, 십육, 이십삼, 백오십), native counting words
    (하나, 열둘, 스물셋, 한, 스무) and ordinals (첫째, 둘째, 열두째).

    Returns:
        The integer value, or None if the whole word is not a number
    """
    if not word:
        return None

    if word.endswith(KOREAN_ORDINAL_SUFFIX) and len(word) > 1:
        base = word[:-1]
        if base == '첫':
            return 1
        return _parse_native_korean(base) or _parse_sino_korean(base)

    sino = _parse_sino_korean(word)
    if sino is not None:
        return sino
    return _parse_native_korean(word)


def replace_korean_number_words(text: str) -> str:
    """
    Replace Korean number tokens with digits, keeping counter suffixes.

    "요한복음 삼장 십육절" -> "요한복음 3장 16절"
    "시편 이십삼 편" -> "시편 23 편"
    "창세기 첫째 장" -> "창세기 1 장"
    """
    output: List[str] = []
    for token in text.split():
        match = _KOREAN_NUMBER_TOKEN.match(token)
        value = parse_korean_number(match.group('number')) if match else None
        if match and value is not None:
            counter = match.group('counter') or ''
            if counter == '번째':
                counter = ''
            output.append(f"{value}{counter}")
        else:
            output.append(token)
    return ' '.join(output)


def replace_number_words(text: str, language: Language) -> str:
    """Convert spelled-out numbers for the detected transcript language."""
    if language is Language.KOREAN:
        # Korean transcripts still carry the odd English number ("요한 three")
        return replace_english_number_words(replace_korean_number_words(text))
    return replace_english_number_words(text)
