#!/usr/bin/env python3
"""
Tests for the voice Bible reference parser.

Covers:
- Every book name/abbreviation parses to its own book (English, Korean, 3-letter)
- Standard reference formats in both languages
- Spelled-out numbers ("john three sixteen", "요한복음 삼장 십육절")
- Ambiguous names return alternatives in canonical order
- Chapter range validation (Genesis 51 is never Genesis 51)
- Book matching stages (exact, prefix, contains, fuzzy)
- Fuzzy ranking (primary distance <= every alternative's distance)
- Normalization and language detection
- Output formatting (to_standard_format, to_dict)
"""

import dataclasses
import sys
import os
import time
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bible_books import BIBLE_BOOKS, Language, book_by_id
from book_aliases import ALIAS_MAP
from reference_parser import (
    MAX_FUZZY_ALTERNATIVES,
    BibleReferenceParser,
    BookMatch,
    ParseConfidence,
    ParsedReference,
    find_book,
    levenshtein_distance,
    parse_reference,
    shared_parser,
    split_book_and_numbers,
)


def _best_alias_distance(search: str, book_id: str) -> int:
    """Smallest edit distance from search to any alias of book_id."""
    return min(
        levenshtein_distance(search, alias)
        for alias, alias_book in ALIAS_MAP.items()
        if alias_book == book_id
    )


class TestEveryBook(unittest.TestCase):
    """Each canonical name or abbreviation resolves to its own book, unambiguously."""

    def _assert_exact(self, transcript, book):
        result = parse_reference(transcript)
        self.assertIsNotNone(result.book, transcript)
        self.assertEqual(result.book.id, book.id, transcript)
        self.assertEqual(result.confidence, ParseConfidence.HIGH, transcript)
        self.assertEqual(result.alternative_books, (), transcript)

    def test_english_names(self):
        for book in BIBLE_BOOKS:
            with self.subTest(book=book.name_en):
                self._assert_exact(book.name_en, book)

    def test_korean_names(self):
        for book in BIBLE_BOOKS:
            with self.subTest(book=book.name_kr):
                self._assert_exact(book.name_kr, book)

    def test_english_abbreviations(self):
        for book in BIBLE_BOOKS:
            with self.subTest(book=book.abbr_en):
                self._assert_exact(book.abbr_en, book)

    def test_canonical_ids_resolve_to_themselves(self):
        for book in BIBLE_BOOKS:
            match = find_book(book.id)
            self.assertEqual(match.book, book)
            self.assertEqual(match.confidence, ParseConfidence.HIGH)


class TestStandardReferences(unittest.TestCase):

    def test_english_chapter_and_verse(self):
        result = parse_reference("John 3:16")
        self.assertEqual(result.book.id, 'john')
        self.assertEqual(result.chapter, 3)
        self.assertEqual(result.verse, 16)
        self.assertEqual(result.confidence, ParseConfidence.HIGH)
        self.assertIs(result.detected_language, Language.ENGLISH)
        self.assertTrue(result.is_complete)

    def test_korean_chapter_and_verse(self):
        result = parse_reference("요한복음 3장 16절")
        self.assertEqual(result.book.id, 'john')
        self.assertEqual(result.chapter, 3)
        self.assertEqual(result.verse, 16)
        self.assertEqual(result.confidence, ParseConfidence.HIGH)
        self.assertIs(result.detected_language, Language.KOREAN)

    def test_space_separated_numbers(self):
        result = parse_reference("gen 1 1")
        self.assertEqual(result.book.id, 'genesis')
        self.assertEqual((result.chapter, result.verse), (1, 1))

    def test_chapter_only(self):
        result = parse_reference("Romans 8")
        self.assertEqual(result.book.id, 'romans')
        self.assertEqual(result.chapter, 8)
        self.assertIsNone(result.verse)
        self.assertTrue(result.is_valid)
        self.assertFalse(result.is_complete)

    def test_chapter_and_verse_keywords(self):
        result = parse_reference("John chapter 3 verse 16")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('john', 3, 16))

        result = parse_reference("Romans chapter 8")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('romans', 8, None))

        result = parse_reference("John 3 verse 16")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('john', 3, 16))

    def test_numbered_books(self):
        result = parse_reference("1 John 3:16")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('1john', 3, 16))

        result = parse_reference("first corinthians 13 4")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('1corinthians', 13, 4))

    def test_spoken_period_separator(self):
        result = parse_reference("Show me John 3.16, please!")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('john', 3, 16))

    def test_psalms_counter(self):
        result = parse_reference("시편 23편")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('psalms', 23, None))

        result = parse_reference("시편 23편 1절")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('psalms', 23, 1))

    def test_korean_abbreviation_with_colon(self):
        result = parse_reference("창세기 1:1")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('genesis', 1, 1))

    def test_korean_particles_and_fillers(self):
        result = parse_reference("요한복음 3장을 보여줘")
        self.assertEqual((result.book.id, result.chapter), ('john', 3))


class TestSpokenNumbers(unittest.TestCase):

    def test_english_number_words(self):
        result = parse_reference("john three sixteen")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('john', 3, 16))

    def test_english_hundreds(self):
        result = parse_reference("psalm one hundred and nineteen")
        self.assertEqual((result.book.id, result.chapter), ('psalms', 119))

    def test_korean_number_words(self):
        result = parse_reference("요한복음 삼장 십육절")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('john', 3, 16))

    def test_korean_attached_digits(self):
        result = parse_reference("요한복음3장16절")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('john', 3, 16))


class TestAmbiguity(unittest.TestCase):

    def test_bare_samuel_in_korean(self):
        result = parse_reference("사무엘")
        self.assertEqual(result.book.id, '1samuel')
        self.assertEqual(result.confidence, ParseConfidence.MEDIUM)
        self.assertIn(book_by_id('2samuel'), result.alternative_books)
        self.assertTrue(result.is_ambiguous)

    def test_bare_samuel_with_chapter(self):
        result = parse_reference("사무엘 3장")
        self.assertEqual((result.book.id, result.chapter), ('1samuel', 3))
        self.assertEqual(result.alternative_books, (book_by_id('2samuel'),))

    def test_bare_corinthians_in_english(self):
        match = find_book("corinthians")
        self.assertEqual(match.book.id, '1corinthians')
        self.assertEqual(match.confidence, ParseConfidence.MEDIUM)
        self.assertEqual(match.alternatives, (book_by_id('2corinthians'),))

    def test_alternatives_in_canonical_order(self):
        match = find_book("요한")
        self.assertEqual(match.book.id, 'john')  # curated exact alias
        match = find_book("고린도")
        orders = [book.order for book in (match.book,) + match.alternatives]
        self.assertEqual(orders, sorted(orders))


class TestChapterValidation(unittest.TestCase):

    def test_out_of_range_chapter_is_rejected(self):
        result = parse_reference("Genesis 51")
        self.assertFalse(result.book is not None and result.book.id == 'genesis'
                         and result.chapter == 51)
        self.assertIsNone(result.book)
        self.assertEqual(result.confidence, ParseConfidence.LOW)

    def test_zero_chapter_is_rejected(self):
        result = parse_reference("John 0:1")
        self.assertFalse(result.is_valid)

    def test_last_chapter_accepted(self):
        result = parse_reference("Psalms 150")
        self.assertEqual((result.book.id, result.chapter), ('psalms', 150))


class TestNoMatch(unittest.TestCase):

    def test_empty_input(self):
        for transcript in ("", "   ", "\n"):
            result = parse_reference(transcript)
            self.assertIsNone(result.book)
            self.assertIsNone(result.chapter)
            self.assertEqual(result.confidence, ParseConfidence.LOW)
            self.assertEqual(result.raw_transcript, transcript)

    def test_unrelated_text(self):
        result = parse_reference("what is the weather tomorrow")
        self.assertIsNone(result.book)
        self.assertEqual(result.confidence, ParseConfidence.LOW)

    def test_numbers_only(self):
        result = parse_reference("3:16")
        self.assertIsNone(result.book)

    def test_raw_transcript_preserved(self):
        transcript = "  Show me JOHN 3:16!  "
        self.assertEqual(parse_reference(transcript).raw_transcript, transcript)


class TestIdempotence(unittest.TestCase):

    def test_same_input_same_result(self):
        for transcript in ("John 3:16", "사무엘", "jemes 2", "Genesis 51", ""):
            self.assertEqual(parse_reference(transcript), parse_reference(transcript))

    def test_independent_instances_agree(self):
        other = BibleReferenceParser()
        for transcript in ("요한복음 3장 16절", "first john 4 8", "rumans 8"):
            self.assertEqual(other.parse(transcript), shared_parser.parse(transcript))


class TestFindBook(unittest.TestCase):

    def test_exact(self):
        match = find_book("Genesis")
        self.assertEqual(match.book.id, 'genesis')
        self.assertEqual(match.confidence, ParseConfidence.HIGH)
        self.assertEqual(match.distance, 0)

    def test_prefix(self):
        match = find_book("deuteron")
        self.assertEqual(match.book.id, 'deuteronomy')
        self.assertEqual(match.confidence, ParseConfidence.MEDIUM)

    def test_fuzzy_single_edit(self):
        match = find_book("jemes")
        self.assertEqual(match.book.id, 'james')
        self.assertEqual(match.confidence, ParseConfidence.MEDIUM)
        self.assertEqual(match.distance, 1)

        match = find_book("rumans")
        self.assertEqual(match.book.id, 'romans')
        self.assertEqual(match.distance, 1)

    def test_fuzzy_too_far(self):
        match = find_book("zzzzzzzz")
        self.assertIsNone(match.book)
        self.assertEqual(match.confidence, ParseConfidence.LOW)

    def test_rejects_non_alphabetic(self):
        for text in ("", "   ", "123", "3:16"):
            self.assertIsNone(find_book(text).book, text)

    def test_primary_distance_not_worse_than_alternatives(self):
        for search in ("jemes", "rumans", "galations", "filemon", "habakuk", "zekariah"):
            match = find_book(search)
            if match.book is None or match.distance is None:
                continue
            primary = _best_alias_distance(search, match.book.id)
            self.assertEqual(primary, match.distance, search)
            for alternative in match.alternatives:
                distance = _best_alias_distance(search, alternative.id)
                self.assertGreaterEqual(distance, primary, search)
                if distance == primary:
                    self.assertGreater(alternative.order, match.book.order, search)

    def test_fuzzy_reference_with_numbers(self):
        result = parse_reference("rumans 8 28")
        self.assertEqual((result.book.id, result.chapter, result.verse), ('romans', 8, 28))
        self.assertEqual(result.confidence, ParseConfidence.MEDIUM)

    def test_contains_stage(self):
        match = find_book("see john")
        self.assertEqual(match.book.id, 'john')
        self.assertEqual(match.confidence, ParseConfidence.MEDIUM)
        self.assertIsNone(match.distance)

    def test_fuzzy_alternatives_are_capped(self):
        match = find_book("xob")
        self.assertEqual(match.book.id, 'job')
        self.assertEqual(len(match.alternatives), MAX_FUZZY_ALTERNATIVES)
        self.assertEqual(MAX_FUZZY_ALTERNATIVES, 5)
        self.assertEqual([book.id for book in match.alternatives],
                         ['exodus', 'joshua', 'songofsolomon', 'hosea', 'joel'])
        orders = [book.order for book in match.alternatives]
        self.assertEqual(orders, sorted(orders))

    def test_book_match_fields(self):
        self.assertEqual([field.name for field in dataclasses.fields(BookMatch)],
                         ['book', 'confidence', 'alternatives', 'distance'])

    def test_fuzzy_beyond_one_edit_is_low(self):
        match = find_book("qzw")
        self.assertEqual(match.book.id, 'ezra')
        self.assertEqual(match.confidence, ParseConfidence.LOW)
        self.assertEqual(match.distance, 2)

    def test_alternatives_never_include_primary(self):
        for search in ("xob", "qzw", "jemes", "사무엘", "corinthians", "see john", "고린도"):
            match = find_book(search)
            self.assertIsNotNone(match.book, search)
            self.assertNotIn(match.book, match.alternatives, search)
            self.assertEqual(len(set(match.alternatives)), len(match.alternatives), search)


class TestCatalogChapterRange(unittest.TestCase):
    """Chapter range comes from the parser's own catalog."""

    def setUp(self):
        self.parser = BibleReferenceParser(books=[book_by_id('john'), book_by_id('jude')])

    def test_single_chapter_book(self):
        self.assertEqual(self.parser.parse("Jude 1").book.id, 'jude')
        self.assertIsNone(self.parser.parse("Jude 2").book)

    def test_last_chapter(self):
        result = self.parser.parse("John 21")
        self.assertEqual((result.book.id, result.chapter), ('john', 21))
        self.assertIsNone(self.parser.parse("John 22").book)


class TestLongInput(unittest.TestCase):
    """Long transcripts parse in linear time."""

    MAX_SECONDS = 2.0

    def _assert_fast(self, transcript):
        start = time.perf_counter()
        result = parse_reference(transcript)
        elapsed = time.perf_counter() - start
        self.assertLess(elapsed, self.MAX_SECONDS,
                        f"parse of {len(transcript)} chars took {elapsed:.2f}s")
        return result

    def test_long_english_words(self):
        result = self._assert_fast("a " * 4000)
        self.assertIsNone(result.book)

    def test_long_korean_words(self):
        result = self._assert_fast("가 " * 4000)
        self.assertIsNone(result.book)

    def test_reference_after_long_preamble(self):
        result = self._assert_fast("a " * 4000 + "john 3:16")
        self.assertEqual(result.chapter, 3)
        self.assertEqual(result.verse, 16)


class TestHelpers(unittest.TestCase):

    def test_levenshtein(self):
        self.assertEqual(levenshtein_distance("kitten", "sitting"), 3)
        self.assertEqual(levenshtein_distance("john", "john"), 0)
        self.assertEqual(levenshtein_distance("", "abc"), 3)

    def test_split_book_and_numbers(self):
        self.assertEqual(split_book_and_numbers("john 3 16"), ("john", [3, 16]))
        self.assertEqual(split_book_and_numbers("1 john 3:16"), ("1 john", [3, 16]))
        self.assertEqual(split_book_and_numbers("요한복음 3 장 16 절"), ("요한복음", [3, 16]))
        self.assertEqual(split_book_and_numbers("john chapter 3"), ("john", [3]))
        self.assertEqual(split_book_and_numbers("3 16"), ("", [3, 16]))


class TestNormalization(unittest.TestCase):

    def setUp(self):
        self.parser = BibleReferenceParser()

    def test_english(self):
        self.assertEqual(self.parser.normalize_text("Show me John 3.16, please!", Language.ENGLISH),
                         "john 3:16")
        self.assertEqual(self.parser.normalize_text("Turn to the book of Ruth", Language.ENGLISH),
                         "ruth")

    def test_english_fillers_respect_word_boundaries(self):
        self.assertEqual(self.parser.normalize_text("1 Thessalonians 4", Language.ENGLISH),
                         "1 thessalonians 4")

    def test_korean(self):
        self.assertEqual(self.parser.normalize_text("요한복음 3장을 보여줘", Language.KOREAN),
                         "요한복음 3장")
        self.assertEqual(self.parser.normalize_text("시편 23편으로 가줘", Language.KOREAN),
                         "시편 23편")

    def test_detect_language(self):
        self.assertIs(self.parser.detect_language("요한복음 3장 16절"), Language.KOREAN)
        self.assertIs(self.parser.detect_language("John chapter three verse sixteen"), Language.ENGLISH)
        self.assertIs(self.parser.detect_language(""), Language.ENGLISH)
        self.assertIs(self.parser.detect_language("3:16"), Language.ENGLISH)


class TestFormatting(unittest.TestCase):

    def _reference(self, book_id, chapter, verse, language):
        return ParsedReference(
            book=book_by_id(book_id),
            chapter=chapter,
            verse=verse,
            detected_language=language,
            raw_transcript="",
            confidence=ParseConfidence.HIGH,
        )

    def test_english_format(self):
        self.assertEqual(self._reference('john', 3, 16, Language.ENGLISH).to_standard_format(), "John 3:16")
        self.assertEqual(self._reference('john', 3, None, Language.ENGLISH).to_standard_format(), "John 3")
        self.assertEqual(self._reference('john', None, None, Language.ENGLISH).to_standard_format(), "John")

    def test_korean_format(self):
        self.assertEqual(self._reference('john', 3, 16, Language.KOREAN).to_standard_format(),
                         "요한복음 3장 16절")
        self.assertEqual(self._reference('psalms', 23, None, Language.KOREAN).to_standard_format(),
                         "시편 23편")

    def test_no_book_formats_empty(self):
        result = parse_reference("")
        self.assertEqual(result.to_standard_format(), "")

    def test_to_dict(self):
        data = parse_reference("사무엘 3장").to_dict()
        self.assertEqual(data['book']['id'], '1samuel')
        self.assertEqual(data['chapter'], 3)
        self.assertIsNone(data['verse'])
        self.assertEqual(data['confidence'], 'medium')
        self.assertEqual(data['rawTranscript'], "사무엘 3장")
        self.assertEqual([book['id'] for book in data['alternativeBooks']], ['2samuel'])
        self.assertTrue(data['isValid'])
        self.assertFalse(data['isComplete'])
        self.assertTrue(data['isAmbiguous'])


if __name__ == '__main__':
    unittest.main()
