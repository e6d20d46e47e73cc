"""
Unit Tests — Post-Processing
============================

Tests for src/core/post_processing.py
"""

import unittest

from src.core import config
from src.core.models import GenerationConstraints, SEOMetadata
from src.core.post_processing import (
    apply_post_processing,
    clean_keywords,
    remove_words,
    truncate_text,
)
from src.core.response_parser import normalize


class TestTruncateText(unittest.TestCase):

    def test_cuts_at_word_boundary(self):
        self.assertEqual(truncate_text("Golden sunset over the calm ocean", 20), "Golden sunset over")

    def test_single_long_word_cut_mid_word(self):
        self.assertEqual(truncate_text("Supercalifragilistic", 5), "Super")

    def test_budget_ending_on_boundary(self):
        self.assertEqual(truncate_text("Hello world again", 11), "Hello world")

    def test_short_text_unchanged(self):
        self.assertEqual(truncate_text("Red barn", 50), "Red barn")

    def test_trailing_punctuation_dropped(self):
        self.assertEqual(truncate_text("Sunset, beach and palm trees", 10), "Sunset")

    def test_never_exceeds_budget(self):
        text = "A quiet mountain lake at dawn with mist rising over pine forests"
        for limit in range(1, len(text) + 5):
            with self.subTest(limit=limit):
                result = truncate_text(text, limit)
                self.assertLessEqual(len(result), limit)
                self.assertTrue(result)
                self.assertTrue(text.startswith(result))


class TestRemoveWords(unittest.TestCase):

    def test_whole_words_only(self):
        self.assertEqual(remove_words("Free freedom FREE wallpaper", ["free"]), "freedom wallpaper")

    def test_no_words(self):
        self.assertEqual(remove_words("Blue  sky", []), "Blue sky")


class TestCleanKeywords(unittest.TestCase):

    def test_lowercase_and_dedupe(self):
        self.assertEqual(clean_keywords(["Sky", "sky", " SEA ", "sun"], 10), ["sky", "sea", "sun"])

    def test_comma_joined_entries_split(self):
        self.assertEqual(clean_keywords(["beach, sand", "sea"], 10), ["beach", "sand", "sea"])

    def test_empty_entries_dropped(self):
        self.assertEqual(clean_keywords(["", "  ", "a,,b"], 10), ["a", "b"])

    def test_excluded_dropped(self):
        self.assertEqual(clean_keywords(["sky", "Stock", "sea"], 10, excluded=["stock"]), ["sky", "sea"])

    def test_limit(self):
        self.assertEqual(clean_keywords(["a", "b", "c", "d"], 2), ["a", "b"])


class TestApplyPostProcessing(unittest.TestCase):

    def test_prefix(self):
        constraints = GenerationConstraints(title_prefix="Pro")
        result = apply_post_processing(SEOMetadata(title="Sunset", keywords=("a",)), constraints)
        self.assertEqual(result.title, "Pro Sunset")

    def test_suffix(self):
        constraints = GenerationConstraints(title_suffix="Stock Photo")
        result = apply_post_processing(SEOMetadata(title="Sunset", keywords=("a",)), constraints)
        self.assertEqual(result.title, "Sunset Stock Photo")

    def test_empty_affixes_ignored(self):
        constraints = GenerationConstraints(title_prefix="", title_suffix="  ")
        result = apply_post_processing(SEOMetadata(title="Sunset", keywords=("a",)), constraints)
        self.assertEqual(result.title, "Sunset")

    def test_affixes_applied_after_truncation(self):
        constraints = GenerationConstraints(max_title_length=20, title_prefix="Pro")
        metadata = SEOMetadata(title="Golden sunset over the calm ocean", keywords=("a",))
        result = apply_post_processing(metadata, constraints)
        self.assertEqual(result.title, "Pro Golden sunset over")

    def test_excluded_title_words_removed(self):
        constraints = GenerationConstraints(excluded_title_words="free, download")
        metadata = SEOMetadata(title="Free sunset photo download", keywords=("a",))
        result = apply_post_processing(metadata, constraints)
        self.assertEqual(result.title, "sunset photo")

    def test_keywords_cleaned_and_limited(self):
        constraints = GenerationConstraints(target_keyword_count=3, excluded_keywords=["ai"])
        metadata = SEOMetadata(title="T", keywords=("Sky", "AI", "sky", "sea, sun", "moon"))
        result = apply_post_processing(metadata, constraints)
        self.assertEqual(result.keywords, ("sky", "sea", "sun"))

    def test_fenced_response_end_to_end(self):
        parsed = normalize('```json\n{"title":"A","keywords":["x","x","y"]}\n```')
        result = apply_post_processing(parsed, GenerationConstraints())
        self.assertEqual(result.keywords, ("x", "y"))

    def test_description_truncated(self):
        constraints = GenerationConstraints(platform=config.PLATFORM_SHUTTERSTOCK, max_description_length=11)
        metadata = SEOMetadata(title="T", keywords=("a",), description="Hello world again")
        result = apply_post_processing(metadata, constraints)
        self.assertEqual(result.description, "Hello world")

    def test_description_dropped_for_platform_without_it(self):
        constraints = GenerationConstraints(platform=config.PLATFORM_ADOBE_STOCK)
        metadata = SEOMetadata(title="T", keywords=("a",), description="Should go")
        result = apply_post_processing(metadata, constraints)
        self.assertIsNone(result.description)

    def test_input_not_mutated(self):
        metadata = SEOMetadata(title="Golden sunset over the calm ocean", keywords=("Sky", "sky"))
        apply_post_processing(metadata, GenerationConstraints(max_title_length=10))
        self.assertEqual(metadata.title, "Golden sunset over the calm ocean")
        self.assertEqual(metadata.keywords, ("Sky", "sky"))


if __name__ == "__main__":
    unittest.main()
