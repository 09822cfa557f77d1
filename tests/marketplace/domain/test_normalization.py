"""Tests for search query cleaning, translation fallback and keyword extraction."""

from marketplace.discovery.normalization import (
    Quantity,
    clean_text,
    contains_devanagari,
    extract_keywords,
    fallback_translate,
    normalize_query,
)
from marketplace.discovery.translation.fake_adapter import FakeTranslator


class TestCleanText:
    def test_strips_punctuation_and_collapses_whitespace(self):
        assert clean_text("  rice,   50kg!! ") == "rice 50kg"

    def test_strips_devanagari_danda(self):
        assert clean_text("चावल।") == "चावल"

    def test_empty(self):
        assert clean_text(None) == ""
        assert clean_text("   ") == ""


class TestDevanagariDetection:
    def test_hindi(self):
        assert contains_devanagari("चावल")

    def test_latin(self):
        assert not contains_devanagari("chawal")


class TestFallbackTranslate:
    def test_known_hindi_words(self):
        assert fallback_translate("चावल और दाल") == ("rice और lentils", True)

    def test_marathi_word(self):
        assert fallback_translate("कांदा") == ("onion", True)

    def test_unknown_text_unchanged(self):
        assert fallback_translate("cement") == ("cement", False)


class TestNormalizeQuery:
    def test_english_passes_through(self):
        query = normalize_query("Basmati rice", FakeTranslator())
        assert query.processed_text == "Basmati rice"
        assert query.detected_language == "en"
        assert query.was_translated is False
        assert query.fallback is False

    def test_hindi_is_translated(self):
        query = normalize_query("चावल", FakeTranslator({"चावल": "rice"}))
        assert query.processed_text == "rice"
        assert query.detected_language == "hi"
        assert query.was_translated is True
        assert query.fallback is False

    def test_translator_failure_uses_dictionary(self):
        translator = FakeTranslator()
        translator.configure(should_fail=True)
        query = normalize_query("प्याज", translator)
        assert query.processed_text == "onion"
        assert query.detected_language == "hi"
        assert query.was_translated is True
        assert query.fallback is True

    def test_translator_failure_on_english(self):
        translator = FakeTranslator()
        translator.configure(should_fail=True)
        query = normalize_query("cement", translator)
        assert query.processed_text == "cement"
        assert query.detected_language == "en"
        assert query.was_translated is False
        assert query.fallback is True

    def test_empty_query_never_calls_translator(self):
        translator = FakeTranslator()
        query = normalize_query("  ", translator)
        assert query.processed_text == ""
        assert translator.calls == []

    def test_as_dict(self):
        query = normalize_query("rice", FakeTranslator())
        assert query.as_dict() == {
            "original_text": "rice",
            "processed_text": "rice",
            "detected_language": "en",
            "was_translated": False,
            "fallback": False,
        }


class TestExtractKeywords:
    def test_material_quantity_and_category(self):
        keywords = extract_keywords("need 50 kg rice grains")
        assert keywords.raw_material == "rice"
        assert keywords.quantity == Quantity(value=50.0, unit="kg")
        assert keywords.category == "grains"

    def test_unit_aliases(self):
        assert extract_keywords("2 tonne cement").quantity == Quantity(value=2.0, unit="ton")
        assert extract_keywords("10 litres oil").quantity is None
        assert extract_keywords("10 litre oil").quantity == Quantity(value=10.0, unit="liter")

    def test_hindi_material(self):
        assert extract_keywords("टमाटर 5 किलो").raw_material == "tomato"

    def test_terms_drop_numbers(self):
        assert extract_keywords("50 kg rice").terms == ("kg", "rice")

    def test_nothing_found(self):
        keywords = extract_keywords("something unusual")
        assert keywords.raw_material is None
        assert keywords.quantity is None
        assert keywords.category is None

    def test_empty(self):
        assert extract_keywords("").terms == ()
