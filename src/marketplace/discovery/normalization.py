"""Search query normalization and keyword extraction.

Requesters search in Hindi, Marathi or English. Queries are cleaned, run
through the translation port, and degrade to a built-in word list when the
translation service is unreachable, so a search never fails because of it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

from marketplace.discovery.translation.port import TranslationPort
from marketplace.shared.errors import ExternalServiceError

logger = structlog.get_logger(__name__)

_DEVANAGARI = re.compile("[\u0900-\u097f]")
_DEVANAGARI_PUNCTUATION = re.compile("[।॥॰]")
_PUNCTUATION = re.compile(r"[.,!?;:\"'()\[\]{}<>@#$%^&*_+=|\\/~`]")
_WHITESPACE = re.compile(r"\s+")

FALLBACK_DICTIONARY = {
    # Hindi
    "चावल": "rice",
    "दाल": "lentils",
    "रोटी": "bread",
    "प्याज": "onion",
    "टमाटर": "tomato",
    "आलू": "potato",
    "गाजर": "carrot",
    "मटर": "peas",
    "लैपटॉप": "laptop",
    "कंप्यूटर": "computer",
    "मोबाइल": "mobile",
    "फोन": "phone",
    # Marathi
    "भात": "rice",
    "पोळी": "bread",
    "कांदा": "onion",
    "टोमॅटो": "tomato",
    "बटाटा": "potato",
    "मटार": "peas",
}

RAW_MATERIALS = {
    "rice": ("चावल", "भात", "rice", "chawal"),
    "wheat": ("गेहूं", "wheat", "gehun"),
    "lentils": ("दाल", "lentils", "dal", "pulses"),
    "flour": ("आटा", "मैदा", "बेसन", "flour", "atta", "maida", "besan"),
    "potato": ("आलू", "बटाटा", "potato", "aloo"),
    "tomato": ("टमाटर", "टोमॅटो", "tomato", "tamatar"),
    "onion": ("प्याज", "कांदा", "onion", "pyaz"),
    "carrot": ("गाजर", "carrot", "gajar"),
    "milk": ("दूध", "milk", "doodh"),
    "paneer": ("पनीर", "paneer"),
    "oil": ("तेल", "oil"),
    "sugar": ("चीनी", "sugar"),
    "salt": ("नमक", "salt"),
    "cement": ("सीमेंट", "cement"),
    "steel": ("स्टील", "steel"),
    "laptop": ("लैपटॉप", "laptop"),
    "mobile": ("मोबाइल", "फोन", "mobile", "phone"),
}

CATEGORIES = {
    "grains": ("grains", "cereals", "अनाज", "pulses"),
    "vegetables": ("vegetables", "सब्जी", "सब्जियां", "veggies"),
    "fruits": ("fruits", "फल"),
    "dairy": ("dairy", "दूध"),
    "spices": ("spices", "मसाला", "मसाले"),
    "construction": ("construction", "building material"),
    "electronics": ("electronics", "gadgets", "इलेक्ट्रॉनिक्स"),
}

_UNIT_ALIASES = {
    "kg": "kg",
    "kilo": "kg",
    "kilogram": "kg",
    "किलो": "kg",
    "ton": "ton",
    "tonne": "ton",
    "टन": "ton",
    "liter": "liter",
    "litre": "liter",
    "लीटर": "liter",
    "piece": "piece",
    "pieces": "piece",
    "pc": "piece",
    "meter": "meter",
    "metre": "meter",
    "sqft": "sqft",
}
_QUANTITY = re.compile(
    r"(\d+(?:\.\d+)?)\s*(" + "|".join(sorted(_UNIT_ALIASES, key=len, reverse=True)) + r")(?![a-z])",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class NormalizedQuery:
    original_text: str
    processed_text: str
    detected_language: str = "en"
    was_translated: bool = False
    fallback: bool = False

    def as_dict(self) -> dict:
        return {
            "original_text": self.original_text,
            "processed_text": self.processed_text,
            "detected_language": self.detected_language,
            "was_translated": self.was_translated,
            "fallback": self.fallback,
        }


@dataclass(frozen=True)
class Quantity:
    value: float
    unit: str


@dataclass(frozen=True)
class ExtractedKeywords:
    raw_material: str | None = None
    quantity: Quantity | None = None
    category: str | None = None
    terms: tuple[str, ...] = field(default_factory=tuple)


def clean_text(text: str | None) -> str:
    """Strip Devanagari and ASCII punctuation and collapse whitespace."""
    if not text:
        return ""
    text = _DEVANAGARI_PUNCTUATION.sub(" ", text)
    text = _PUNCTUATION.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def contains_devanagari(text: str) -> bool:
    return bool(_DEVANAGARI.search(text))


def fallback_translate(text: str) -> tuple[str, bool]:
    """Replace known words from the built-in dictionary.

    Returns the rewritten text and whether any replacement happened.
    """
    translated = text
    for source, target in FALLBACK_DICTIONARY.items():
        if source in translated:
            translated = translated.replace(source, target)
    return translated, translated != text


def normalize_query(text: str | None, translator: TranslationPort) -> NormalizedQuery:
    """Clean the query and translate it to English.

    Any ExternalServiceError from the translator is absorbed: the dictionary
    fallback is used instead and the result is flagged ``fallback=True``.
    """
    original = text or ""
    cleaned = clean_text(original)
    if not cleaned:
        return NormalizedQuery(original_text=original, processed_text="")

    try:
        language = translator.detect(cleaned).language or "en"
        if language == "en":
            return NormalizedQuery(original_text=original, processed_text=cleaned, detected_language="en")
        translated = clean_text(translator.translate(cleaned, source=language, target="en"))
        return NormalizedQuery(
            original_text=original,
            processed_text=translated,
            detected_language=language,
            was_translated=translated.lower() != cleaned.lower(),
        )
    except ExternalServiceError as exc:
        language = "hi" if contains_devanagari(cleaned) else "en"
        translated, changed = fallback_translate(cleaned) if language != "en" else (cleaned, False)
        logger.warning(
            "query_translation_fallback",
            service=exc.service,
            detected_language=language,
            was_translated=changed,
        )
        return NormalizedQuery(
            original_text=original,
            processed_text=translated,
            detected_language=language,
            was_translated=changed,
            fallback=True,
        )


def _first_match(text: str, table: dict) -> str | None:
    lowered = text.lower()
    for name, patterns in table.items():
        if any(pattern.lower() in lowered for pattern in patterns):
            return name
    return None


def extract_keywords(text: str | None) -> ExtractedKeywords:
    """Pull material, quantity and category hints out of a query."""
    if not text:
        return ExtractedKeywords()

    quantity = None
    match = _QUANTITY.search(text)
    if match:
        quantity = Quantity(value=float(match.group(1)), unit=_UNIT_ALIASES[match.group(2).lower()])

    terms = tuple(word for word in clean_text(text).lower().split() if not word.replace(".", "").isdigit())
    return ExtractedKeywords(
        raw_material=_first_match(text, RAW_MATERIALS),
        quantity=quantity,
        category=_first_match(text, CATEGORIES),
        terms=terms,
    )
