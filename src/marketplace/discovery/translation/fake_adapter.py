"""Configurable fake translator for development and testing.

Detects Devanagari text as Hindi and everything else as English, and
translates from a lookup table. Can be switched into failure mode to exercise
the dictionary fallback.
"""

import re

from marketplace.discovery.translation.port import Detection, TranslationPort
from marketplace.shared.errors import ExternalServiceError

_DEVANAGARI = re.compile("[\u0900-\u097f]")


class FakeTranslator(TranslationPort):
    """In-memory translator with canned translations."""

    def __init__(self, translations: dict[str, str] | None = None) -> None:
        self.translations: dict[str, str] = dict(translations or {})
        self.should_fail: bool = False
        self.calls: list[dict] = []

    def configure(self, should_fail: bool = False, translations: dict[str, str] | None = None) -> None:
        """Configure translator behavior at runtime."""
        self.should_fail = should_fail
        if translations is not None:
            self.translations = dict(translations)

    def detect(self, text: str) -> Detection:
        self.calls.append({"method": "detect", "text": text})
        if self.should_fail:
            raise ExternalServiceError("fake-translator", "detection unavailable")
        if _DEVANAGARI.search(text):
            return Detection(language="hi", confidence=90.0)
        return Detection(language="en", confidence=90.0)

    def translate(self, text: str, source: str, target: str = "en") -> str:
        self.calls.append({"method": "translate", "text": text, "source": source, "target": target})
        if self.should_fail:
            raise ExternalServiceError("fake-translator", "translation unavailable")
        return self.translations.get(text, text)

    def reset(self) -> None:
        """Clear recorded calls and restore default behavior."""
        self.calls.clear()
        self.should_fail = False
