"""Translation adapter factory.

Provides get_translator() / set_translator() to swap implementations:
- FakeTranslator for development and testing (default)
- LibreTranslateTranslator when MARKETPLACE_TRANSLATION_PROVIDER=libretranslate
"""

import os

from marketplace.discovery.translation.fake_adapter import FakeTranslator
from marketplace.discovery.translation.libretranslate_adapter import LibreTranslateTranslator
from marketplace.discovery.translation.port import TranslationPort

_current_translator: TranslationPort | None = None


def get_translator() -> TranslationPort:
    """Return the configured translator (singleton)."""
    global _current_translator
    if _current_translator is None:
        provider = os.environ.get("MARKETPLACE_TRANSLATION_PROVIDER", "fake")
        if provider == "fake":
            _current_translator = FakeTranslator()
        elif provider == "libretranslate":
            _current_translator = LibreTranslateTranslator(
                base_url=os.environ.get("LIBRETRANSLATE_URL", "https://libretranslate.com"),
                api_key=os.environ.get("LIBRETRANSLATE_API_KEY"),
            )
        else:
            raise ValueError(f"Unknown translation provider: {provider}")
    return _current_translator


def set_translator(translator: TranslationPort) -> None:
    """Override the active translator (useful for tests)."""
    global _current_translator
    _current_translator = translator


def reset_translator() -> None:
    """Reset to the configured default."""
    global _current_translator
    _current_translator = None
