"""Translation port (abstract interface).

Search queries arrive in whatever language the requester typed. Discovery
matches against English catalog text, so queries are normalized through a
translation service first. Adapters raise ExternalServiceError on any failure
or timeout; callers decide how to degrade.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Detection:
    """Result of language detection."""

    language: str
    confidence: float = 0.0


class TranslationPort(ABC):
    """Abstract translation service interface."""

    @abstractmethod
    def detect(self, text: str) -> Detection:
        """Detect the language of the text."""
        ...

    @abstractmethod
    def translate(self, text: str, source: str, target: str = "en") -> str:
        """Translate the text from source to target language."""
        ...
