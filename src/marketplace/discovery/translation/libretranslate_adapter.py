"""LibreTranslate adapter: HTTP client for a LibreTranslate server."""

import requests
import structlog

from marketplace.discovery.translation.port import Detection, TranslationPort
from marketplace.shared.errors import ExternalServiceError

logger = structlog.get_logger(__name__)

DETECT_TIMEOUT_S = 10.0
TRANSLATE_TIMEOUT_S = 15.0


class LibreTranslateTranslator(TranslationPort):
    """Talks to ``/detect`` and ``/translate`` on a LibreTranslate instance."""

    service_name = "libretranslate"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        detect_timeout_s: float = DETECT_TIMEOUT_S,
        translate_timeout_s: float = TRANSLATE_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.detect_timeout_s = detect_timeout_s
        self.translate_timeout_s = translate_timeout_s
        self.session = session or requests.Session()

    def _post(self, path: str, body: dict, timeout_s: float):
        if self.api_key:
            body = {**body, "api_key": self.api_key}
        try:
            response = self.session.post(f"{self.base_url}{path}", json=body, timeout=timeout_s)
            response.raise_for_status()
            return response.json()
        except requests.Timeout as exc:
            logger.warning("translation_timeout", path=path, timeout_s=timeout_s)
            raise ExternalServiceError(self.service_name, f"timed out after {timeout_s}s") from exc
        except (requests.RequestException, ValueError) as exc:
            logger.warning("translation_failed", path=path, error=str(exc))
            raise ExternalServiceError(self.service_name, str(exc)) from exc

    def detect(self, text: str) -> Detection:
        payload = self._post("/detect", {"q": text}, self.detect_timeout_s)
        if not isinstance(payload, list) or not payload:
            raise ExternalServiceError(self.service_name, "empty detection response")
        best = payload[0]
        return Detection(language=best.get("language", "en"), confidence=float(best.get("confidence", 0.0)))

    def translate(self, text: str, source: str, target: str = "en") -> str:
        payload = self._post(
            "/translate",
            {"q": text, "source": source, "target": target, "format": "text"},
            self.translate_timeout_s,
        )
        translated = payload.get("translatedText") if isinstance(payload, dict) else None
        if not translated:
            raise ExternalServiceError(self.service_name, "empty translation response")
        return translated
