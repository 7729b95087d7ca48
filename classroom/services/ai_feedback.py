import logging
import time
from typing import Any, Optional

import httpx

from classroom.core.config import OLLAMA_MAX_RETRIES, OLLAMA_MODEL, OLLAMA_TIMEOUT, OLLAMA_URL
from classroom.core.errors import AIServiceError

logger = logging.getLogger(__name__)

FEEDBACK_INSTRUCTION = (
    "You are a teacher. Write short, constructive feedback for the following "
    "student answer, pointing out one strength and one thing to improve.\n\n"
)


class OllamaClient:
    """Thin client for an Ollama-compatible text generation server."""

    def __init__(
        self,
        base_url: str = OLLAMA_URL,
        model: str = OLLAMA_MODEL,
        timeout: float = OLLAMA_TIMEOUT,
        max_retries: int = OLLAMA_MAX_RETRIES,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self._transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=timeout or self.timeout,
            transport=self._transport,
        )

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        attempt = 0
        while True:
            try:
                with self._client() as client:
                    resp = client.post(path, json=payload)
                resp.raise_for_status()
                return resp.json()
            except httpx.HTTPError as exc:
                attempt += 1
                if attempt > self.max_retries:
                    logger.error("ai_request_failed path=%s attempts=%s error=%s", path, attempt, exc)
                    raise AIServiceError(f"AI service request failed: {exc}") from exc
                delay = min(1.0 * attempt, 5.0)
                logger.warning("ai_request_retry path=%s attempt=%s delay=%.1fs error=%s", path, attempt, delay, exc)
                time.sleep(delay)

    def generate_feedback(self, response_text: str) -> str:
        if not (response_text or "").strip():
            raise AIServiceError("There is no answer text to generate feedback from")

        start = time.monotonic()
        data = self._post(
            "/api/generate",
            {
                "model": self.model,
                "prompt": FEEDBACK_INSTRUCTION + response_text,
                "stream": False,
                "options": {"temperature": 0.7, "top_p": 0.9, "num_ctx": 4096},
            },
        )
        text = (data.get("response") or "").strip()
        if not text:
            raise AIServiceError("AI service returned an empty response")

        logger.info("ai_feedback_generated model=%s duration=%.2fs", self.model, time.monotonic() - start)
        return text

    def check_connection(self) -> dict[str, Any]:
        start = time.monotonic()
        try:
            with self._client(timeout=3) as client:
                resp = client.get("/")
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("ai_health_check_failed url=%s error=%s", self.base_url, exc)
            return {"status": "unavailable", "model": self.model, "error": str(exc)}

        if "Ollama is running" not in resp.text:
            return {"status": "unavailable", "model": self.model, "error": "Unexpected response from AI server"}

        return {
            "status": "operational",
            "model": self.model,
            "response_ms": round((time.monotonic() - start) * 1000),
        }


def get_ai_client() -> OllamaClient:
    return OllamaClient()
