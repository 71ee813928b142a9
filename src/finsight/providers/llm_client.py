"""Language model client used by the trading assistant."""

import json
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Protocol
from urllib.error import HTTPError, URLError


class LLMClient(Protocol):
    def generate(self, prompt: str) -> str:
        """Return the model's text completion for a prompt."""
        ...


class LLMUnavailableError(RuntimeError):
    """Raised when the model cannot be reached or answers with an unexpected shape."""


@dataclass(frozen=True)
class GeminiClient:
    """
    Minimal Gemini REST client.

    Endpoint pattern (v1beta):
      https://generativelanguage.googleapis.com/v1beta/models/<model>:generateContent
    """

    api_key: str
    model: str = "gemini-pro"
    timeout_s: float = 30.0

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise LLMUnavailableError("Gemini API key is not configured")

        url = (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            f"{urllib.parse.quote(self.model)}:generateContent"
        )
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        req = urllib.request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=float(self.timeout_s)) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
            raise LLMUnavailableError(f"Gemini API error: {exc.code}, {body[:500]}") from exc
        except URLError as exc:
            raise LLMUnavailableError(f"Gemini API unreachable: {exc.reason}") from exc

        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(str(p.get("text", "")) for p in parts)
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMUnavailableError(f"Unexpected Gemini response shape: {data}") from exc
