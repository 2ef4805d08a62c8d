import logging
from typing import Dict, List, Optional

import requests

from brewhaven.config import settings
from brewhaven.errors import ChatProviderError

log = logging.getLogger("chat.gemini")


class GeminiChatAdapter:
    """
    Thin client for the Gemini generateContent endpoint.
    generate() returns the reply text or raises ChatProviderError carrying the
    HTTP status and message the API should answer with.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.AI_API_KEY
        self.model = model or settings.AI_MODEL
        self.api_base = (api_base or settings.AI_API_BASE).rstrip("/")
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self.http = http or requests.Session()

    def health_check(self) -> bool:
        return bool(self.api_key)

    def _contents(self, message: str, history: List[Dict]) -> List[Dict]:
        # Gemini has no system role; the prompt goes first as a user turn.
        contents = [{"role": "user", "parts": [{"text": settings.AI_SYSTEM_PROMPT}]}]
        for turn in history:
            role = "model" if turn.get("role") == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": turn.get("content", "")}]})
        contents.append({"role": "user", "parts": [{"text": message}]})
        return contents

    def generate(self, message: str, history: Optional[List[Dict]] = None) -> str:
        if not self.api_key:
            log.error("AI_API_KEY is not configured")
            raise ChatProviderError(500, "AI service not configured. Please set AI_API_KEY.")

        url = f"{self.api_base}/models/{self.model}:generateContent"
        payload = {
            "contents": self._contents(message, history or []),
            "generationConfig": {
                "temperature": settings.AI_TEMPERATURE,
                "maxOutputTokens": settings.AI_MAX_OUTPUT_TOKENS,
            },
        }
        try:
            resp = self.http.post(
                url, params={"key": self.api_key}, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            log.error("Gemini request failed: %s", e)
            raise ChatProviderError(502, "Failed to get AI response. Please try again.")

        if not resp.ok:
            log.error("Gemini API error: %s %s", resp.status_code, resp.text[:500])
            if resp.status_code == 429:
                raise ChatProviderError(429, "Rate limit exceeded. Please try again later.")
            if resp.status_code == 400:
                try:
                    detail = (resp.json().get("error") or {}).get("message")
                except ValueError:
                    detail = None
                raise ChatProviderError(
                    400, detail or "Invalid request. Please check your API key."
                )
            raise ChatProviderError(
                502, "Failed to get AI response. Please check your API key and try again."
            )

        data = resp.json()
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            log.error("No response from AI: %s", data)
            raise ChatProviderError(502, "No response from AI. Please try again.")
        return text
