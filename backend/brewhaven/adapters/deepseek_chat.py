import logging
from typing import Dict, List, Optional

import requests

from brewhaven.config import settings
from brewhaven.errors import ChatProviderError

log = logging.getLogger("chat.deepseek")


class DeepSeekChatAdapter:
    """
    Client for DeepSeek's OpenAI-style chat/completions endpoint.
    Same contract as GeminiChatAdapter: generate() returns the reply text or
    raises ChatProviderError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.DEEPSEEK_API_KEY
        self.model = model or settings.DEEPSEEK_MODEL
        self.api_base = (api_base or settings.DEEPSEEK_API_BASE).rstrip("/")
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self.http = http or requests.Session()

    def health_check(self) -> bool:
        return bool(self.api_key)

    def _messages(self, message: str, history: List[Dict]) -> List[Dict]:
        messages = [{"role": "system", "content": settings.AI_SYSTEM_PROMPT}]
        for turn in history:
            role = "user" if turn.get("role") == "user" else "assistant"
            messages.append({"role": role, "content": turn.get("content", "")})
        messages.append({"role": "user", "content": message})
        return messages

    def generate(self, message: str, history: Optional[List[Dict]] = None) -> str:
        if not self.api_key:
            log.error("DEEPSEEK_API_KEY is not configured")
            raise ChatProviderError(500, "AI service not configured. Please set DEEPSEEK_API_KEY.")

        payload = {
            "model": self.model,
            "messages": self._messages(message, history or []),
            "stream": False,
            "temperature": settings.AI_TEMPERATURE,
            "max_tokens": settings.AI_MAX_OUTPUT_TOKENS,
        }
        try:
            resp = self.http.post(
                f"{self.api_base}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error("DeepSeek request failed: %s", e)
            raise ChatProviderError(502, "Failed to get AI response. Please try again.")

        if not resp.ok:
            log.error("DeepSeek API error: %s %s", resp.status_code, resp.text[:500])
            if resp.status_code == 429:
                raise ChatProviderError(429, "Rate limit exceeded. Please try again later.")
            if resp.status_code in (400, 401):
                raise ChatProviderError(400, "Invalid request. Please check your API key.")
            raise ChatProviderError(502, "Failed to get AI response. Please try again.")

        data = resp.json()
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            log.error("Invalid response format from DeepSeek: %s", data)
            raise ChatProviderError(502, "No response from AI. Please try again.")
        return text
