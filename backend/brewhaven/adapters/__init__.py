from typing import Optional

from brewhaven.adapters.deepseek_chat import DeepSeekChatAdapter
from brewhaven.adapters.gemini_chat import GeminiChatAdapter
from brewhaven.config import settings

CHAT_ADAPTERS = {
    "gemini": GeminiChatAdapter,
    "deepseek": DeepSeekChatAdapter,
}


def get_chat_adapter(provider: Optional[str] = None):
    """Build the chat adapter named by AI_PROVIDER (or the given provider)."""
    name = (provider or settings.AI_PROVIDER).lower()
    try:
        return CHAT_ADAPTERS[name]()
    except KeyError:
        raise ValueError(f"Unknown AI_PROVIDER: {name}")
