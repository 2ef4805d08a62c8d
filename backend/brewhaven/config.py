from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./brewhaven.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:5173"]
    LOG_LEVEL: str = "INFO"

    CART_TTL_SECONDS: int = 7 * 24 * 3600
    CART_PURGE_INTERVAL_SECONDS: int = 3600

    INVENTORY_LOCK_TIMEOUT_SECONDS: float = 10.0
    LOCK_DIR: Optional[str] = None  # defaults to <tmp>/brewhaven_locks
    RESTOCK_ON_CANCEL: bool = False

    MIN_PRODUCT_PRICE: int = 100

    AI_PROVIDER: str = "gemini"  # gemini, deepseek
    AI_API_KEY: Optional[str] = None
    AI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_MODEL: str = "gemini-pro"
    DEEPSEEK_API_KEY: Optional[str] = None
    DEEPSEEK_API_BASE: str = "https://api.deepseek.com"
    DEEPSEEK_MODEL: str = "deepseek-chat"
    AI_TIMEOUT_SECONDS: float = 30.0
    AI_TEMPERATURE: float = 0.7
    AI_MAX_OUTPUT_TOKENS: int = 500
    AI_SYSTEM_PROMPT: str = (
        "You are the BrewHaven barista assistant. Recommend coffee drinks "
        "based on the user's preferences and keep answers short."
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
