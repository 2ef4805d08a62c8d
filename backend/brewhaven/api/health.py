from fastapi import APIRouter
from sqlalchemy import text

from brewhaven.adapters import get_chat_adapter
from brewhaven.db import engine

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False
    chat_ok = get_chat_adapter().health_check()

    return {
        "status": "ok" if db_ok else "degraded",
        "db": db_ok,
        "chat_adapter": chat_ok,
    }
