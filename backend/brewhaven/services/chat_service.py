import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from brewhaven.adapters import get_chat_adapter
from brewhaven.models.chat import ChatMessage
from brewhaven.services.auth import Principal, require_principal
from brewhaven.errors import ValidationError

log = logging.getLogger("chat")

CHAT_ROLES = ("user", "assistant")


class ChatService:
    def __init__(self, db: Session, adapter=None):
        self.db = db
        self.adapter = adapter or get_chat_adapter()

    def send(
        self,
        principal: Optional[Principal],
        message: str,
        history: Optional[List[Dict]] = None,
    ) -> str:
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required")
        history = [t for t in (history or []) if t.get("role") in CHAT_ROLES]

        reply = self.adapter.generate(message, history)

        if principal is not None:
            self.db.add(ChatMessage(user_id=principal.user_id, role="user", content=message))
            self.db.add(ChatMessage(user_id=principal.user_id, role="assistant", content=reply))
            self.db.commit()
        log.info("chat reply sent (user=%s, turns=%d)", getattr(principal, "user_id", None), len(history))
        return reply

    def history(self, principal: Principal, limit: int = 100) -> List[ChatMessage]:
        principal = require_principal(principal)
        return (
            self.db.query(ChatMessage)
            .filter(ChatMessage.user_id == principal.user_id)
            .order_by(ChatMessage.created_at, ChatMessage.id)
            .limit(limit)
            .all()
        )
