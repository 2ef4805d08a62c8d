from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from brewhaven.api.deps import get_optional_principal, get_principal
from brewhaven.api.errors import http_error
from brewhaven.db import get_db
from brewhaven.services.auth import Principal
from brewhaven.services.chat_service import ChatService
from brewhaven.errors import BrewHavenException

router = APIRouter(prefix="/api/chat", tags=["chat"])


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatIn(BaseModel):
    message: str = ""
    conversation_history: List[ChatTurn] = []


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    return ChatService(db)


@router.post("", summary="Ask the barista assistant")
def chat(
    payload: ChatIn,
    svc: ChatService = Depends(get_chat_service),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    try:
        reply = svc.send(
            principal,
            payload.message,
            [t.model_dump() for t in payload.conversation_history],
        )
    except BrewHavenException as e:
        raise http_error(e)
    return {"response": reply}


@router.get("/history", summary="My chat history")
def history(
    svc: ChatService = Depends(get_chat_service),
    principal: Principal = Depends(get_principal),
):
    return [
        {"role": m.role, "content": m.content, "created_at": m.created_at.isoformat()}
        for m in svc.history(principal)
    ]
