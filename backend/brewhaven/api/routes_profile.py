from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from brewhaven.api.deps import get_principal
from brewhaven.db import get_db
from brewhaven.models.chat import ChatMessage
from brewhaven.repositories.profile_repo import ProfileRepository
from brewhaven.services.auth import Principal

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", summary="Current profile")
def get_profile(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    profile = ProfileRepository(db).get(principal.user_id)
    chat_count = db.query(ChatMessage).filter(ChatMessage.user_id == principal.user_id).count()
    return {
        "id": profile.id,
        "email": profile.email,
        "full_name": profile.full_name,
        "is_admin": principal.is_admin,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
        "chat_count": chat_count,
    }
