from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from brewhaven.db import get_db
from brewhaven.repositories.profile_repo import ProfileRepository
from brewhaven.services.auth import Principal


def get_optional_principal(
    x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """
    Resolve the caller from the identity header set by the auth gateway.
    Unknown ids are rejected rather than treated as anonymous.
    """
    if x_user_id is None:
        return None
    repo = ProfileRepository(db)
    profile = repo.get(x_user_id)
    if not profile:
        raise HTTPException(status_code=401, detail="Unknown user")
    return Principal(
        user_id=profile.id,
        email=profile.email,
        is_admin=repo.has_role(profile.id, "admin"),
    )


def get_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return principal
