from typing import Optional

from sqlalchemy.orm import Session

from brewhaven.models.profile import Profile, UserRole


class ProfileRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[Profile]:
        return self.db.get(Profile, user_id)

    def get_by_email(self, email: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.email == email).first()

    def has_role(self, user_id: int, role: str) -> bool:
        return (
            self.db.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role == role)
            .first()
            is not None
        )

    def create(self, email: str, full_name: Optional[str] = None, admin: bool = False) -> Profile:
        p = Profile(email=email, full_name=full_name)
        p.roles.append(UserRole(role="user"))
        if admin:
            p.roles.append(UserRole(role="admin"))
        self.db.add(p)
        self.db.flush()
        return p

    def count(self) -> int:
        return self.db.query(Profile).count()
