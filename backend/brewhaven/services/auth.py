from typing import Optional

from brewhaven.errors import UnauthorizedError


class Principal:
    """The authenticated caller, as handed over by the identity provider."""

    def __init__(self, user_id: int, email: Optional[str] = None, is_admin: bool = False):
        self.user_id = user_id
        self.email = email
        self.is_admin = is_admin

    def __repr__(self):
        return f"<Principal user_id={self.user_id} admin={self.is_admin}>"


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None or principal.user_id is None:
        raise UnauthorizedError("Authentication required")
    return principal


def require_admin(principal: Optional[Principal]) -> Principal:
    principal = require_principal(principal)
    if not principal.is_admin:
        raise UnauthorizedError("Admin role required")
    return principal
