from fastapi import Depends

from academia.core.current_user import get_current_user
from academia.core.errors import Forbidden
from academia.models.user import User


def require_role(*roles: str):
    allowed = frozenset(roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise Forbidden()
        return current_user

    return dependency


require_student = require_role("student")
require_staff = require_role("lecturer", "admin")
require_admin = require_role("admin")


def ensure_self_or_admin(current_user: User, user_id: int) -> None:
    if current_user.role != "admin" and current_user.id != user_id:
        raise Forbidden("Access denied")
