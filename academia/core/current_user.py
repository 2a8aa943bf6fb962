from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from academia.core.config import Settings
from academia.core.deps import get_app_settings, get_storage
from academia.core.errors import Unauthenticated
from academia.core.security import decode_access_token
from academia.models.user import User
from academia.services.storage import Storage

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    storage: Storage = Depends(get_storage),
) -> User:
    if credentials is None:
        raise Unauthenticated()

    payload = decode_access_token(settings, credentials.credentials)
    if payload is None:
        raise Unauthenticated()

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthenticated()

    user = storage.get_user(user_id)
    if user is None:
        raise Unauthenticated()
    return user
