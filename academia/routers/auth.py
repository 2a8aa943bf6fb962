import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, status

from academia.core.config import Settings
from academia.core.current_user import get_current_user
from academia.core.deps import get_app_settings, get_storage
from academia.core.errors import InvalidInput, Unauthenticated
from academia.core.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    verify_password,
)
from academia.models.user import User
from academia.schemas.auth import (
    LoginRequest,
    MessageResponse,
    PasswordRecoveryRequest,
    PasswordRecoveryResponse,
    PasswordResetRequest,
    PasswordResetVerifyResponse,
    Token,
)
from academia.schemas.user import UserCreate, UserRead
from academia.services.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()

RECOVERY_MESSAGE = "If an account exists with this identifier, a reset link has been sent."


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _usable_reset(storage: Storage, token: str):
    reset = storage.get_password_reset(token)
    if not reset or reset.used or datetime.now(timezone.utc) > _as_utc(reset.expires_at):
        raise InvalidInput("Invalid or expired reset token")
    return reset


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Username or email already registered"},
    },
)
def register(
    payload: UserCreate,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    user = storage.create_user(
        username=payload.username,
        email=payload.email,
        hashed_password=hash_password(payload.password, settings.BCRYPT_ROUNDS),
        role=payload.role,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )

    logger.info("registered user %s (%s)", user.id, user.role)
    return user


@router.post(
    "/login",
    response_model=Token,
    responses={
        401: {"description": "Invalid username or password"},
    },
)
def login(
    payload: LoginRequest,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    user = storage.get_user_by_username(payload.username)
    if not user and "@" in payload.username:
        user = storage.get_user_by_email(payload.username)

    if not user or not verify_password(payload.password, user.hashed_password):
        raise Unauthenticated("Invalid username or password")

    access_token = create_access_token(settings, data={"sub": str(user.id), "role": user.role})
    return Token(access_token=access_token, user=UserRead.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    # tokens are stateless; the client drops its copy
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/password-recovery/request", response_model=PasswordRecoveryResponse)
def request_password_reset(
    payload: PasswordRecoveryRequest,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    identifier = payload.identifier.strip()
    user = storage.get_user_by_email(identifier) or storage.get_user_by_username(identifier)
    if not user:
        # same answer whether or not the account exists
        return {"message": RECOVERY_MESSAGE}

    reset = storage.create_password_reset(
        user_id=user.id,
        token=generate_reset_token(),
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
    )
    logger.info("password reset requested for user %s", user.id)

    # TODO: deliver the token by email and stop echoing it outside production
    if settings.is_production:
        return {"message": RECOVERY_MESSAGE}
    return {"message": RECOVERY_MESSAGE, "reset_token": reset.token}


@router.post("/password-recovery/reset", response_model=MessageResponse)
def reset_password(
    payload: PasswordResetRequest,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    reset = _usable_reset(storage, payload.token)
    storage.complete_password_reset(reset, hash_password(payload.new_password, settings.BCRYPT_ROUNDS))
    logger.info("password reset completed for user %s", reset.user_id)
    return {"message": "Password reset successfully"}


@router.get("/password-recovery/verify/{token}", response_model=PasswordResetVerifyResponse)
def verify_reset_token(token: str, storage: Storage = Depends(get_storage)):
    reset = _usable_reset(storage, token)
    return {"message": "Token is valid", "user_id": reset.user_id}
