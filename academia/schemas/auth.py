from pydantic import Field

from academia.schemas.base import APIModel
from academia.schemas.user import UserRead


class LoginRequest(APIModel):
    # username or email
    username: str
    password: str


class Token(APIModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class MessageResponse(APIModel):
    message: str


class PasswordRecoveryRequest(APIModel):
    identifier: str = Field(min_length=1)


class PasswordRecoveryResponse(APIModel):
    message: str
    reset_token: str | None = None


class PasswordResetRequest(APIModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=72)


class PasswordResetVerifyResponse(APIModel):
    message: str
    user_id: int
