from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field, field_validator

from academia.schemas.base import APIModel

Role = Literal["student", "lecturer", "admin"]


class UserCreate(APIModel):
    username: str = Field(min_length=3, max_length=150)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    role: Role = "student"
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserRead(APIModel):
    id: int
    username: str
    email: EmailStr
    role: str
    first_name: str
    last_name: str
    created_at: datetime
