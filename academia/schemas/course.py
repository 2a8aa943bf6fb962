from datetime import datetime

from pydantic import Field, field_validator

from academia.schemas.base import APIModel


class CourseCreate(APIModel):
    title: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None
    credits: int = Field(ge=1)
    department: str = Field(min_length=1, max_length=255)
    lecturer_id: int | None = None
    syllabus_url: str | None = None
    is_active: bool = True


class CourseUpdate(APIModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    code: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = None
    credits: int | None = Field(default=None, ge=1)
    department: str | None = Field(default=None, min_length=1, max_length=255)
    lecturer_id: int | None = None
    syllabus_url: str | None = None
    is_active: bool | None = None

    @field_validator("title", "code", "credits", "department", "is_active")
    @classmethod
    def not_null(cls, value):
        # omitted means unchanged; an explicit null would blank a required column
        if value is None:
            raise ValueError("may not be null")
        return value


class CourseRead(APIModel):
    id: int
    title: str
    code: str
    description: str | None = None
    credits: int
    department: str
    lecturer_id: int | None = None
    syllabus_url: str | None = None
    is_active: bool
    created_at: datetime
