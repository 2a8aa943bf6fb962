from typing import Any, Literal

from pydantic import Field

from academia.schemas.base import APIModel


class RecommendationRequest(APIModel):
    interests: str = Field(min_length=1)
    level: str = "any"
    existing_courses: list[str] = Field(default_factory=list)


class SyllabusRequest(APIModel):
    course_title: str = Field(min_length=1)
    course_description: str = Field(min_length=1)
    duration: int = Field(ge=1, le=52)
    credits: int = Field(ge=1)


class AIResultOut(APIModel):
    source: Literal["generated", "fallback"]
    data: dict[str, Any]
