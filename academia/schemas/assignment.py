from pydantic import Field
from datetime import datetime
from typing import Optional

from academia.schemas.base import APIModel


class AssignmentCreate(APIModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: datetime
    weight: int = Field(ge=0, le=100)
    max_points: int = Field(default=100, ge=1, le=999)
    file_required: bool = False


class AssignmentRead(APIModel):
    id: int
    course_id: int
    title: str
    description: Optional[str]
    due_date: datetime
    weight: int
    max_points: int
    file_required: bool
    created_at: datetime
