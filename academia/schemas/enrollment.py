from datetime import datetime
from typing import Literal

from academia.schemas.base import APIModel


class EnrollmentCreate(APIModel):
    course_id: int


class EnrollmentStatusUpdate(APIModel):
    # pending is never a target state
    status: Literal["approved", "rejected"]


class EnrollmentOut(APIModel):
    id: int
    course_id: int
    student_id: int
    status: str
    enrolled_at: datetime
    grade: float | None = None
