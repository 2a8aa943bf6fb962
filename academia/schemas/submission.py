from datetime import datetime
from typing import Optional

from pydantic import Field

from academia.schemas.base import APIModel


class SubmissionRead(APIModel):
    id: int
    assignment_id: int
    student_id: int
    content: Optional[str] = None
    file_url: Optional[str] = None
    submitted_at: datetime
    grade: Optional[float] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None


class SubmissionGradeUpdate(APIModel):
    grade: float = Field(ge=0)
    feedback: Optional[str] = None
