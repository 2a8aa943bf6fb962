from fastapi import APIRouter, Depends, status

from academia.core.deps import get_storage
from academia.core.errors import NotFound
from academia.core.permissions import require_staff
from academia.models.course import Course
from academia.models.user import User
from academia.schemas.assignment import AssignmentCreate, AssignmentRead
from academia.services.storage import Storage

router = APIRouter()


def _ensure_course_exists(storage: Storage, course_id: int) -> Course:
    course = storage.get_course(course_id)
    if not course:
        raise NotFound("Course not found")
    return course


@router.get("/courses/{course_id}/assignments", response_model=list[AssignmentRead])
def list_assignments(course_id: int, storage: Storage = Depends(get_storage)):
    _ensure_course_exists(storage, course_id)
    return storage.get_assignments_by_course(course_id)


@router.post(
    "/courses/{course_id}/assignments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    course_id: int,
    payload: AssignmentCreate,
    storage: Storage = Depends(get_storage),
    staff: User = Depends(require_staff),
):
    _ensure_course_exists(storage, course_id)
    return storage.create_assignment(course_id=course_id, **payload.model_dump())
