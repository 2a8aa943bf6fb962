from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from academia.core.deps import get_storage
from academia.core.errors import InvalidInput, NotFound
from academia.core.permissions import require_staff
from academia.models.course import Course
from academia.models.user import User
from academia.schemas.course import CourseCreate, CourseRead, CourseUpdate
from academia.schemas.enrollment import EnrollmentOut
from academia.services.storage import Storage

router = APIRouter()


def _ensure_course_exists(storage: Storage, course_id: int) -> Course:
    course = storage.get_course(course_id)
    if not course:
        raise NotFound("Course not found")
    return course


def _ensure_lecturer(storage: Storage, lecturer_id: Optional[int]) -> None:
    if lecturer_id is None:
        return
    lecturer = storage.get_user(lecturer_id)
    if not lecturer or lecturer.role != "lecturer":
        raise InvalidInput("Invalid course data")


@router.get("/courses", response_model=list[CourseRead])
def list_courses(
    department: Optional[str] = Query(default=None),
    storage: Storage = Depends(get_storage),
):
    if department:
        return storage.get_courses_by_department(department)
    return storage.get_all_courses()


@router.get("/courses/{course_id}", response_model=CourseRead)
def get_course(course_id: int, storage: Storage = Depends(get_storage)):
    return _ensure_course_exists(storage, course_id)


@router.post("/courses", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    storage: Storage = Depends(get_storage),
    staff: User = Depends(require_staff),
):
    lecturer_id = payload.lecturer_id
    if lecturer_id is None and staff.role == "lecturer":
        lecturer_id = staff.id
    _ensure_lecturer(storage, lecturer_id)

    fields = payload.model_dump()
    fields["lecturer_id"] = lecturer_id
    return storage.create_course(**fields)


@router.put("/courses/{course_id}", response_model=CourseRead)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    storage: Storage = Depends(get_storage),
    staff: User = Depends(require_staff),
):
    changes = payload.model_dump(exclude_unset=True)
    if "lecturer_id" in changes:
        _ensure_lecturer(storage, changes["lecturer_id"])

    course = storage.update_course(course_id, **changes)
    if not course:
        raise NotFound("Course not found")
    return course


@router.get("/courses/{course_id}/enrollments", response_model=list[EnrollmentOut])
def course_enrollments(
    course_id: int,
    storage: Storage = Depends(get_storage),
    staff: User = Depends(require_staff),
):
    _ensure_course_exists(storage, course_id)
    return storage.get_enrollments_by_course(course_id)
