import logging

from fastapi import APIRouter, Depends, status

from academia.core.current_user import get_current_user
from academia.core.deps import get_storage
from academia.core.errors import NotFound
from academia.core.permissions import ensure_self_or_admin, require_admin, require_student
from academia.models.user import User
from academia.schemas.enrollment import EnrollmentCreate, EnrollmentOut, EnrollmentStatusUpdate
from academia.services.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/courses/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Already enrolled in this course"}},
)
def enroll(
    payload: EnrollmentCreate,
    storage: Storage = Depends(get_storage),
    me: User = Depends(require_student),
):
    if not storage.get_course(payload.course_id):
        raise NotFound("Course not found")

    # the unique constraint decides; no existence check first
    enrollment = storage.create_enrollment(course_id=payload.course_id, student_id=me.id)

    logger.info("student %s requested enrollment in course %s", me.id, payload.course_id)
    return enrollment


@router.get("/enrollments", response_model=list[EnrollmentOut])
def list_enrollments(
    storage: Storage = Depends(get_storage),
    me: User = Depends(get_current_user),
):
    if me.role == "admin":
        return storage.get_pending_enrollments()
    return storage.get_enrollments_by_student(me.id)


@router.get("/enrollments/pending", response_model=list[EnrollmentOut])
def pending_enrollments(
    storage: Storage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return storage.get_pending_enrollments()


@router.get("/enrollments/student/{student_id}", response_model=list[EnrollmentOut])
def student_enrollments(
    student_id: int,
    storage: Storage = Depends(get_storage),
    me: User = Depends(get_current_user),
):
    ensure_self_or_admin(me, student_id)
    return storage.get_enrollments_by_student(student_id)


@router.put("/enrollments/{enrollment_id}/status", response_model=EnrollmentOut)
def update_enrollment_status(
    enrollment_id: int,
    payload: EnrollmentStatusUpdate,
    storage: Storage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    enrollment = storage.update_enrollment_status(enrollment_id, payload.status)
    if not enrollment:
        raise NotFound("Enrollment not found")

    logger.info("admin %s set enrollment %s to %s", admin.id, enrollment_id, payload.status)
    return enrollment
