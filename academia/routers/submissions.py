import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from academia.core.config import Settings
from academia.core.current_user import get_current_user
from academia.core.deps import get_app_settings, get_storage
from academia.core.errors import InvalidInput, NotFound
from academia.core.permissions import ensure_self_or_admin, require_staff, require_student
from academia.models.assignment import Assignment
from academia.models.user import User
from academia.schemas.submission import SubmissionGradeUpdate, SubmissionRead
from academia.services.file_upload import discard_upload, save_upload
from academia.services.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _ensure_assignment_exists(storage: Storage, assignment_id: int) -> Assignment:
    a = storage.get_assignment(assignment_id)
    if not a:
        raise NotFound("Assignment not found")
    return a


@router.post(
    "/assignments/{assignment_id}/submit",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Assignment already submitted"}},
)
def submit_assignment(
    assignment_id: int,
    content: Optional[str] = Form(default=None),
    file: Optional[UploadFile] = File(default=None),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
    me: User = Depends(require_student),
):
    assignment = _ensure_assignment_exists(storage, assignment_id)

    has_file = file is not None and bool(file.filename)
    if assignment.file_required and not has_file:
        raise InvalidInput("This assignment requires a file")
    if not has_file and not (content and content.strip()):
        raise InvalidInput("Invalid submission data")

    url = save_upload(file, settings) if has_file else None

    try:
        submission = storage.create_submission(
            assignment_id=assignment_id,
            student_id=me.id,
            content=content,
            file_url=url,
        )
    except Exception:
        # the row was not written, so the stored file has no owner
        if url:
            discard_upload(url, settings)
        raise

    logger.info("student %s submitted assignment %s", me.id, assignment_id)
    return submission


@router.get(
    "/assignments/{assignment_id}/submissions",
    response_model=list[SubmissionRead],
)
def list_submissions_for_assignment(
    assignment_id: int,
    storage: Storage = Depends(get_storage),
    staff: User = Depends(require_staff),
):
    _ensure_assignment_exists(storage, assignment_id)
    return storage.get_submissions_by_assignment(assignment_id)


@router.get("/submissions/student/{student_id}", response_model=list[SubmissionRead])
def student_submissions(
    student_id: int,
    storage: Storage = Depends(get_storage),
    me: User = Depends(get_current_user),
):
    ensure_self_or_admin(me, student_id)
    return storage.get_submissions_by_student(student_id)


@router.put("/submissions/{submission_id}/grade", response_model=SubmissionRead)
def grade_submission(
    submission_id: int,
    payload: SubmissionGradeUpdate,
    storage: Storage = Depends(get_storage),
    staff: User = Depends(require_staff),
):
    sub = storage.get_submission_by_id(submission_id)
    if not sub:
        raise NotFound("Submission not found")

    assignment = storage.get_assignment(sub.assignment_id)
    if assignment and payload.grade > assignment.max_points:
        raise InvalidInput(f"grade must be between 0 and {assignment.max_points}")

    graded = storage.update_submission_grade(submission_id, payload.grade, payload.feedback)
    logger.info("submission %s graded by %s", submission_id, staff.id)
    return graded
