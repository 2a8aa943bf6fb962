from fastapi import APIRouter, Depends

from academia.core.current_user import get_current_user
from academia.core.deps import get_storage
from academia.core.permissions import require_admin, require_staff
from academia.models.user import User
from academia.schemas.stats import AdminStats, DashboardStats, LecturerCourseStats
from academia.schemas.user import UserRead
from academia.services.storage import Storage

router = APIRouter()


def _student_figures(storage: Storage, student_id: int) -> dict:
    enrollments = storage.get_enrollments_by_student(student_id)
    submissions = storage.get_submissions_by_student(student_id)
    graded = [s.grade for s in submissions if s.grade is not None]

    return {
        "total_courses": len(enrollments),
        "total_submissions": len(submissions),
        "average_grade": round(sum(graded) / len(graded), 2) if graded else 0,
        "completion_rate": round(len(graded) / len(submissions) * 100, 2) if submissions else 0,
    }


def _lecturer_figures(storage: Storage, lecturer_id: int) -> dict:
    course_ids = [c.id for c in storage.get_courses_by_lecturer(lecturer_id)]
    return {
        "total_courses": len(course_ids),
        "total_assignments": storage.count_assignments(course_ids),
        "total_submissions": storage.count_submissions(course_ids),
        "pending_grading": storage.count_submissions(course_ids, ungraded_only=True),
    }


def _admin_figures(storage: Storage) -> dict:
    return {
        "total_assignments": storage.count_assignments(),
        "total_submissions": storage.count_submissions(),
        "pending_grading": storage.count_submissions(ungraded_only=True),
        "pending_enrollments": storage.count_pending_enrollments(),
    }


@router.get("/stats/dashboard", response_model=DashboardStats)
def dashboard_stats(
    storage: Storage = Depends(get_storage),
    me: User = Depends(get_current_user),
):
    stats = {"role": me.role, **storage.get_user_stats(), **storage.get_course_stats()}

    if me.role == "student":
        stats.update(_student_figures(storage, me.id))
    elif me.role == "lecturer":
        stats.update(_lecturer_figures(storage, me.id))
    else:
        stats.update(_admin_figures(storage))

    return stats


@router.get("/admin/stats", response_model=AdminStats)
def admin_stats(
    storage: Storage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return {**storage.get_user_stats(), **storage.get_course_stats()}


@router.get("/admin/users", response_model=list[UserRead])
def admin_users(
    storage: Storage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return storage.get_all_users()


@router.get("/lecturer/dashboard", response_model=list[LecturerCourseStats])
def lecturer_dashboard(
    storage: Storage = Depends(get_storage),
    me: User = Depends(require_staff),
):
    # admins see every course
    lecturer_id = me.id if me.role == "lecturer" else None
    return storage.get_lecturer_course_stats(lecturer_id)
