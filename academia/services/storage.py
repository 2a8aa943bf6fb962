"""
Domain store: one method per (entity, operation) over a request-scoped session.

Uniqueness is left to the database. Inserts that violate a unique constraint
are rolled back and surface as ``DuplicateError``; callers never check for an
existing row first.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academia.core.errors import DuplicateError
from academia.models.ai_artifact import AIRecommendation, GeneratedSyllabus
from academia.models.assignment import Assignment
from academia.models.course import Course
from academia.models.enrollment import Enrollment
from academia.models.password_reset import PasswordReset
from academia.models.submission import Submission
from academia.models.user import User

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate entry", "duplicate key")


def is_unique_violation(exc: IntegrityError) -> bool:
    # postgres reports SQLSTATE 23505, mysql errno 1062, sqlite only a message
    orig = exc.orig
    if getattr(orig, "pgcode", None) == "23505":
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == 1062:
        return True
    text = str(orig).lower()
    return any(marker in text for marker in UNIQUE_VIOLATION_MARKERS)


class Storage:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self, obj, duplicate_message: str):
        self.db.add(obj)
        return self._commit_unique(obj, duplicate_message)

    def _commit_unique(self, obj, duplicate_message: str):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                raise DuplicateError(duplicate_message) from e
            raise
        self.db.refresh(obj)
        return obj

    def _save(self, obj):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(obj)
        return obj

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def get_all_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id.asc()).all()

    def create_user(self, **fields: Any) -> User:
        return self._insert(User(**fields), "Username or email already registered")

    def update_user_password(self, user_id: int, hashed_password: str, commit: bool = True) -> Optional[User]:
        user = self.get_user(user_id)
        if not user:
            return None
        user.hashed_password = hashed_password
        return self._save(user) if commit else user

    # Courses

    def get_course(self, course_id: int) -> Optional[Course]:
        return self.db.query(Course).filter(Course.id == course_id).first()

    def get_all_courses(self) -> list[Course]:
        return self.db.query(Course).order_by(Course.id.asc()).all()

    def get_courses_by_department(self, department: str) -> list[Course]:
        return (
            self.db.query(Course)
            .filter(Course.department == department, Course.is_active.is_(True))
            .order_by(Course.id.asc())
            .all()
        )

    def get_courses_by_lecturer(self, lecturer_id: int) -> list[Course]:
        return (
            self.db.query(Course)
            .filter(Course.lecturer_id == lecturer_id)
            .order_by(Course.id.asc())
            .all()
        )

    def create_course(self, **fields: Any) -> Course:
        return self._insert(Course(**fields), "Course code already exists")

    def update_course(self, course_id: int, **changes: Any) -> Optional[Course]:
        course = self.get_course(course_id)
        if not course:
            return None
        for key, value in changes.items():
            setattr(course, key, value)
        return self._commit_unique(course, "Course code already exists")

    # Enrollments

    def get_enrollment(self, course_id: int, student_id: int) -> Optional[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.course_id == course_id, Enrollment.student_id == student_id)
            .first()
        )

    def get_enrollment_by_id(self, enrollment_id: int) -> Optional[Enrollment]:
        return self.db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()

    def get_enrollments_by_student(self, student_id: int) -> list[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.student_id == student_id)
            .order_by(Enrollment.id.asc())
            .all()
        )

    def get_enrollments_by_course(self, course_id: int) -> list[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.course_id == course_id)
            .order_by(Enrollment.id.asc())
            .all()
        )

    def get_pending_enrollments(self) -> list[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.status == "pending")
            .order_by(Enrollment.enrolled_at.asc(), Enrollment.id.asc())
            .all()
        )

    def create_enrollment(self, course_id: int, student_id: int, status: str = "pending") -> Enrollment:
        enrollment = Enrollment(course_id=course_id, student_id=student_id, status=status)
        return self._insert(enrollment, "Already enrolled in this course")

    def update_enrollment_status(self, enrollment_id: int, status: str) -> Optional[Enrollment]:
        # plain overwrite: a decided enrollment can be decided again
        enrollment = self.get_enrollment_by_id(enrollment_id)
        if not enrollment:
            return None
        enrollment.status = status
        return self._save(enrollment)

    # Assignments

    def get_assignment(self, assignment_id: int) -> Optional[Assignment]:
        return self.db.query(Assignment).filter(Assignment.id == assignment_id).first()

    def get_assignments_by_course(self, course_id: int) -> list[Assignment]:
        return (
            self.db.query(Assignment)
            .filter(Assignment.course_id == course_id)
            .order_by(Assignment.due_date.asc(), Assignment.id.asc())
            .all()
        )

    def create_assignment(self, **fields: Any) -> Assignment:
        a = Assignment(**fields)
        self.db.add(a)
        return self._save(a)

    # Submissions

    def get_submission(self, assignment_id: int, student_id: int) -> Optional[Submission]:
        return (
            self.db.query(Submission)
            .filter(Submission.assignment_id == assignment_id, Submission.student_id == student_id)
            .first()
        )

    def get_submission_by_id(self, submission_id: int) -> Optional[Submission]:
        return self.db.query(Submission).filter(Submission.id == submission_id).first()

    def get_submissions_by_student(self, student_id: int) -> list[Submission]:
        return (
            self.db.query(Submission)
            .filter(Submission.student_id == student_id)
            .order_by(Submission.submitted_at.desc(), Submission.id.desc())
            .all()
        )

    def get_submissions_by_assignment(self, assignment_id: int) -> list[Submission]:
        return (
            self.db.query(Submission)
            .filter(Submission.assignment_id == assignment_id)
            .order_by(Submission.id.asc())
            .all()
        )

    def create_submission(
        self,
        assignment_id: int,
        student_id: int,
        content: Optional[str] = None,
        file_url: Optional[str] = None,
    ) -> Submission:
        s = Submission(
            assignment_id=assignment_id,
            student_id=student_id,
            content=content,
            file_url=file_url,
            submitted_at=datetime.now(timezone.utc),
        )
        return self._insert(s, "Assignment already submitted")

    def update_submission_grade(
        self, submission_id: int, grade: float, feedback: Optional[str] = None
    ) -> Optional[Submission]:
        # last write wins, graded_at always moves to now
        sub = self.get_submission_by_id(submission_id)
        if not sub:
            return None
        sub.grade = grade
        sub.feedback = feedback
        sub.graded_at = datetime.now(timezone.utc)
        return self._save(sub)

    # AI artifacts

    def save_recommendations(
        self, user_id: int, interests: str, source: str, recommendations: dict
    ) -> AIRecommendation:
        record = AIRecommendation(
            user_id=user_id,
            interests=interests,
            source=source,
            recommendations=recommendations,
        )
        self.db.add(record)
        return self._save(record)

    def save_syllabus(
        self,
        user_id: int,
        course_title: str,
        course_description: str,
        duration: int,
        credits: int,
        source: str,
        syllabus: dict,
    ) -> GeneratedSyllabus:
        record = GeneratedSyllabus(
            user_id=user_id,
            course_title=course_title,
            course_description=course_description,
            duration=duration,
            credits=credits,
            source=source,
            syllabus=syllabus,
        )
        self.db.add(record)
        return self._save(record)

    # Password resets

    def create_password_reset(self, user_id: int, token: str, expires_at: datetime) -> PasswordReset:
        return self._insert(
            PasswordReset(user_id=user_id, token=token, expires_at=expires_at, used=False),
            "Reset token collision",
        )

    def get_password_reset(self, token: str) -> Optional[PasswordReset]:
        return self.db.query(PasswordReset).filter(PasswordReset.token == token).first()

    def mark_password_reset_used(self, reset_id: int, commit: bool = True) -> None:
        reset = self.db.query(PasswordReset).filter(PasswordReset.id == reset_id).first()
        if reset:
            reset.used = True
            if commit:
                self._save(reset)

    def complete_password_reset(self, reset: PasswordReset, hashed_password: str) -> None:
        """Set the new password and consume the token in a single commit."""
        self.update_user_password(reset.user_id, hashed_password, commit=False)
        self.mark_password_reset_used(reset.id, commit=False)
        self._save(reset)

    # Stats

    def _count(self, model, *criteria) -> int:
        return (self.db.query(func.count(model.id)).filter(*criteria).scalar()) or 0

    def get_user_stats(self) -> dict:
        return {
            "total_users": self._count(User),
            "active_students": self._count(User, User.role == "student"),
            "active_lecturers": self._count(User, User.role == "lecturer"),
        }

    def get_course_stats(self) -> dict:
        return {
            "total_courses": self._count(Course),
            "active_courses": self._count(Course, Course.is_active.is_(True)),
        }

    def count_pending_enrollments(self) -> int:
        return self._count(Enrollment, Enrollment.status == "pending")

    def count_assignments(self, course_ids: Optional[list[int]] = None) -> int:
        if course_ids is None:
            return self._count(Assignment)
        if not course_ids:
            return 0
        return self._count(Assignment, Assignment.course_id.in_(course_ids))

    def count_submissions(self, course_ids: Optional[list[int]] = None, ungraded_only: bool = False) -> int:
        if course_ids is not None and not course_ids:
            return 0
        q = self.db.query(func.count(Submission.id)).join(
            Assignment, Submission.assignment_id == Assignment.id
        )
        if course_ids is not None:
            q = q.filter(Assignment.course_id.in_(course_ids))
        if ungraded_only:
            q = q.filter(Submission.grade.is_(None))
        return q.scalar() or 0

    def get_lecturer_course_stats(self, lecturer_id: Optional[int] = None) -> list[dict]:
        """Per-course counts for one lecturer's courses, or for every course when lecturer_id is None."""
        courses = self.get_courses_by_lecturer(lecturer_id) if lecturer_id is not None else self.get_all_courses()

        rows: list[dict] = []
        for course in courses:
            rows.append(
                {
                    "course_id": course.id,
                    "course_title": course.title,
                    "total_students": self._count(Enrollment, Enrollment.course_id == course.id),
                    "total_assignments": self._count(Assignment, Assignment.course_id == course.id),
                    "total_submissions": self.count_submissions([course.id]),
                    "ungraded_submissions": self.count_submissions([course.id], ungraded_only=True),
                }
            )
        return rows
