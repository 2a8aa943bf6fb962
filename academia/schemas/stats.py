from academia.schemas.base import APIModel


class UserStats(APIModel):
    total_users: int
    active_students: int
    active_lecturers: int


class CourseStats(APIModel):
    total_courses: int
    active_courses: int


class AdminStats(UserStats, CourseStats):
    pass


class DashboardStats(APIModel):
    role: str
    total_users: int
    active_students: int
    active_lecturers: int
    total_courses: int
    active_courses: int
    total_assignments: int = 0
    total_submissions: int = 0
    pending_grading: int = 0
    pending_enrollments: int = 0
    completion_rate: float = 0
    average_grade: float = 0


class LecturerCourseStats(APIModel):
    course_id: int
    course_title: str
    total_students: int
    total_assignments: int
    total_submissions: int
    ungraded_submissions: int
