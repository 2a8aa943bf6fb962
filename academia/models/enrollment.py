from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from academia.db.base_class import Base

ENROLLMENT_STATUSES = ("pending", "approved", "rejected")


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default="pending", index=True)
    enrolled_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    grade = Column(Numeric(5, 2, asdecimal=False), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "course_id", "student_id", name="uq_enrollments_course_student"
        ),
    )

    student = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")
