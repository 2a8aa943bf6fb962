from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, func

from academia.db.base_class import Base


class AIRecommendation(Base):
    __tablename__ = "ai_recommendations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    interests = Column(Text, nullable=False)
    # "generated" or "fallback"
    source = Column(String(20), nullable=False)
    recommendations = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class GeneratedSyllabus(Base):
    __tablename__ = "generated_syllabi"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_title = Column(String(255), nullable=False)
    course_description = Column(Text, nullable=False)
    duration = Column(Integer, nullable=False)
    credits = Column(Integer, nullable=False)
    source = Column(String(20), nullable=False)
    syllabus = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
