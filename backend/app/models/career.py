"""
Career Planning Models
- One career profile per student
- Assessment attempts, goals, opportunity applications, college favorites

College, opportunity and assessment catalogs are static and live in
app.services.career_service; rows here reference them by catalog id.
"""

from sqlalchemy import (
    Column, String, DateTime, Date, Enum as SQLEnum, Integer, Text, ForeignKey, JSON,
    UniqueConstraint,
)
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class AssessmentStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CareerGoalStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApplicationStatus(str, enum.Enum):
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class CareerProfile(Base):
    __tablename__ = "career_profiles"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, unique=True)
    academic_year = Column(String(20), nullable=False)

    career_interests = Column(JSON, default=list)       # ["Engineering", ...]
    preferred_industries = Column(JSON, default=list)
    work_values = Column(JSON, default=list)
    skills = Column(JSON, default=list)                  # [{skill_name, proficiency, category}]
    long_term_goal = Column(Text, nullable=True)
    short_term_goals = Column(JSON, default=list)
    future_plans = Column(JSON, default=dict)
    assessment_results = Column(JSON, default=dict)      # latest result per assessment id
    completion_percentage = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CareerAssessmentAttempt(Base):
    __tablename__ = "career_assessment_attempts"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    assessment_id = Column(String(50), nullable=False, index=True)
    status = Column(SQLEnum(AssessmentStatus), default=AssessmentStatus.IN_PROGRESS, nullable=False)
    answers = Column(JSON, default=list)
    score = Column(Integer, nullable=True)
    results = Column(JSON, nullable=True)

    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)


class CareerGoal(Base):
    __tablename__ = "career_goals"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(30), default="education")  # education, skills, experience, networking, personal
    priority = Column(String(20), default="medium")
    target_date = Column(Date, nullable=True)
    progress = Column(Integer, default=0)
    status = Column(SQLEnum(CareerGoalStatus), default=CareerGoalStatus.ACTIVE, nullable=False)
    milestones = Column(JSON, default=list)  # [{id, title, due_date, completed, completed_at}]

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class OpportunityApplication(Base):
    __tablename__ = "opportunity_applications"
    __table_args__ = (
        UniqueConstraint("student_id", "opportunity_id", name="uq_opportunity_application"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    opportunity_id = Column(String(50), nullable=False)
    status = Column(SQLEnum(ApplicationStatus), default=ApplicationStatus.APPLIED, nullable=False)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(String(500), nullable=True)

    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CollegeFavorite(Base):
    __tablename__ = "college_favorites"
    __table_args__ = (
        UniqueConstraint("student_id", "college_id", name="uq_college_favorite"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    college_id = Column(String(50), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
