"""
Academic Records Models
- Grades, attendance, assignments and submissions, timetable
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Time, Enum as SQLEnum, Integer, Text, ForeignKey,
    Float, JSON, UniqueConstraint, Index,
)
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class AssessmentType(str, enum.Enum):
    EXAM = "exam"
    QUIZ = "quiz"
    ASSIGNMENT = "assignment"
    PROJECT = "project"
    PRACTICAL = "practical"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class SubmissionStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    LATE = "late"
    GRADED = "graded"


class DayOfWeek(str, enum.Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class GradeRecord(Base):
    """One scored assessment for one student in one subject"""
    __tablename__ = "grade_records"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    subject = Column(String(100), nullable=False)
    assessment_type = Column(SQLEnum(AssessmentType), default=AssessmentType.EXAM, nullable=False)
    assessment_name = Column(String(200), nullable=True)
    score = Column(Float, nullable=False)
    max_score = Column(Float, default=100.0, nullable=False)
    credits = Column(Float, default=1.0, nullable=False)
    academic_year = Column(String(20), nullable=False)
    term = Column(String(20), nullable=False)  # term1, term2, final
    remarks = Column(Text, nullable=True)
    recorded_by = Column(GUID, nullable=True)

    assessed_on = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)

    __table_args__ = (
        Index('ix_grade_student_year_term', 'student_id', 'academic_year', 'term'),
    )

    @property
    def percentage(self) -> float:
        return round(self.score / self.max_score * 100, 2) if self.max_score else 0.0


class AttendanceRecord(Base):
    """Daily attendance; one row per student per date"""
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(SQLEnum(AttendanceStatus), nullable=False)
    remarks = Column(String(255), nullable=True)
    marked_by = Column(GUID, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)


class Assignment(Base):
    """Homework set for a grade level (optionally a single section)"""
    __tablename__ = "assignments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    grade_level = Column(String(20), nullable=False, index=True)
    section = Column(String(10), nullable=True)
    subject = Column(String(100), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=False)
    max_score = Column(Float, default=100.0, nullable=False)
    attachments = Column(JSON, default=list)
    created_by = Column(GUID, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)


class AssignmentSubmission(Base):
    __tablename__ = "assignment_submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    assignment_id = Column(GUID, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    attachments = Column(JSON, default=list)
    status = Column(SQLEnum(SubmissionStatus), default=SubmissionStatus.SUBMITTED, nullable=False)
    is_late = Column(Boolean, default=False)
    score = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_by = Column(GUID, nullable=True)

    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    graded_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TimetableEntry(Base):
    """One weekly period for a grade level/section"""
    __tablename__ = "timetable_entries"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    grade_level = Column(String(20), nullable=False, index=True)
    section = Column(String(10), nullable=True)
    day_of_week = Column(SQLEnum(DayOfWeek), nullable=False)
    period = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    subject = Column(String(100), nullable=False)
    teacher_name = Column(String(200), nullable=True)
    teacher_staff_id = Column(GUID, ForeignKey("staff.id", ondelete="SET NULL"), nullable=True, index=True)
    room = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
