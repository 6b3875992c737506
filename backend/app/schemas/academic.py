"""
Academic Schemas - grades, attendance, assignments, timetable
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime, time, timezone

from app.models.academic import AssessmentType, AttendanceStatus, DayOfWeek


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class GradeCreate(BaseModel):
    student_id: str
    subject: str = Field(..., min_length=1, max_length=100)
    assessment_type: AssessmentType = AssessmentType.EXAM
    assessment_name: Optional[str] = Field(None, max_length=200)
    score: float = Field(..., ge=0)
    max_score: float = Field(default=100.0, gt=0)
    credits: float = Field(default=1.0, gt=0)
    academic_year: Optional[str] = Field(None, max_length=20)
    term: str = Field(..., min_length=1, max_length=20)
    remarks: Optional[str] = None
    assessed_on: Optional[date] = None


class AttendanceEntry(BaseModel):
    student_id: str
    status: AttendanceStatus
    remarks: Optional[str] = Field(None, max_length=255)


class AttendanceMark(BaseModel):
    attendance_date: date
    entries: List[AttendanceEntry] = Field(..., min_length=1)


class AssignmentCreate(BaseModel):
    grade_level: str = Field(..., min_length=1, max_length=20)
    section: Optional[str] = Field(None, max_length=10)
    subject: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: datetime
    max_score: float = Field(default=100.0, gt=0)
    attachments: List[str] = Field(default_factory=list)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class SubmissionGrade(BaseModel):
    score: float = Field(..., ge=0)
    feedback: Optional[str] = None


class AssignmentSubmit(BaseModel):
    content: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_content(self):
        if not (self.content and self.content.strip()) and not self.attachments:
            raise ValueError("Submission needs content or at least one attachment")
        return self


class TimetableEntryCreate(BaseModel):
    grade_level: str = Field(..., min_length=1, max_length=20)
    section: Optional[str] = Field(None, max_length=10)
    day_of_week: DayOfWeek
    period: int = Field(..., ge=1, le=12)
    start_time: time
    end_time: time
    subject: str = Field(..., min_length=1, max_length=100)
    teacher_name: Optional[str] = Field(None, max_length=200)
    teacher_staff_id: Optional[str] = None
    room: Optional[str] = Field(None, max_length=50)
