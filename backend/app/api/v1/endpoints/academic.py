"""
Academic record keeping for teachers and school admins.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.modules.auth.dependencies import get_staff_school_context
from app.schemas.academic import (
    GradeCreate,
    AttendanceMark,
    AssignmentCreate,
    SubmissionGrade,
    TimetableEntryCreate,
)
from app.services.academic_service import (
    AcademicService,
    serialize_assignment,
    serialize_attendance,
    serialize_grade,
    serialize_submission,
    serialize_timetable_entry,
)
from app.services.school_context_service import SchoolContext


router = APIRouter()


@router.post("/grades", status_code=status.HTTP_201_CREATED)
async def record_grade(
    data: GradeCreate,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Record a grade for a student"""
    grade = await AcademicService(db).record_grade(ctx.school_id, data.model_dump(), recorded_by=ctx.user.id)
    return {**serialize_grade(grade), "student_id": grade.student_id}


@router.post("/attendance")
async def mark_attendance(
    data: AttendanceMark,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Mark attendance for a class on one date"""
    records = await AcademicService(db).mark_attendance(
        ctx.school_id,
        data.attendance_date,
        [entry.model_dump() for entry in data.entries],
        marked_by=ctx.user.id,
    )
    return {"date": data.attendance_date.isoformat(), "marked": len(records),
            "records": [serialize_attendance(r) for r in records]}


@router.post("/assignments", status_code=status.HTTP_201_CREATED)
async def create_assignment(
    data: AssignmentCreate,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Publish an assignment to a class"""
    assignment = await AcademicService(db).create_assignment(ctx.school_id, data.model_dump(), created_by=ctx.user.id)
    return serialize_assignment(assignment)


@router.get("/assignments")
async def list_assignments(
    grade_level: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """List assignments, latest due date first"""
    assignments = await AcademicService(db).list_assignments(
        ctx.school_id, grade_level=grade_level, section=section, subject=subject
    )
    return [serialize_assignment(a) for a in assignments]


@router.post("/assignments/{assignment_id}/submissions/{submission_id}/grade")
async def grade_submission(
    assignment_id: str,
    submission_id: str,
    data: SubmissionGrade,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Score a submission"""
    submission = await AcademicService(db).grade_submission(
        ctx.school_id, assignment_id, submission_id, data.score, data.feedback, graded_by=ctx.user.id
    )
    return serialize_submission(submission)


@router.post("/timetable", status_code=status.HTTP_201_CREATED)
async def add_timetable_entry(
    data: TimetableEntryCreate,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Add a timetable period"""
    entry = await AcademicService(db).add_timetable_entry(ctx.school_id, data.model_dump())
    return serialize_timetable_entry(entry)
