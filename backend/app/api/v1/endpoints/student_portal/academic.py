"""
Student portal: grades, attendance, assignments, timetable and reports.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional

from app.core.database import get_db
from app.models.academic import DayOfWeek
from app.models.student import Student
from app.modules.auth.dependencies import get_portal_student
from app.schemas.academic import AssignmentSubmit
from app.services.academic_service import (
    AcademicService,
    serialize_attendance,
    serialize_grade,
    serialize_submission,
    serialize_timetable_entry,
)


router = APIRouter()

ASSIGNMENT_STATUS_PATTERN = r'^(pending|submitted|graded|overdue)$'


@router.get("/{student_id}/grades")
async def get_grades(
    academic_year: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Grade records, newest first"""
    grades = await AcademicService(db).get_grades(student, academic_year=academic_year, term=term, subject=subject)
    return {"student_id": student.id, "grades": [serialize_grade(g) for g in grades]}


@router.get("/{student_id}/grades/summary")
async def get_grade_summary(
    academic_year: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Per-subject averages, GPA and grade distribution"""
    return await AcademicService(db).get_grade_summary(student, academic_year=academic_year, term=term)


@router.get("/{student_id}/attendance")
async def get_attendance(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Attendance records in a date range"""
    records = await AcademicService(db).get_attendance(student, start_date, end_date)
    return {"student_id": student.id, "records": [serialize_attendance(r) for r in records]}


@router.get("/{student_id}/attendance/summary")
async def get_attendance_summary(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Attendance counts by status and rate"""
    return await AcademicService(db).get_attendance_summary(student, start_date, end_date)


@router.get("/{student_id}/assignments")
async def get_assignments(
    status: Optional[str] = Query(None, pattern=ASSIGNMENT_STATUS_PATTERN),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Class assignments with the student's submission status"""
    return await AcademicService(db).get_student_assignments(student, status=status)


@router.post("/{student_id}/assignments/{assignment_id}/submit")
async def submit_assignment(
    assignment_id: str,
    data: AssignmentSubmit,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Submit (or resubmit) an assignment"""
    submission = await AcademicService(db).submit_assignment(student, assignment_id, data.content, data.attachments)
    return serialize_submission(submission)


@router.get("/{student_id}/timetable")
async def get_timetable(
    day: Optional[DayOfWeek] = Query(None),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Weekly timetable, or one day's periods"""
    service = AcademicService(db)
    if day:
        entries = await service.get_timetable(student, day=day)
        return {"day_of_week": day.value, "periods": [serialize_timetable_entry(e) for e in entries]}
    return await service.get_weekly_timetable(student)


@router.get("/{student_id}/timetable/today")
async def get_today_timetable(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Today's periods"""
    return await AcademicService(db).get_today_timetable(student)


@router.get("/{student_id}/progress")
async def get_progress(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """GPA, attendance rate and assignment completion"""
    return await AcademicService(db).get_progress(student)


@router.get("/{student_id}/reports")
async def get_reports(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Report cards by academic year and term"""
    return await AcademicService(db).get_reports(student)
