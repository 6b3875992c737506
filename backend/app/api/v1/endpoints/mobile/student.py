"""
Mobile student app endpoints, composed from the student portal services.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.student import Student
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_user, get_portal_student, require_roles
from app.schemas.academic import AssignmentSubmit
from app.schemas.emergency import EmergencyReportCreate
from app.schemas.self_service import StudentProfileUpdate
from app.services.academic_service import (
    AcademicService,
    serialize_attendance,
    serialize_grade,
    serialize_submission,
)
from app.services.dashboard_service import DashboardService
from app.services.emergency_service import EmergencyService, serialize_report
from app.services.library_service import LibraryService, serialize_loan
from app.services.notification_service import NotificationService, serialize_notification
from app.services.school_context_service import SchoolContextService
from app.services.self_service_service import SelfServiceService, serialize_profile
from app.services.transportation_service import TransportationService


router = APIRouter()


def _notification_owner(student: Student, notification_id: Optional[str] = None) -> str:
    if not student.user_id:
        raise ResourceNotFoundError("Notification", notification_id or student.id)
    return student.user_id


@router.get("/dashboard")
async def get_dashboard(
    current_user: User = Depends(require_roles(UserRole.STUDENT)),
    db: AsyncSession = Depends(get_db)
):
    """Home screen for the signed-in student"""
    student = await SchoolContextService(db).get_student_for_user(current_user)
    return await DashboardService(db).get_student_dashboard(student)


@router.get("/{student_id}/timetable")
async def get_timetable(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Today's periods and the weekly timetable"""
    service = AcademicService(db)
    return {
        "today": await service.get_today_timetable(student),
        "week": await service.get_weekly_timetable(student),
    }


@router.get("/{student_id}/assignments")
async def get_assignments(
    status_filter: Optional[str] = Query(None, alias="status", pattern=r'^(pending|submitted|graded|overdue)$'),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Assignments with submission status"""
    return await AcademicService(db).get_student_assignments(student, status=status_filter)


@router.post("/{student_id}/assignments/{assignment_id}/submit")
async def submit_assignment(
    assignment_id: str,
    data: AssignmentSubmit,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Submit an assignment"""
    submission = await AcademicService(db).submit_assignment(student, assignment_id, data.content, data.attachments)
    return serialize_submission(submission)


@router.get("/{student_id}/grades")
async def get_grades(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Recent grades with the subject summary"""
    service = AcademicService(db)
    grades = await service.get_grades(student)
    return {
        "summary": await service.get_grade_summary(student),
        "grades": [serialize_grade(g) for g in grades],
    }


@router.get("/{student_id}/attendance")
async def get_attendance(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Attendance summary and records"""
    service = AcademicService(db)
    return {
        "summary": await service.get_attendance_summary(student),
        "records": [serialize_attendance(r) for r in await service.get_attendance(student)],
    }


@router.get("/{student_id}/notifications")
async def get_notifications(
    unread_only: bool = Query(False),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """The student's notifications"""
    if not student.user_id:
        return []
    notifications = await NotificationService(db).list_for_user(student.user_id, unread_only=unread_only)
    return [serialize_notification(n) for n in notifications]


@router.post("/{student_id}/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Mark a notification as read"""
    owner = _notification_owner(student, notification_id)
    return serialize_notification(await NotificationService(db).mark_read(owner, notification_id))


@router.get("/{student_id}/library")
async def get_library(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Loans and fines"""
    service = LibraryService(db)
    return {
        "loans": await service.get_loans(student),
        "fines": await service.get_fines(student),
    }


@router.post("/{student_id}/library/{loan_id}/renew")
async def renew_loan(
    loan_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Renew a loan"""
    return serialize_loan(await LibraryService(db).renew_loan(student, loan_id))


@router.get("/{student_id}/transport")
async def get_transport(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Route and live bus position"""
    service = TransportationService(db)
    return {
        "route": await service.get_route_info(student),
        "tracking": await service.get_vehicle_tracking(student),
    }


@router.post("/{student_id}/emergency", status_code=status.HTTP_201_CREATED)
async def report_emergency(
    data: EmergencyReportCreate,
    student: Student = Depends(get_portal_student),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Report an emergency"""
    report = await EmergencyService(db).report_emergency(student, data.model_dump(), current_user)
    return serialize_report(report)


@router.get("/{student_id}/profile")
async def get_profile(student: Student = Depends(get_portal_student)):
    """Student profile"""
    return serialize_profile(student)


@router.put("/{student_id}/profile")
async def update_profile(
    data: StudentProfileUpdate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Update contact details"""
    return serialize_profile(await SelfServiceService(db).update_profile(student, data.model_dump(exclude_unset=True)))
