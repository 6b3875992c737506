"""
Student portal: emergency reporting, status tracking and safety checks.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.student import Student
from app.models.user import User
from app.modules.auth.dependencies import get_current_user, get_portal_student
from app.schemas.emergency import EmergencyReportCreate, SafetyCheckCreate
from app.services.emergency_service import EmergencyService, serialize_report


router = APIRouter()


@router.post("/{student_id}/report", status_code=status.HTTP_201_CREATED)
async def report_emergency(
    data: EmergencyReportCreate,
    student: Student = Depends(get_portal_student),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Report an emergency; it is routed to a department by type and severity"""
    report = await EmergencyService(db).report_emergency(student, data.model_dump(), current_user)
    return serialize_report(report)


@router.get("/{student_id}/status/{emergency_id}")
async def get_emergency_status(
    emergency_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Current status and timeline of a report"""
    return serialize_report(await EmergencyService(db).get_report(student, emergency_id))


@router.get("/{student_id}/contacts")
async def get_contacts(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Personal, school and external emergency contacts"""
    return await EmergencyService(db).get_contacts(student)


@router.get("/{student_id}/safety-resources")
async def get_safety_resources(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Safety guides and procedures"""
    return EmergencyService(db).get_safety_resources()


@router.post("/{student_id}/safety-check", status_code=status.HTTP_201_CREATED)
async def submit_safety_check(
    data: SafetyCheckCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Check in as safe or ask for help"""
    return await EmergencyService(db).submit_safety_check(student, data.model_dump())


@router.get("/{student_id}/history")
async def get_history(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Past reports with statistics by type and severity"""
    return await EmergencyService(db).get_history(student)
