"""
Student portal: bus route, live position, schedule and transport support.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.student import Student
from app.models.user import User
from app.modules.auth.dependencies import get_current_user, get_portal_student
from app.schemas.transportation import TransportEmergencyCreate, TransportFeedbackCreate
from app.services.emergency_service import serialize_report
from app.services.notification_service import NotificationService, serialize_notification
from app.services.transportation_service import TransportationService


router = APIRouter()


@router.get("/{student_id}/routes")
async def get_route_info(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Assigned route, stop and pickup/drop times"""
    return await TransportationService(db).get_route_info(student)


@router.get("/{student_id}/vehicle-tracking")
async def get_vehicle_tracking(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Estimated bus position from the route timetable"""
    return await TransportationService(db).get_vehicle_tracking(student)


@router.post("/{student_id}/emergency", status_code=status.HTTP_201_CREATED)
async def report_transport_emergency(
    data: TransportEmergencyCreate,
    student: Student = Depends(get_portal_student),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Report an emergency on the bus"""
    report = await TransportationService(db).report_emergency(student, data.model_dump(), current_user)
    return serialize_report(report)


@router.get("/{student_id}/emergency-contacts")
async def get_emergency_contacts(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Driver, attendant and transport office contacts"""
    return await TransportationService(db).get_emergency_contacts(student)


@router.get("/{student_id}/schedule")
async def get_schedule(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Weekday pickup and drop schedule"""
    return await TransportationService(db).get_schedule(student)


@router.post("/{student_id}/feedback", status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    data: TransportFeedbackCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Rate the transport service"""
    feedback = await TransportationService(db).submit_feedback(student, data.model_dump())
    return {
        "id": feedback.id,
        "route_id": feedback.route_id,
        "rating": feedback.rating,
        "category": feedback.category,
        "comments": feedback.comments,
    }


@router.get("/{student_id}/notifications")
async def get_notifications(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Transport notices"""
    return [serialize_notification(n) for n in await TransportationService(db).get_notifications(student)]


@router.post("/{student_id}/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Mark a transport notice as read"""
    if not student.user_id:
        raise ResourceNotFoundError("Notification", notification_id)
    notification = await NotificationService(db).mark_read(student.user_id, notification_id)
    return serialize_notification(notification)
