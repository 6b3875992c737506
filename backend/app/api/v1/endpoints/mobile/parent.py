"""
Mobile parent app endpoints. Child routes only resolve students linked to
the signed-in parent.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.student import Student
from app.models.user import User
from app.modules.auth.dependencies import get_current_parent, get_portal_student
from app.schemas.emergency import ChildEmergencyReportCreate
from app.schemas.fee import ChildPaymentCreate
from app.services.academic_service import AcademicService, serialize_attendance, serialize_grade
from app.services.dashboard_service import DashboardService
from app.services.emergency_service import EmergencyService, serialize_report
from app.services.fee_service import FeeService, serialize_payment
from app.services.mobile_service import MobileService
from app.services.notification_service import NotificationService, serialize_notification
from app.services.student_service import get_children
from app.services.transportation_service import TransportationService


router = APIRouter(dependencies=[Depends(get_current_parent)])


@router.get("/dashboard")
async def get_dashboard(
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """Summary card for every linked child"""
    return await MobileService(db).parent_dashboard(current_user)


@router.get("/children")
async def list_children(
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """Linked children"""
    return [
        {
            "id": child.id,
            "full_name": child.full_name,
            "admission_number": child.admission_number,
            "grade_level": child.grade_level,
            "section": child.section,
            "status": child.status.value,
        }
        for child in await get_children(db, current_user)
    ]


@router.get("/child/{student_id}/dashboard")
async def get_child_dashboard(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """A child's dashboard"""
    return await DashboardService(db).get_student_dashboard(student)


@router.get("/child/{student_id}/attendance")
async def get_child_attendance(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """A child's attendance summary and records"""
    service = AcademicService(db)
    return {
        "summary": await service.get_attendance_summary(student),
        "records": [serialize_attendance(r) for r in await service.get_attendance(student)],
    }


@router.get("/child/{student_id}/grades")
async def get_child_grades(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """A child's grades with the subject summary"""
    service = AcademicService(db)
    return {
        "summary": await service.get_grade_summary(student),
        "grades": [serialize_grade(g) for g in await service.get_grades(student)],
    }


@router.get("/child/{student_id}/timetable")
async def get_child_timetable(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """A child's weekly timetable"""
    return await AcademicService(db).get_weekly_timetable(student)


@router.get("/fees")
async def get_fees(
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """Fee summary for every linked child"""
    return await MobileService(db).parent_fees(current_user)


@router.post("/fees/pay", status_code=status.HTTP_201_CREATED)
async def pay_fees(
    data: ChildPaymentCreate,
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """Pay toward a child's outstanding balance"""
    student = await MobileService(db).get_child(current_user, data.student_id)
    payment = await FeeService(db).make_payment(student, data.amount, data.method, current_user, data.notes)
    return serialize_payment(payment)


@router.get("/notifications")
async def get_notifications(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """The parent's notifications"""
    notifications = await NotificationService(db).list_for_user(current_user.id, unread_only=unread_only)
    return [serialize_notification(n) for n in notifications]


@router.post("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """Mark a notification as read"""
    return serialize_notification(await NotificationService(db).mark_read(current_user.id, notification_id))


@router.get("/transport")
async def get_transport(
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """Route and bus position for each child that rides school transport"""
    service = TransportationService(db)
    items = []
    for child in await get_children(db, current_user):
        try:
            route = await service.get_route_info(child)
            tracking = await service.get_vehicle_tracking(child)
        except ResourceNotFoundError:
            route, tracking = None, None
        items.append({"student_id": child.id, "full_name": child.full_name, "route": route, "tracking": tracking})
    return items


@router.post("/emergency", status_code=status.HTTP_201_CREATED)
async def report_emergency(
    data: ChildEmergencyReportCreate,
    current_user: User = Depends(get_current_parent),
    db: AsyncSession = Depends(get_db)
):
    """Report an emergency involving a linked child"""
    student = await MobileService(db).get_child(current_user, data.student_id)
    report = await EmergencyService(db).report_emergency(
        student, data.model_dump(exclude={"student_id"}), current_user
    )
    return serialize_report(report)
