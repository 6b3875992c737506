"""
Student dashboard: one call that composes the portal services
"""

from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.library import BookLoan, LoanStatus
from app.models.student import Student
from app.models.wellness import WellnessRecord
from app.services.academic_service import AcademicService
from app.services.fee_service import FeeService
from app.services.notification_service import NotificationService


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.academic = AcademicService(db)
        self.fees = FeeService(db)
        self.notifications = NotificationService(db)

    async def get_student_dashboard(self, student: Student, today: Optional[date] = None) -> Dict[str, Any]:
        summary = await self.academic.get_grade_summary(student)
        attendance = await self.academic.get_attendance_summary(student)
        pending = await self.academic.get_student_assignments(student, status="pending")
        overdue = await self.academic.get_student_assignments(student, status="overdue")
        timetable = await self.academic.get_today_timetable(student, today)

        active_loans = await self.db.execute(
            select(BookLoan).where(BookLoan.student_id == student.id, BookLoan.status == LoanStatus.ACTIVE)
        )
        latest_checkin = (await self.db.execute(
            select(WellnessRecord)
            .where(WellnessRecord.student_id == student.id)
            .order_by(WellnessRecord.recorded_at.desc())
            .limit(1)
        )).scalar_one_or_none()

        unread = await self.notifications.unread_count(student.user_id) if student.user_id else 0

        return {
            "profile": {
                "id": student.id,
                "full_name": student.full_name,
                "admission_number": student.admission_number,
                "grade_level": student.grade_level,
                "section": student.section,
                "status": student.status.value,
            },
            "gpa": summary["gpa"],
            "attendance_rate": attendance["attendance_rate"],
            "pending_assignments": len(pending),
            "overdue_assignments": len(overdue),
            "upcoming_assignments": pending[:5],
            "today_timetable": timetable,
            "unread_notifications": unread,
            "outstanding_fees": await self.fees.get_outstanding_balance(student),
            "active_loans": len(active_loans.scalars().all()),
            "wellness_status": latest_checkin.overall_status.value if latest_checkin else None,
        }


def get_dashboard_service(db: AsyncSession) -> DashboardService:
    return DashboardService(db)
