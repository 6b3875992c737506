"""
Mobile Service Layer

Device registration, biometric re-login, incremental sync, and the parent
and staff compositions used by the mobile apps. Everything else the apps
show comes straight from the portal services.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthenticationError, StaffNotFoundError
from app.core.logging_config import logger
from app.core.security import create_token_pair
from app.models.academic import (
    Assignment,
    AttendanceRecord,
    DayOfWeek,
    GradeRecord,
    TimetableEntry,
)
from app.models.mobile_device import MobileDevice
from app.models.notification import Notification
from app.models.staff import Staff
from app.models.student import Student, StudentStatus
from app.models.user import User, UserRole
from app.services.academic_service import (
    AcademicService,
    WEEKDAYS,
    serialize_assignment,
    serialize_attendance,
    serialize_grade,
    serialize_timetable_entry,
)
from app.services.fee_service import FeeService
from app.services.notification_service import serialize_notification
from app.services.school_context_service import SchoolContextService
from app.services.student_service import get_children


def serialize_device(device: MobileDevice) -> dict:
    return {
        "id": device.id,
        "device_id": device.device_id,
        "platform": device.platform,
        "device_name": device.device_name,
        "app_version": device.app_version,
        "biometric_enabled": device.biometric_enabled,
        "is_active": device.is_active,
        "last_seen_at": device.last_seen_at.isoformat() if device.last_seen_at else None,
    }


class MobileService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.academic = AcademicService(db)
        self.fees = FeeService(db)

    # =====================================================
    # DEVICES
    # =====================================================

    async def _device(self, user: User, device_id: str) -> Optional[MobileDevice]:
        result = await self.db.execute(
            select(MobileDevice).where(MobileDevice.user_id == user.id, MobileDevice.device_id == device_id)
        )
        return result.scalar_one_or_none()

    async def register_device(self, user: User, data: Dict[str, Any]) -> MobileDevice:
        """Register or refresh a device; re-registering reactivates it"""
        device = await self._device(user, data["device_id"])
        now = datetime.utcnow()
        if device:
            for key in ("platform", "device_name", "app_version", "push_token", "biometric_enabled"):
                if data.get(key) is not None:
                    setattr(device, key, data[key])
            device.is_active = True
            device.last_seen_at = now
        else:
            device = MobileDevice(user_id=user.id, registered_at=now, last_seen_at=now, **data)
            self.db.add(device)
        await self.db.commit()
        logger.info(f"Registered {device.platform} device for user {user.id}")
        return device

    async def deactivate_device(self, user: User, device_id: str) -> None:
        device = await self._device(user, device_id)
        if device and device.is_active:
            device.is_active = False
            device.push_token = None
            await self.db.commit()

    async def verify_biometric(self, user_id: str, device_id: str) -> Dict[str, Any]:
        """Issue fresh tokens for a device enrolled in biometric login"""
        user = await self.db.get(User, user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Biometric login is not available for this account")

        device = await self._device(user, device_id)
        if not device or not device.is_active or not device.biometric_enabled:
            logger.log_auth_event("biometric_login", success=False, user_email=user.email, reason="device")
            raise AuthenticationError("Device is not registered for biometric login")

        device.last_seen_at = datetime.utcnow()
        user.last_login = device.last_seen_at
        await self.db.commit()
        logger.log_auth_event("biometric_login", success=True, user_email=user.email)
        return {**create_token_pair(user), "user": user}

    # =====================================================
    # SYNC
    # =====================================================

    async def _visible_students(self, user: User) -> List[Student]:
        if user.role == UserRole.STUDENT:
            result = await self.db.execute(select(Student).where(Student.user_id == user.id))
            return list(result.scalars().all())
        if user.role == UserRole.PARENT:
            return await get_children(self.db, user)
        return []

    async def _changed_rows(self, query, column, since: Optional[datetime], cap: int) -> Tuple[list, bool]:
        """Oldest first, one row past the cap to tell whether more remain"""
        if since:
            query = query.where(column > since)
        rows = list((await self.db.execute(query.order_by(column.asc()).limit(cap + 1))).scalars().all())
        return rows[:cap], len(rows) > cap

    async def sync(self, user: User, since: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Records changed after `since`, oldest first, capped per type.

        When any type hits the cap, `next_since` is the change time of the
        earliest last-sent row among the truncated types, so the next call
        resumes there; types that were not truncated may resend rows, which
        clients upsert by id. Otherwise `next_since` is the server time.
        """
        server_time = datetime.utcnow()
        cap = settings.MOBILE_SYNC_MAX_ITEMS
        students = await self._visible_students(user)
        student_ids = [s.id for s in students]

        grades, attendance, assignments = [], [], []
        truncated_at = []
        if student_ids:
            grades, more = await self._changed_rows(
                select(GradeRecord).where(GradeRecord.student_id.in_(student_ids)),
                GradeRecord.updated_at, since, cap,
            )
            if more:
                truncated_at.append(grades[-1].updated_at)

            attendance, more = await self._changed_rows(
                select(AttendanceRecord).where(AttendanceRecord.student_id.in_(student_ids)),
                AttendanceRecord.updated_at, since, cap,
            )
            if more:
                truncated_at.append(attendance[-1].updated_at)

            class_filters = [
                (Assignment.school_id == s.school_id)
                & (Assignment.grade_level == s.grade_level)
                & (Assignment.section.is_(None) | (Assignment.section == s.section))
                for s in students
            ]
            assignments, more = await self._changed_rows(
                select(Assignment).where(or_(*class_filters)),
                Assignment.updated_at, since, cap,
            )
            if more:
                truncated_at.append(assignments[-1].updated_at)

        notifications, more = await self._changed_rows(
            select(Notification).where(Notification.user_id == user.id),
            Notification.created_at, since, cap,
        )
        if more:
            truncated_at.append(notifications[-1].created_at)

        next_since = min(truncated_at) if truncated_at else server_time
        return {
            "server_time": server_time.isoformat(),
            "since": since.isoformat() if since else None,
            "next_since": next_since.isoformat(),
            "has_more": bool(truncated_at),
            "grades": [dict(serialize_grade(g), student_id=g.student_id) for g in grades],
            "attendance": [serialize_attendance(a) for a in attendance],
            "assignments": [serialize_assignment(a) for a in assignments],
            "notifications": [serialize_notification(n) for n in notifications],
            "limit_per_type": cap,
        }

    # =====================================================
    # PARENT
    # =====================================================

    async def child_summary(self, student: Student) -> Dict[str, Any]:
        grades = await self.academic.get_grade_summary(student)
        attendance = await self.academic.get_attendance_summary(student)
        pending = await self.academic.get_student_assignments(student, status="pending")
        return {
            "id": student.id,
            "full_name": student.full_name,
            "grade_level": student.grade_level,
            "section": student.section,
            "gpa": grades["gpa"],
            "attendance_rate": attendance["attendance_rate"],
            "pending_assignments": len(pending),
            "outstanding_fees": await self.fees.get_outstanding_balance(student),
        }

    async def parent_dashboard(self, parent: User) -> Dict[str, Any]:
        children = await get_children(self.db, parent)
        summaries = [await self.child_summary(child) for child in children]
        return {
            "children": summaries,
            "total_outstanding_fees": round(sum(c["outstanding_fees"] for c in summaries), 2),
        }

    async def parent_fees(self, parent: User) -> List[Dict[str, Any]]:
        return [await self.fees.get_summary(child) for child in await get_children(self.db, parent)]

    async def get_child(self, parent: User, student_id: str) -> Student:
        return await SchoolContextService(self.db).get_accessible_student(parent, student_id)

    # =====================================================
    # STAFF
    # =====================================================

    async def get_staff_for_user(self, user: User) -> Staff:
        result = await self.db.execute(select(Staff).where(Staff.user_id == user.id))
        staff = result.scalar_one_or_none()
        if not staff:
            raise StaffNotFoundError(f"user:{user.id}")
        return staff

    async def staff_schedule(self, staff: Staff, day: Optional[DayOfWeek] = None) -> List[dict]:
        query = select(TimetableEntry).where(TimetableEntry.teacher_staff_id == staff.id)
        if day:
            query = query.where(TimetableEntry.day_of_week == day)
        entries = list((await self.db.execute(query)).scalars().all())
        entries.sort(key=lambda e: (WEEKDAYS.index(e.day_of_week), e.period))
        return [
            dict(serialize_timetable_entry(e), grade_level=e.grade_level, section=e.section)
            for e in entries
        ]

    async def staff_dashboard(self, user: User, today: Optional[date] = None) -> Dict[str, Any]:
        staff = await self.get_staff_for_user(user)
        today = today or date.today()
        classes = await self.staff_schedule(staff, WEEKDAYS[today.weekday()])
        return {
            "staff": {
                "id": staff.id,
                "full_name": staff.full_name,
                "employee_id": staff.employee_id,
                "designation": staff.designation,
            },
            "date": today.isoformat(),
            "today_classes": classes,
            "classes_today": len(classes),
        }

    async def class_students(
        self, school_id: str, grade_level: Optional[str] = None, section: Optional[str] = None
    ) -> List[Student]:
        query = select(Student).where(Student.school_id == school_id, Student.status == StudentStatus.ACTIVE)
        if grade_level:
            query = query.where(Student.grade_level == grade_level)
        if section:
            query = query.where(Student.section == section)
        result = await self.db.execute(query.order_by(Student.roll_number, Student.last_name))
        return list(result.scalars().all())


def get_mobile_service(db: AsyncSession) -> MobileService:
    return MobileService(db)
