"""
School Service Layer
Tenant lifecycle managed by super admins
"""

from typing import Any, Dict, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateResourceError, SchoolNotFoundError
from app.core.logging_config import logger
from app.core.security import get_password_hash
from app.models.audit_log import AuditAction, AuditSeverity
from app.models.school import School, SchoolStatus
from app.models.staff import Department, Staff, StaffStatus
from app.models.student import Student, StudentStatus
from app.models.user import User, UserRole
from app.services.audit_service import AuditService
from app.utils.pagination import paginate


class SchoolService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_school(self, data: Dict[str, Any], created_by: str) -> School:
        existing = await self.db.execute(select(School.id).where(School.code == data["code"]))
        if existing.first():
            raise DuplicateResourceError(f"School code '{data['code']}' is already in use", field="code")

        school = School(**data)
        self.db.add(school)
        await self.db.flush()

        await self.audit.record(
            AuditAction.DATA_CREATED,
            "school",
            school.id,
            user_id=created_by,
            school_id=school.id,
            severity=AuditSeverity.HIGH,
            details={"code": school.code, "name": school.name},
        )
        await self.db.commit()

        logger.info(f"Created school {school.code} ({school.id})")
        return school

    async def get_school(self, school_id: str) -> School:
        school = await self.db.get(School, school_id)
        if not school:
            raise SchoolNotFoundError(school_id)
        return school

    async def list_schools(
        self, status: Optional[SchoolStatus] = None, page: int = 1, page_size: int = 20
    ) -> dict:
        query = select(School)
        if status:
            query = query.where(School.status == status)
        return await paginate(self.db, query.order_by(School.name), page, page_size)

    async def update_school(self, school_id: str, data: Dict[str, Any], updated_by: str) -> School:
        school = await self.get_school(school_id)

        if data.get("code") and data["code"] != school.code:
            taken = await self.db.execute(select(School.id).where(School.code == data["code"]))
            if taken.first():
                raise DuplicateResourceError(f"School code '{data['code']}' is already in use", field="code")

        changes = {}
        for key, value in data.items():
            if value is not None and value != getattr(school, key):
                changes[key] = value
                setattr(school, key, value)

        await self.audit.record(
            AuditAction.DATA_UPDATED,
            "school",
            school.id,
            user_id=updated_by,
            school_id=school.id,
            severity=AuditSeverity.MEDIUM,
            details={"changes": changes},
        )
        await self.db.commit()
        return school

    async def get_statistics(self, school_id: str) -> Dict[str, Any]:
        school = await self.get_school(school_id)

        async def count(column, *conditions) -> int:
            return (await self.db.execute(select(func.count(column)).where(*conditions))).scalar() or 0

        total_students = await count(Student.id, Student.school_id == school.id)
        active_students = await count(
            Student.id, Student.school_id == school.id, Student.status == StudentStatus.ACTIVE
        )
        total_staff = await count(Staff.id, Staff.school_id == school.id)
        active_staff = await count(Staff.id, Staff.school_id == school.id, Staff.status == StaffStatus.ACTIVE)
        departments = await count(Department.id, Department.school_id == school.id)

        return {
            "school_id": school.id,
            "total_students": total_students,
            "active_students": active_students,
            "total_staff": total_staff,
            "active_staff": active_staff,
            "total_departments": departments,
            "student_capacity_utilization": round(active_students / school.max_students * 100, 2)
            if school.max_students else 0.0,
            "staff_capacity_utilization": round(total_staff / school.max_staff * 100, 2)
            if school.max_staff else 0.0,
        }

    async def create_school_admin(self, school_id: str, data: Dict[str, Any], created_by: str) -> User:
        school = await self.get_school(school_id)

        taken = await self.db.execute(select(User.id).where(User.email == data["email"]))
        if taken.first():
            raise DuplicateResourceError("Email is already registered", field="email")

        admin = User(
            email=data["email"],
            full_name=data.get("full_name"),
            hashed_password=get_password_hash(data["password"]),
            role=UserRole.SCHOOL_ADMIN,
            school_id=school.id,
            phone=data.get("phone"),
            is_verified=True,
        )
        self.db.add(admin)
        await self.db.flush()

        await self.audit.record(
            AuditAction.ACCESS_GRANTED,
            "school",
            school.id,
            user_id=created_by,
            school_id=school.id,
            severity=AuditSeverity.HIGH,
            details={"admin_user_id": admin.id, "email": admin.email},
        )
        await self.db.commit()

        logger.info(f"Created school admin {admin.email} for school {school.code}")
        return admin


def get_school_service(db: AsyncSession) -> SchoolService:
    return SchoolService(db)
