"""
Staff Service Layer
Staff records and their optional login accounts
"""

from typing import Any, Dict, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CapacityExceededError, DuplicateResourceError, StaffNotFoundError
from app.core.logging_config import logger
from app.core.security import get_password_hash
from app.models.audit_log import AuditAction, AuditSeverity
from app.models.school import School
from app.models.staff import Staff, StaffStatus, StaffType, staff_departments, Department
from app.models.user import User, UserRole
from app.services.audit_service import AuditService
from app.utils.pagination import paginate


class StaffService:
    def __init__(self, db: AsyncSession, school_id: str):
        self.db = db
        self.school_id = school_id
        self.audit = AuditService(db)

    async def create_staff(self, data: Dict[str, Any], created_by: str) -> Staff:
        existing = await self.db.execute(
            select(Staff.id).where(
                Staff.school_id == self.school_id,
                Staff.employee_id == data["employee_id"],
            )
        )
        if existing.first():
            raise DuplicateResourceError(
                f"Employee ID '{data['employee_id']}' is already used in this school",
                field="employee_id",
            )

        school = await self.db.get(School, self.school_id)
        staff_count = (await self.db.execute(
            select(func.count(Staff.id)).where(Staff.school_id == self.school_id)
        )).scalar() or 0
        if school and staff_count >= school.max_staff:
            raise CapacityExceededError("School has reached its staff limit", limit=school.max_staff)

        password = data.pop("password", None)
        is_admin = data.pop("is_school_admin", False)
        staff = Staff(school_id=self.school_id, **data)

        if password:
            taken = await self.db.execute(select(User.id).where(User.email == staff.email))
            if taken.first():
                raise DuplicateResourceError("Email is already registered", field="email")
            user = User(
                email=staff.email,
                full_name=staff.full_name,
                hashed_password=get_password_hash(password),
                role=UserRole.SCHOOL_ADMIN if is_admin else UserRole.STAFF,
                school_id=self.school_id,
                phone=staff.phone,
                is_verified=True,
            )
            self.db.add(user)
            await self.db.flush()
            staff.user_id = user.id

        self.db.add(staff)
        await self.db.flush()

        await self.audit.record(
            AuditAction.DATA_CREATED,
            "staff",
            staff.id,
            user_id=created_by,
            school_id=self.school_id,
            severity=AuditSeverity.MEDIUM,
            details={**data, "has_login": bool(password)},
        )
        await self.db.commit()

        logger.info(f"Created staff member {staff.employee_id} ({staff.id})")
        return staff

    async def get_staff(self, staff_id: str) -> Staff:
        result = await self.db.execute(
            select(Staff).where(Staff.id == staff_id, Staff.school_id == self.school_id)
        )
        staff = result.scalar_one_or_none()
        if not staff:
            raise StaffNotFoundError(staff_id)
        return staff

    async def get_staff_by_user(self, user_id: str) -> Optional[Staff]:
        result = await self.db.execute(select(Staff).where(Staff.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_department_names(self, staff_id: str) -> list:
        result = await self.db.execute(
            select(Department.name)
            .join(staff_departments, staff_departments.c.department_id == Department.id)
            .where(staff_departments.c.staff_id == staff_id)
            .order_by(Department.name)
        )
        return [row[0] for row in result.all()]

    async def list_staff(
        self,
        staff_type: Optional[StaffType] = None,
        status: Optional[StaffStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> dict:
        query = select(Staff).where(Staff.school_id == self.school_id)
        if staff_type:
            query = query.where(Staff.staff_type == staff_type)
        if status:
            query = query.where(Staff.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Staff.first_name.ilike(pattern),
                Staff.last_name.ilike(pattern),
                Staff.employee_id.ilike(pattern),
                Staff.email.ilike(pattern),
            ))
        query = query.order_by(Staff.last_name, Staff.first_name)
        return await paginate(self.db, query, page, page_size)

    async def update_status(self, staff_id: str, status: StaffStatus, updated_by: str) -> Staff:
        staff = await self.get_staff(staff_id)
        previous = staff.status
        staff.status = status

        # Staff who leave lose portal access
        if staff.user_id:
            user = await self.db.get(User, staff.user_id)
            if user:
                user.is_active = status in (StaffStatus.ACTIVE, StaffStatus.ON_LEAVE)

        await self.audit.record(
            AuditAction.STATUS_CHANGED,
            "staff",
            staff.id,
            user_id=updated_by,
            school_id=self.school_id,
            severity=AuditSeverity.MEDIUM,
            details={"from": previous, "to": status},
        )
        await self.db.commit()
        return staff


def get_staff_service(db: AsyncSession, school_id: str) -> StaffService:
    return StaffService(db, school_id)
