"""
Department Service Layer
Department CRUD, staff assignment and statistics, scoped to one school
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, DepartmentNotFoundError, StaffNotFoundError
from app.core.logging_config import logger
from app.models.audit_log import AuditAction, AuditSeverity
from app.models.staff import Department, DepartmentType, Staff
from app.services.audit_service import AuditService


DUPLICATE_DEPARTMENT_MESSAGE = "Department with this type and name already exists"


class DepartmentService:
    """Service for department operations inside a single school"""

    def __init__(self, db: AsyncSession, school_id: str):
        self.db = db
        self.school_id = school_id
        self.audit = AuditService(db)

    # =====================================================
    # CRUD
    # =====================================================

    async def _find_duplicate(
        self, dept_type: DepartmentType, name: str, exclude_id: Optional[str] = None
    ) -> Optional[Department]:
        query = select(Department).where(
            Department.school_id == self.school_id,
            Department.type == dept_type,
            Department.name == name,
        )
        if exclude_id:
            query = query.where(Department.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def create_department(self, data: Dict[str, Any], created_by: str) -> Department:
        if await self._find_duplicate(data["type"], data["name"]):
            raise ConflictError(DUPLICATE_DEPARTMENT_MESSAGE)

        department = Department(
            school_id=self.school_id,
            type=data["type"],
            name=data["name"],
            description=data.get("description"),
            created_by=created_by,
            updated_by=created_by,
        )
        self.db.add(department)
        await self.db.flush()

        await self.audit.record(
            AuditAction.DATA_CREATED,
            "department",
            department.id,
            user_id=created_by,
            school_id=self.school_id,
            severity=AuditSeverity.MEDIUM,
            details={"department_name": department.name, "department_type": department.type},
        )
        await self.db.commit()
        await self.db.refresh(department, attribute_names=["staff_members"])

        logger.info(f"Created department {department.name} ({department.id})")
        return department

    async def get_department_by_id(self, department_id: str) -> Department:
        result = await self.db.execute(
            select(Department).where(
                Department.id == department_id,
                Department.school_id == self.school_id,
            )
        )
        department = result.scalar_one_or_none()
        if not department:
            raise DepartmentNotFoundError(department_id)
        return department

    async def get_all_departments(
        self,
        dept_type: Optional[DepartmentType] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Department]:
        query = (
            select(Department)
            .where(Department.school_id == self.school_id)
            .order_by(Department.name.asc())
        )
        if dept_type:
            query = query.where(Department.type == dept_type)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Department.name.ilike(pattern), Department.description.ilike(pattern)))
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_departments_by_type(self, dept_type: DepartmentType) -> List[Department]:
        return await self.get_all_departments(dept_type=dept_type)

    async def update_department(
        self, department_id: str, data: Dict[str, Any], updated_by: str
    ) -> Department:
        department = await self.get_department_by_id(department_id)

        new_type = data.get("type") or department.type
        new_name = data.get("name") or department.name
        if (new_type, new_name) != (department.type, department.name):
            if await self._find_duplicate(new_type, new_name, exclude_id=department.id):
                raise ConflictError(DUPLICATE_DEPARTMENT_MESSAGE)

        changes = {}
        for key in ("type", "name", "description"):
            if key in data and data[key] is not None and data[key] != getattr(department, key):
                changes[key] = data[key]
                setattr(department, key, data[key])
        department.updated_by = updated_by

        await self.audit.record(
            AuditAction.DATA_UPDATED,
            "department",
            department.id,
            user_id=updated_by,
            school_id=self.school_id,
            severity=AuditSeverity.LOW,
            details={"changes": changes},
        )
        await self.db.commit()

        logger.info(f"Updated department {department_id}")
        return department

    async def delete_department(self, department_id: str, deleted_by: str) -> None:
        department = await self.get_department_by_id(department_id)

        if department.staff_members:
            raise ConflictError(
                "Cannot delete department with assigned staff members",
                details={"staff_count": len(department.staff_members)},
            )

        await self.audit.record(
            AuditAction.DATA_DELETED,
            "department",
            department.id,
            user_id=deleted_by,
            school_id=self.school_id,
            severity=AuditSeverity.HIGH,
            details={"department_name": department.name, "department_type": department.type},
        )
        await self.db.delete(department)
        await self.db.commit()

        logger.info(f"Deleted department {department_id}")

    # =====================================================
    # STAFF ASSIGNMENT
    # =====================================================

    async def _get_staff(self, staff_id: str) -> Staff:
        result = await self.db.execute(
            select(Staff).where(Staff.id == staff_id, Staff.school_id == self.school_id)
        )
        staff = result.scalar_one_or_none()
        if not staff:
            raise StaffNotFoundError(staff_id)
        return staff

    async def assign_staff_to_department(
        self, department_id: str, staff_id: str, assigned_by: str
    ) -> Department:
        department = await self.get_department_by_id(department_id)
        staff = await self._get_staff(staff_id)

        if any(member.id == staff.id for member in department.staff_members):
            raise ConflictError("Staff member is already assigned to this department")

        department.staff_members.append(staff)
        department.updated_by = assigned_by

        await self.audit.record(
            AuditAction.DATA_UPDATED,
            "department",
            department.id,
            user_id=assigned_by,
            school_id=self.school_id,
            severity=AuditSeverity.LOW,
            details={"action": "assigned", "staff_id": staff.id},
        )
        await self.db.commit()

        logger.info(f"Assigned staff {staff_id} to department {department_id}")
        return department

    async def remove_staff_from_department(
        self, department_id: str, staff_id: str, removed_by: str
    ) -> Department:
        """Removing a staff member who is not assigned is a no-op"""
        department = await self.get_department_by_id(department_id)
        staff = await self._get_staff(staff_id)

        remaining = [member for member in department.staff_members if member.id != staff.id]
        if len(remaining) == len(department.staff_members):
            return department

        department.staff_members = remaining
        department.updated_by = removed_by

        await self.audit.record(
            AuditAction.DATA_UPDATED,
            "department",
            department.id,
            user_id=removed_by,
            school_id=self.school_id,
            severity=AuditSeverity.LOW,
            details={"action": "removed", "staff_id": staff.id},
        )
        await self.db.commit()

        logger.info(f"Removed staff {staff_id} from department {department_id}")
        return department

    # =====================================================
    # STATISTICS
    # =====================================================

    async def get_department_statistics(self) -> Dict[str, Any]:
        departments = await self.get_all_departments()
        total = len(departments)

        by_type: Dict[str, int] = {}
        for dept in departments:
            by_type[dept.type.value] = by_type.get(dept.type.value, 0) + 1

        total_staff = sum(len(dept.staff_members) for dept in departments)
        average = total_staff / total if total else 0

        most_staffed = sorted(
            (
                {
                    "department_id": dept.id,
                    "department_name": dept.name,
                    "staff_count": len(dept.staff_members),
                }
                for dept in departments
            ),
            key=lambda item: item["staff_count"],
            reverse=True,
        )[:10]

        return {
            "total_departments": total,
            "departments_by_type": by_type,
            "average_staff_per_department": round(average, 2),
            "departments_with_most_staff": most_staffed,
        }


def get_department_service(db: AsyncSession, school_id: str) -> DepartmentService:
    return DepartmentService(db, school_id)
