"""
School context (multi-tenancy) resolution.

A super admin may act inside any school; every other user is bound to the
school on their account. Portal access to a student record is granted to the
student themself, linked parents, and staff/admins of the student's school.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthorizationError,
    SchoolAccessDeniedError,
    SchoolNotFoundError,
    StudentNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.models.school import School, SchoolStatus
from app.models.student import Student, ParentStudentLink
from app.models.user import User, UserRole


ROLE_PERMISSIONS = {
    UserRole.SUPER_ADMIN: ["*"],
    UserRole.SCHOOL_ADMIN: [
        "school:read", "school:update",
        "departments:manage", "staff:manage", "students:manage",
        "academic:manage", "fees:manage", "library:manage",
        "transport:manage", "emergency:manage", "self_service:manage",
    ],
    UserRole.STAFF: [
        "school:read", "departments:read", "students:read",
        "academic:manage", "attendance:mark", "library:manage",
        "emergency:manage",
    ],
    UserRole.STUDENT: ["portal:self"],
    UserRole.PARENT: ["portal:children", "fees:pay"],
}

SCHOOL_MEMBER_ROLES = (UserRole.SCHOOL_ADMIN, UserRole.STAFF)


@dataclass
class SchoolContext:
    user: User
    school: School
    permissions: List[str] = field(default_factory=list)

    @property
    def school_id(self) -> str:
        return self.school.id

    @property
    def user_role(self) -> UserRole:
        return self.user.role

    @property
    def is_super_admin(self) -> bool:
        return self.user.role == UserRole.SUPER_ADMIN

    @property
    def is_school_admin(self) -> bool:
        return self.user.role in (UserRole.SCHOOL_ADMIN, UserRole.SUPER_ADMIN)

    def has_permission(self, permission: str) -> bool:
        return "*" in self.permissions or permission in self.permissions

    def to_dict(self) -> dict:
        return {
            "school_id": self.school.id,
            "school": {
                "id": self.school.id,
                "name": self.school.name,
                "code": self.school.code,
                "status": self.school.status.value,
            },
            "user_role": self.user.role.value,
            "permissions": self.permissions,
            "is_super_admin": self.is_super_admin,
            "is_school_admin": self.is_school_admin,
        }


class SchoolContextService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def validate_school_access(self, user: User, school_id: str) -> bool:
        if user.role == UserRole.SUPER_ADMIN:
            return True
        return bool(user.school_id) and str(user.school_id) == str(school_id)

    async def get_school_context(self, user: User, requested_school_id: Optional[str] = None) -> SchoolContext:
        """
        Resolve which school the request acts inside.

        Super admins pick a school with requested_school_id; everyone else
        gets their own school and may only request that same one.
        """
        if user.role == UserRole.SUPER_ADMIN:
            if not requested_school_id:
                raise ValidationError("X-School-ID header is required for super admin requests", field="X-School-ID")
            school_id = requested_school_id
        else:
            if not user.school_id:
                raise AuthorizationError("User is not assigned to a school")
            if requested_school_id and str(requested_school_id) != str(user.school_id):
                logger.log_access_denied(user.id, "school", requested_school_id, "other tenant")
                raise SchoolAccessDeniedError(requested_school_id)
            school_id = user.school_id

        school = await self.db.get(School, str(school_id))
        if not school:
            raise SchoolNotFoundError(str(school_id))
        if school.status == SchoolStatus.SUSPENDED and user.role != UserRole.SUPER_ADMIN:
            raise AuthorizationError("School account is suspended")

        return SchoolContext(user=user, school=school, permissions=list(ROLE_PERMISSIONS.get(user.role, [])))

    async def get_linked_student_ids(self, parent: User) -> List[str]:
        result = await self.db.execute(
            select(ParentStudentLink.student_id).where(ParentStudentLink.parent_user_id == parent.id)
        )
        return [row[0] for row in result.all()]

    async def can_access_student(self, user: User, student: Student) -> bool:
        if user.role == UserRole.SUPER_ADMIN:
            return True
        if str(user.school_id) != str(student.school_id):
            return False
        if user.role in SCHOOL_MEMBER_ROLES:
            return True
        if user.role == UserRole.STUDENT:
            return student.user_id is not None and str(student.user_id) == str(user.id)
        if user.role == UserRole.PARENT:
            return str(student.id) in {str(sid) for sid in await self.get_linked_student_ids(user)}
        return False

    async def get_accessible_student(self, user: User, student_id: str) -> Student:
        """
        Load a student the user may see through the portals.

        Students from other tenants are reported as missing rather than
        forbidden, so ids cannot be probed across schools.
        """
        student = await self.db.get(Student, str(student_id))
        if not student:
            raise StudentNotFoundError(student_id)
        if user.role != UserRole.SUPER_ADMIN and str(user.school_id) != str(student.school_id):
            logger.log_access_denied(user.id, "student", student_id, "other tenant")
            raise StudentNotFoundError(student_id)
        if not await self.can_access_student(user, student):
            logger.log_access_denied(user.id, "student", student_id, f"not linked to {user.role.value}")
            raise AuthorizationError("You do not have access to this student's records")
        return student

    async def get_student_for_user(self, user: User) -> Student:
        """The student record linked to a student login"""
        result = await self.db.execute(select(Student).where(Student.user_id == user.id))
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError(f"user:{user.id}")
        return student


def get_school_context_service(db: AsyncSession) -> SchoolContextService:
    return SchoolContextService(db)
