from fastapi import Depends, HTTPException, status, Path, Request, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import uuid

from app.core.database import get_db
from app.core.logging_config import bind_context
from app.core.security import decode_token
from app.models.student import Student
from app.models.user import User, UserRole
from app.services.school_context_service import SchoolContext, get_school_context_service

security = HTTPBearer()


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    result = await db.execute(
        select(User).where(User.id == user_id)
    )
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    # Logging context and rate-limit key
    bind_context(user_id=user.id, school_id=user.school_id)
    request.state.user_id = str(user.id)
    request.state.user_role = user.role.value

    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting an endpoint to the given roles.
    Super admins always pass.

    Usage:
        @router.post("", dependencies=[Depends(require_roles(UserRole.SCHOOL_ADMIN))])
    """
    allowed = set(roles)

    async def _check(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != UserRole.SUPER_ADMIN and current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(sorted(r.value for r in allowed))}"
            )
        return current_user

    return _check


get_current_super_admin = require_roles(UserRole.SUPER_ADMIN)
get_current_school_admin = require_roles(UserRole.SCHOOL_ADMIN)
get_current_staff = require_roles(UserRole.SCHOOL_ADMIN, UserRole.STAFF)
get_current_parent = require_roles(UserRole.PARENT)


# ==================== School Context Dependencies ====================

async def get_school_context(
    x_school_id: Optional[str] = Header(None, alias="X-School-ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> SchoolContext:
    """
    Resolve the tenant for the request.

    Usage:
        @router.get("")
        async def list_departments(ctx: SchoolContext = Depends(get_school_context)):
            ...
    """
    ctx = await get_school_context_service(db).get_school_context(current_user, x_school_id)
    bind_context(school_id=ctx.school_id)
    return ctx


async def get_admin_school_context(
    ctx: SchoolContext = Depends(get_school_context)
) -> SchoolContext:
    """School context for operations reserved to school admins"""
    if not ctx.is_school_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="School admin access required"
        )
    return ctx


async def get_staff_school_context(
    ctx: SchoolContext = Depends(get_school_context)
) -> SchoolContext:
    """School context for staff and admins"""
    if ctx.user_role not in (UserRole.SUPER_ADMIN, UserRole.SCHOOL_ADMIN, UserRole.STAFF):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required"
        )
    return ctx


# ==================== Portal Ownership Dependencies ====================

async def get_portal_student(
    student_id: str = Path(..., description="Student ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Student:
    """
    Get a student with portal access verification.
    Raises 404 if the student does not exist in the caller's school, 403 if
    the caller is neither the student, a linked parent, nor school staff.

    Usage:
        @router.get("/{student_id}/grades")
        async def get_grades(student: Student = Depends(get_portal_student)):
            ...
    """
    return await get_school_context_service(db).get_accessible_student(current_user, student_id)
