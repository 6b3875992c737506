"""
School (tenant) administration endpoints.

Super admins create and manage schools; a school admin may read their own
school and its statistics.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.school import SchoolStatus
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_user, get_current_super_admin, get_school_context
from app.schemas.auth import UserResponse
from app.schemas.school import (
    SchoolCreate,
    SchoolUpdate,
    SchoolResponse,
    SchoolListResponse,
    SchoolStatistics,
    SchoolAdminCreate,
)
from app.services.school_context_service import SchoolContext
from app.services.school_service import SchoolService


router = APIRouter()


def _ensure_school_admin_access(user: User, school_id: str) -> None:
    if user.role == UserRole.SUPER_ADMIN:
        return
    if user.role != UserRole.SCHOOL_ADMIN or str(user.school_id) != str(school_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access to this school is not allowed"
        )


@router.post("", response_model=SchoolResponse, status_code=status.HTTP_201_CREATED)
async def create_school(
    data: SchoolCreate,
    current_user: User = Depends(get_current_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a new school"""
    return await SchoolService(db).create_school(data.model_dump(), created_by=current_user.id)


@router.get("", response_model=SchoolListResponse)
async def list_schools(
    status_filter: Optional[SchoolStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """List schools"""
    return await SchoolService(db).list_schools(status=status_filter, page=page, page_size=page_size)


@router.get("/current/context")
async def get_current_context(ctx: SchoolContext = Depends(get_school_context)):
    """Resolve the school the caller is acting in, with role and permissions"""
    return ctx.to_dict()


@router.get("/{school_id}", response_model=SchoolResponse)
async def get_school(
    school_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a school"""
    _ensure_school_admin_access(current_user, school_id)
    return await SchoolService(db).get_school(school_id)


@router.put("/{school_id}", response_model=SchoolResponse)
async def update_school(
    school_id: str,
    data: SchoolUpdate,
    current_user: User = Depends(get_current_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update a school"""
    return await SchoolService(db).update_school(
        school_id, data.model_dump(exclude_unset=True), updated_by=current_user.id
    )


@router.get("/{school_id}/statistics", response_model=SchoolStatistics)
async def get_school_statistics(
    school_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Student, staff and department counts with capacity utilisation"""
    _ensure_school_admin_access(current_user, school_id)
    return await SchoolService(db).get_statistics(school_id)


@router.post("/{school_id}/admins", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_school_admin(
    school_id: str,
    data: SchoolAdminCreate,
    current_user: User = Depends(get_current_super_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a school admin account"""
    return await SchoolService(db).create_school_admin(school_id, data.model_dump(), created_by=current_user.id)
