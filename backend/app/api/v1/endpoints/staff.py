from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.staff import StaffType, StaffStatus
from app.modules.auth.dependencies import get_admin_school_context, get_staff_school_context
from app.schemas.staff import (
    StaffCreate,
    StaffStatusUpdate,
    StaffResponse,
    StaffDetailResponse,
    StaffListResponse,
)
from app.services.school_context_service import SchoolContext
from app.services.staff_service import StaffService


router = APIRouter()


@router.post("", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
async def create_staff(
    data: StaffCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Create a staff member (and their login when a password is given)"""
    return await StaffService(db, ctx.school_id).create_staff(data.model_dump(), created_by=ctx.user.id)


@router.get("", response_model=StaffListResponse)
async def list_staff(
    staff_type: Optional[StaffType] = Query(None),
    status_filter: Optional[StaffStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """List staff with filters"""
    return await StaffService(db, ctx.school_id).list_staff(
        staff_type=staff_type, status=status_filter, search=search, page=page, page_size=page_size
    )


@router.get("/{staff_id}", response_model=StaffDetailResponse)
async def get_staff(
    staff_id: str,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Get a staff member with their departments"""
    service = StaffService(db, ctx.school_id)
    staff = await service.get_staff(staff_id)
    response = StaffDetailResponse.model_validate(staff)
    response.departments = await service.get_department_names(staff.id)
    return response


@router.patch("/{staff_id}/status", response_model=StaffResponse)
async def update_staff_status(
    staff_id: str,
    data: StaffStatusUpdate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Change a staff member's employment status"""
    return await StaffService(db, ctx.school_id).update_status(staff_id, data.status, updated_by=ctx.user.id)
