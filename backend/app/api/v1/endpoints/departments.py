"""
Department management endpoints.

Reads are open to any member of the school; writes require a school admin.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.models.staff import DepartmentType
from app.modules.auth.dependencies import get_school_context, get_admin_school_context
from app.schemas.department import (
    DepartmentCreate,
    DepartmentUpdate,
    DepartmentResponse,
    DepartmentWithStaffResponse,
    DepartmentStatistics,
)
from app.services.department_service import DepartmentService
from app.services.school_context_service import SchoolContext


router = APIRouter()


@router.post("", response_model=DepartmentWithStaffResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    data: DepartmentCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Create a department"""
    service = DepartmentService(db, ctx.school_id)
    return await service.create_department(data.model_dump(), created_by=ctx.user.id)


@router.get("", response_model=List[DepartmentResponse])
async def list_departments(
    type: Optional[DepartmentType] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    ctx: SchoolContext = Depends(get_school_context),
    db: AsyncSession = Depends(get_db)
):
    """List departments ordered by name"""
    service = DepartmentService(db, ctx.school_id)
    return await service.get_all_departments(dept_type=type, search=search, limit=limit, offset=offset)


@router.get("/stats/overview", response_model=DepartmentStatistics)
async def get_department_statistics(
    ctx: SchoolContext = Depends(get_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Department totals, counts by type and staffing"""
    return await DepartmentService(db, ctx.school_id).get_department_statistics()


@router.get("/type/{dept_type}", response_model=List[DepartmentResponse])
async def get_departments_by_type(
    dept_type: DepartmentType,
    ctx: SchoolContext = Depends(get_school_context),
    db: AsyncSession = Depends(get_db)
):
    """List departments of one type"""
    return await DepartmentService(db, ctx.school_id).get_departments_by_type(dept_type)


@router.get("/{department_id}", response_model=DepartmentWithStaffResponse)
async def get_department(
    department_id: str,
    ctx: SchoolContext = Depends(get_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Get a department with its staff"""
    return await DepartmentService(db, ctx.school_id).get_department_by_id(department_id)


@router.put("/{department_id}", response_model=DepartmentWithStaffResponse)
async def update_department(
    department_id: str,
    data: DepartmentUpdate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Update a department"""
    service = DepartmentService(db, ctx.school_id)
    return await service.update_department(
        department_id, data.model_dump(exclude_unset=True), updated_by=ctx.user.id
    )


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department(
    department_id: str,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Delete a department that has no staff assigned"""
    await DepartmentService(db, ctx.school_id).delete_department(department_id, deleted_by=ctx.user.id)


@router.post("/{department_id}/staff/{staff_id}", response_model=DepartmentWithStaffResponse)
async def assign_staff(
    department_id: str,
    staff_id: str,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Assign a staff member to a department"""
    service = DepartmentService(db, ctx.school_id)
    return await service.assign_staff_to_department(department_id, staff_id, assigned_by=ctx.user.id)


@router.delete("/{department_id}/staff/{staff_id}", response_model=DepartmentWithStaffResponse)
async def remove_staff(
    department_id: str,
    staff_id: str,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Remove a staff member from a department"""
    service = DepartmentService(db, ctx.school_id)
    return await service.remove_staff_from_department(department_id, staff_id, removed_by=ctx.user.id)
