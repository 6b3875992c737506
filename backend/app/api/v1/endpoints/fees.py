"""
Fee administration: billing items, scholarships and defaulter reports.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import get_admin_school_context
from app.schemas.fee import FeeItemCreate, ScholarshipCreate
from app.services.fee_service import FeeService, serialize_fee_item
from app.services.school_context_service import SchoolContext


router = APIRouter()


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_fee_item(
    data: FeeItemCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Bill a student"""
    item = await FeeService(db).create_fee_item(ctx.school_id, data.model_dump())
    return {**serialize_fee_item(item), "student_id": item.student_id}


@router.post("/scholarships", status_code=status.HTTP_201_CREATED)
async def create_scholarship(
    data: ScholarshipCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Open a scholarship for applications"""
    scholarship = await FeeService(db).create_scholarship(ctx.school_id, data.model_dump())
    return {
        "id": scholarship.id,
        "name": scholarship.name,
        "scholarship_type": scholarship.scholarship_type,
        "amount": scholarship.amount,
        "eligibility": scholarship.eligibility or [],
        "application_deadline": scholarship.application_deadline.isoformat()
        if scholarship.application_deadline else None,
        "is_active": scholarship.is_active,
    }


@router.get("/defaulters")
async def get_defaulters(
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Students with overdue balances, largest first"""
    return await FeeService(db).get_defaulters(ctx.school_id)
