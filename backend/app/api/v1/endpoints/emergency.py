"""
Emergency desk: school-wide report queue and status updates.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.emergency import EmergencyStatus
from app.modules.auth.dependencies import get_staff_school_context
from app.schemas.emergency import EmergencyStatusUpdate
from app.services.emergency_service import EmergencyService, serialize_report
from app.services.school_context_service import SchoolContext


router = APIRouter()


@router.get("/reports")
async def list_reports(
    status_filter: Optional[EmergencyStatus] = Query(None, alias="status"),
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """List emergency reports for the school, newest first"""
    reports = await EmergencyService(db).list_school_reports(ctx.school_id, status=status_filter)
    return [serialize_report(r) for r in reports]


@router.patch("/reports/{emergency_id}/status")
async def update_report_status(
    emergency_id: str,
    data: EmergencyStatusUpdate,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Advance a report's status and append to its timeline"""
    report = await EmergencyService(db).update_status(
        ctx.school_id, emergency_id, data.status, data.note, updated_by=ctx.user.id
    )
    return serialize_report(report)
