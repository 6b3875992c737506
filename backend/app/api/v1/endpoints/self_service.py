from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import get_staff_school_context
from app.schemas.self_service import LeaveReview
from app.services.school_context_service import SchoolContext
from app.services.self_service_service import SelfServiceService, serialize_leave


router = APIRouter()


@router.patch("/leave-requests/{leave_id}")
async def review_leave_request(
    leave_id: str,
    data: LeaveReview,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Approve or reject a pending leave request"""
    leave = await SelfServiceService(db).review_leave_request(
        ctx.school_id, leave_id, data.status, data.comments, reviewer_id=ctx.user.id
    )
    return serialize_leave(leave)
