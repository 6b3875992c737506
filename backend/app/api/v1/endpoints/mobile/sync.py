from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.academic import to_naive_utc
from app.services.mobile_service import MobileService


router = APIRouter()


@router.get("")
async def sync(
    since: Optional[datetime] = Query(None, description="next_since from the previous sync"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Incremental sync for offline clients.

    Returns grades, attendance, assignments and notifications changed after
    `since`, oldest first and capped per type. Pass the returned
    `next_since` as `since` on the next call; keep calling while `has_more`.
    """
    return await MobileService(db).sync(current_user, to_naive_utc(since) if since else None)
