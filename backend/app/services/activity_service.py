"""
Student activity log used by the portal services
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_tracking import ActivityType, StudentActivity


async def log_activity(
    db: AsyncSession,
    student_id: str,
    activity_type: ActivityType,
    description: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> StudentActivity:
    """Add an activity row to the current unit of work (caller commits)"""
    activity = StudentActivity(
        student_id=student_id,
        activity_type=activity_type,
        description=description,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id else None,
        details=details or {},
    )
    db.add(activity)
    return activity


async def get_recent_activities(
    db: AsyncSession,
    student_id: str,
    activity_type: Optional[ActivityType] = None,
    limit: int = 20,
) -> List[StudentActivity]:
    query = select(StudentActivity).where(StudentActivity.student_id == student_id)
    if activity_type:
        query = query.where(StudentActivity.activity_type == activity_type)
    result = await db.execute(query.order_by(StudentActivity.created_at.desc()).limit(limit))
    return list(result.scalars().all())
