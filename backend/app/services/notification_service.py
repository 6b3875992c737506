"""
In-app notifications for students, parents and staff
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ResourceNotFoundError
from app.models.notification import Notification


class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        category: str = "general",
        school_id: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """Queue a notification on the session (caller commits)"""
        notification = Notification(
            user_id=user_id,
            school_id=school_id,
            category=category,
            title=title,
            message=message,
            data=data or {},
        )
        self.db.add(notification)
        return notification

    def notify_many(self, user_ids: Iterable[str], title: str, message: str, **kwargs) -> int:
        count = 0
        for user_id in set(user_ids):
            self.notify(user_id, title, message, **kwargs)
            count += 1
        return count

    async def list_for_user(
        self,
        user_id: str,
        category: Optional[str] = None,
        unread_only: bool = False,
        limit: int = 50,
    ) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if category:
            query = query.where(Notification.category == category)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        result = await self.db.execute(query.order_by(Notification.created_at.desc()).limit(limit))
        return list(result.scalars().all())

    async def unread_count(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def mark_read(self, user_id: str, notification_id: str) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise ResourceNotFoundError("Notification", notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await self.db.commit()
        return notification


def serialize_notification(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "category": notification.category,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data or {},
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
    }


def get_notification_service(db: AsyncSession) -> NotificationService:
    return NotificationService(db)
