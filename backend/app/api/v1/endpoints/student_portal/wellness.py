"""
Student portal: daily wellness check-ins, insights, goals and support.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.student import Student
from app.models.user import User
from app.modules.auth.dependencies import get_current_user, get_portal_student
from app.schemas.wellness import (
    WellnessCheckinCreate,
    CounselingRequestCreate,
    WellnessGoalCreate,
    WellnessGoalProgress,
    EmergencyAlertCreate,
)
from app.services.emergency_service import serialize_report
from app.services.wellness_service import (
    WellnessService,
    serialize_checkin,
    serialize_counseling,
    serialize_goal,
)


router = APIRouter()


@router.get("/{student_id}/checkins")
async def get_checkins(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Most recent check-ins, newest first"""
    records = await WellnessService(db).get_checkins(student)
    return [serialize_checkin(r) for r in records]


@router.post("/{student_id}/checkins", status_code=status.HTTP_201_CREATED)
async def create_checkin(
    data: WellnessCheckinCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Record a daily check-in"""
    record = await WellnessService(db).record_checkin(student, data.model_dump())
    return serialize_checkin(record)


@router.get("/{student_id}/insights")
async def get_insights(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Current status, trends, recommendations, alerts and streak"""
    return await WellnessService(db).get_insights(student)


@router.get("/{student_id}/trends")
async def get_trends(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Weekly averages over the check-in history"""
    return await WellnessService(db).get_trends(student)


@router.get("/{student_id}/resources")
async def get_resources(
    category: Optional[str] = Query(None),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Self-help and support resources"""
    return WellnessService(db).get_resources(category)


@router.get("/{student_id}/counseling")
async def list_counseling(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Counseling requests made by the student"""
    requests = await WellnessService(db).list_counseling(student)
    return [serialize_counseling(r) for r in requests]


@router.post("/{student_id}/counseling/request", status_code=status.HTTP_201_CREATED)
async def request_counseling(
    data: CounselingRequestCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Ask for a counseling session"""
    request = await WellnessService(db).request_counseling(student, data.model_dump())
    return serialize_counseling(request)


@router.get("/{student_id}/goals")
async def get_goals(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Wellness goals"""
    goals = await WellnessService(db).get_goals(student)
    return [serialize_goal(g) for g in goals]


@router.post("/{student_id}/goals", status_code=status.HTTP_201_CREATED)
async def create_goal(
    data: WellnessGoalCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Set a wellness goal"""
    goal = await WellnessService(db).create_goal(student, data.model_dump())
    return serialize_goal(goal)


@router.put("/{student_id}/goals/{goal_id}/progress")
async def update_goal_progress(
    goal_id: str,
    data: WellnessGoalProgress,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Update progress toward a goal"""
    goal = await WellnessService(db).update_goal_progress(student, goal_id, data.current_value)
    return serialize_goal(goal)


@router.get("/{student_id}/emergency")
async def get_emergency_contacts(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Personal and school emergency contacts"""
    return await WellnessService(db).get_emergency_contacts(student)


@router.post("/{student_id}/emergency/alert", status_code=status.HTTP_201_CREATED)
async def send_emergency_alert(
    data: EmergencyAlertCreate,
    student: Student = Depends(get_portal_student),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Raise an emergency alert"""
    report = await WellnessService(db).send_emergency_alert(student, data.model_dump(), current_user)
    return serialize_report(report)
