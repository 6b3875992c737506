"""
Wellness Service Layer

Daily check-ins and the simple analytics built on them: overall status,
two-week trends, recommendations, alerts, check-in streak and weekly
averages.
"""

from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError
from app.core.logging_config import logger
from app.models.activity_tracking import ActivityType
from app.models.student import Student
from app.models.user import User
from app.models.wellness import (
    CounselingCategory,
    CounselingRequest,
    GoalStatus,
    MoodLevel,
    PhysicalActivity,
    WellnessGoal,
    WellnessRecord,
    WellnessStatus,
)
from app.services.activity_service import log_activity
from app.services.emergency_service import get_emergency_service


MOOD_TO_NUMBER = {
    MoodLevel.VERY_HAPPY: 10,
    MoodLevel.HAPPY: 8,
    MoodLevel.NEUTRAL: 6,
    MoodLevel.SAD: 4,
    MoodLevel.VERY_SAD: 2,
    MoodLevel.ANXIOUS: 3,
    MoodLevel.STRESSED: 3,
    MoodLevel.ANGRY: 2,
}

ACTIVITY_HOURS = {
    PhysicalActivity.INTENSE: 2.0,
    PhysicalActivity.MODERATE: 1.0,
}

INSIGHT_WINDOW = 14
TREND_WINDOW = 7
CHECKIN_LIST_LIMIT = 30

STARTER_RECOMMENDATION = "Start tracking your daily wellness to get personalized insights"

WELLNESS_RESOURCES = [
    {
        "id": "resource-001",
        "title": "Stress Management Techniques",
        "type": "article",
        "category": "stress",
        "description": "Learn effective techniques to manage academic stress",
        "url": "/resources/stress-management",
        "tags": ["stress", "mental-health", "coping"],
    },
    {
        "id": "resource-002",
        "title": "Sleep Hygiene Guide",
        "type": "guide",
        "category": "sleep",
        "description": "Improve your sleep quality with these evidence-based tips",
        "url": "/resources/sleep-hygiene",
        "tags": ["sleep", "health", "wellness"],
    },
    {
        "id": "resource-003",
        "title": "Mindfulness Meditation",
        "type": "video",
        "category": "mindfulness",
        "description": "5-minute guided meditation for focus and calm",
        "url": "/resources/mindfulness-meditation",
        "tags": ["mindfulness", "meditation", "focus"],
    },
]


# =====================================================
# CALCULATIONS
# =====================================================

def overall_status(mood: int, stress: int, energy: int) -> WellnessStatus:
    average = (mood + (11 - stress) + energy) / 3
    if average < 4:
        return WellnessStatus.CONCERNING
    if average < 7:
        return WellnessStatus.FAIR
    return WellnessStatus.GOOD


def number_to_mood_level(value: int) -> MoodLevel:
    if value >= 9:
        return MoodLevel.VERY_HAPPY
    if value >= 7:
        return MoodLevel.HAPPY
    if value >= 5:
        return MoodLevel.NEUTRAL
    if value >= 3:
        return MoodLevel.SAD
    return MoodLevel.VERY_SAD


def mood_level_to_number(level: MoodLevel) -> int:
    return MOOD_TO_NUMBER.get(level, 5)


def activity_hours(activity: Optional[PhysicalActivity]) -> float:
    return ACTIVITY_HOURS.get(activity, 0.5)


def status_label(value: float, kind: str) -> str:
    """Stress values passed here are already inverted (11 - stress)"""
    if kind == "stress":
        if value >= 8:
            return "low"
        if value >= 6:
            return "moderate"
        return "high"
    if value >= 8:
        return "excellent"
    if value >= 6:
        return "good"
    if value >= 4:
        return "fair"
    return "poor"


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _trend(recent: List[float], previous: List[float]) -> str:
    if not previous:
        return "stable"
    diff = _mean(recent) - _mean(previous)
    if abs(diff) < 0.5:
        return "stable"
    return "improving" if diff > 0 else "declining"


def calculate_trends(records: List[WellnessRecord]) -> Dict[str, str]:
    """Records newest first; compares the newest week with the one before"""
    if len(records) < TREND_WINDOW:
        return {"mood": "stable", "stress": "stable", "energy": "stable", "sleep": "stable"}

    recent = records[:TREND_WINDOW]
    previous = records[TREND_WINDOW:TREND_WINDOW * 2]

    def series(rows, getter):
        return [getter(r) for r in rows]

    mood = lambda r: mood_level_to_number(r.mood_level)  # noqa: E731
    stress = lambda r: 11 - (r.stress_level or 5)  # noqa: E731
    energy = lambda r: r.energy_level or 5  # noqa: E731
    sleep = lambda r: r.sleep_quality or 5  # noqa: E731

    return {
        "mood": _trend(series(recent, mood), series(previous, mood)),
        "stress": _trend(series(recent, stress), series(previous, stress)),
        "energy": _trend(series(recent, energy), series(previous, energy)),
        "sleep": _trend(series(recent, sleep), series(previous, sleep)),
    }


def generate_recommendations(latest: WellnessRecord, trends: Dict[str, str]) -> List[str]:
    recommendations = []
    if latest.stress_level > 7:
        recommendations.append("Consider stress management techniques like deep breathing exercises")
    if latest.sleep_quality and latest.sleep_quality < 6:
        recommendations.append("Focus on improving sleep hygiene - consistent bedtime routine")
    if latest.energy_level < 5:
        recommendations.append("Increase physical activity and ensure balanced nutrition")
    if trends.get("mood") == "declining":
        recommendations.append("Reach out to counselor if mood concerns persist")
    if not recommendations:
        recommendations.append("Keep up the good work with your wellness routine!")
    return recommendations


def generate_alerts(records: List[WellnessRecord]) -> List[Dict[str, str]]:
    """Records newest first"""
    if not records:
        return []
    alerts = []
    latest = records[0]
    if latest.overall_status == WellnessStatus.CONCERNING:
        alerts.append({
            "type": "concerning_status",
            "message": "Your latest check-in suggests you may need support. Consider talking to a counselor.",
        })
    if len(records) >= 3 and all(r.overall_status == WellnessStatus.CONCERNING for r in records[:3]):
        alerts.append({
            "type": "persistent_concern",
            "message": "Your last three check-ins were concerning. A counselor can help.",
        })
    if latest.stress_level >= 9:
        alerts.append({
            "type": "high_stress",
            "message": "Your stress level is very high. Please reach out to someone you trust.",
        })
    return alerts


def calculate_streak(record_dates: List[date], today: Optional[date] = None) -> int:
    """Consecutive days with a check-in, counting back from today"""
    today = today or date.today()
    days = set(record_dates)
    streak = 0
    while today - timedelta(days=streak) in days:
        streak += 1
    return streak


def week_start(day: date) -> date:
    """Weeks start on Sunday"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def group_by_week(records: List[WellnessRecord]) -> List[Dict[str, Any]]:
    """Records oldest first; one entry per week in chronological order"""
    weeks: "OrderedDict[date, List[WellnessRecord]]" = OrderedDict()
    for record in records:
        weeks.setdefault(week_start(record.record_date), []).append(record)

    result = []
    for start, rows in weeks.items():
        sleep = [r.sleep_quality for r in rows if r.sleep_quality]
        result.append({
            "week": start.isoformat(),
            "checkins": len(rows),
            "average_mood": round(_mean([mood_level_to_number(r.mood_level) for r in rows]), 2),
            "average_stress": round(_mean([r.stress_level for r in rows]), 2),
            "average_energy": round(_mean([r.energy_level for r in rows]), 2),
            "average_sleep": round(_mean(sleep), 2) if sleep else None,
        })
    return result


def serialize_checkin(record: WellnessRecord) -> dict:
    return {
        "id": record.id,
        "record_date": record.record_date.isoformat(),
        "mood_level": record.mood_level.value,
        "mood_score": record.mood_score,
        "stress_level": record.stress_level,
        "energy_level": record.energy_level,
        "sleep_quality": record.sleep_quality,
        "sleep_hours": record.sleep_hours,
        "physical_activity": record.physical_activity.value if record.physical_activity else None,
        "physical_activity_hours": record.physical_activity_hours,
        "notes": record.notes,
        "triggers": record.triggers or [],
        "overall_status": record.overall_status.value,
        "recorded_at": record.recorded_at.isoformat() if record.recorded_at else None,
    }


def serialize_goal(goal: WellnessGoal) -> dict:
    progress = 0.0
    if goal.target_value:
        progress = round(min(100.0, (goal.current_value or 0) / goal.target_value * 100), 2)
    return {
        "id": goal.id,
        "title": goal.title,
        "category": goal.category,
        "target_value": goal.target_value,
        "current_value": goal.current_value,
        "unit": goal.unit,
        "target_date": goal.target_date.isoformat() if goal.target_date else None,
        "progress": progress,
        "status": goal.status.value,
    }


def serialize_counseling(request: CounselingRequest) -> dict:
    return {
        "id": request.id,
        "category": request.category.value,
        "topic": request.topic,
        "description": request.description,
        "urgency": request.urgency,
        "session_type": request.session_type,
        "preferred_times": request.preferred_times or [],
        "status": request.status.value,
        "counselor_name": request.counselor_name,
        "scheduled_at": request.scheduled_at.isoformat() if request.scheduled_at else None,
        "created_at": request.created_at.isoformat() if request.created_at else None,
    }


# =====================================================
# SERVICE
# =====================================================

class WellnessService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _records(self, student: Student, limit: int, newest_first: bool = True) -> List[WellnessRecord]:
        """The most recent `limit` check-ins"""
        result = await self.db.execute(
            select(WellnessRecord)
            .where(WellnessRecord.student_id == student.id)
            .order_by(WellnessRecord.recorded_at.desc())
            .limit(limit)
        )
        records = list(result.scalars().all())
        if not newest_first:
            records.reverse()
        return records

    async def get_checkins(self, student: Student) -> List[WellnessRecord]:
        return await self._records(student, CHECKIN_LIST_LIMIT)

    async def record_checkin(self, student: Student, data: Dict[str, Any]) -> WellnessRecord:
        mood = data["mood"]
        stress = data["stress"]
        energy = data["energy"]
        activity = data.get("physical_activity")
        status = overall_status(mood, stress, energy)

        record = WellnessRecord(
            school_id=student.school_id,
            student_id=student.id,
            record_date=data.get("record_date") or date.today(),
            mood_level=number_to_mood_level(mood),
            mood_score=mood,
            stress_level=stress,
            energy_level=energy,
            sleep_quality=data.get("sleep_quality"),
            sleep_hours=data.get("sleep_hours"),
            physical_activity=activity,
            physical_activity_hours=activity_hours(activity),
            notes=data.get("notes"),
            triggers=data.get("triggers") or [],
            overall_status=status,
            recorded_at=datetime.utcnow(),
        )
        self.db.add(record)
        await self.db.flush()

        await log_activity(
            self.db, student.id, ActivityType.WELLNESS_CHECKIN,
            "Completed daily wellness check-in",
            resource_type="wellness_record", resource_id=record.id,
            details={"mood": mood, "stress": stress, "energy": energy, "overall_status": status.value},
        )
        await self.db.commit()

        if status == WellnessStatus.CONCERNING:
            logger.warning(f"Concerning wellness check-in for student {student.id}")
        return record

    async def get_insights(self, student: Student, today: Optional[date] = None) -> Dict[str, Any]:
        records = await self._records(student, INSIGHT_WINDOW)
        if not records:
            return {
                "current_status": {"overall": "unknown", "mood": "unknown", "stress": "unknown", "energy": "unknown"},
                "trends": {"mood": "stable", "stress": "stable", "energy": "stable", "sleep": "stable"},
                "recommendations": [STARTER_RECOMMENDATION],
                "alerts": [],
                "streak": 0,
            }

        latest = records[0]
        trends = calculate_trends(records)
        return {
            "current_status": {
                "overall": latest.overall_status.value,
                "mood": latest.mood_level.value.replace("_", " "),
                "stress": status_label(11 - latest.stress_level, "stress"),
                "energy": status_label(latest.energy_level, "energy"),
            },
            "trends": trends,
            "recommendations": generate_recommendations(latest, trends),
            "alerts": generate_alerts(records),
            "streak": calculate_streak([r.record_date for r in records], today),
        }

    async def get_trends(self, student: Student) -> Dict[str, Any]:
        records = await self._records(student, settings.WELLNESS_TREND_MAX_RECORDS, newest_first=False)
        return {
            "weekly_trends": group_by_week(records),
            "summary": {
                "total_checkins": len(records),
                "average_mood": round(_mean([mood_level_to_number(r.mood_level) for r in records]), 2),
                "average_stress": round(_mean([r.stress_level for r in records]), 2),
                "average_energy": round(_mean([r.energy_level for r in records]), 2),
            },
        }

    def get_resources(self, category: Optional[str] = None) -> List[dict]:
        if category:
            return [r for r in WELLNESS_RESOURCES if r["category"] == category]
        return WELLNESS_RESOURCES

    async def request_counseling(
        self, student: Student, data: Dict[str, Any], category: CounselingCategory = CounselingCategory.WELLNESS
    ) -> CounselingRequest:
        request = CounselingRequest(
            school_id=student.school_id,
            student_id=student.id,
            category=category,
            topic=data["topic"],
            description=data.get("description"),
            urgency=data.get("urgency") or "normal",
            preferred_times=data.get("preferred_times") or [],
            session_type=data.get("session_type") or "in_person",
        )
        self.db.add(request)
        await self.db.flush()

        await log_activity(
            self.db, student.id, ActivityType.COUNSELING_REQUEST,
            f"Requested {category.value} counseling session",
            resource_type="counseling", resource_id=request.id,
            details={"topic": request.topic, "urgency": request.urgency},
        )
        await self.db.commit()
        return request

    async def list_counseling(self, student: Student, category: Optional[CounselingCategory] = None) -> List[CounselingRequest]:
        query = select(CounselingRequest).where(CounselingRequest.student_id == student.id)
        if category:
            query = query.where(CounselingRequest.category == category)
        result = await self.db.execute(query.order_by(CounselingRequest.created_at.desc()))
        return list(result.scalars().all())

    async def get_goals(self, student: Student) -> List[WellnessGoal]:
        result = await self.db.execute(
            select(WellnessGoal)
            .where(WellnessGoal.student_id == student.id)
            .order_by(WellnessGoal.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_goal(self, student: Student, data: Dict[str, Any]) -> WellnessGoal:
        goal = WellnessGoal(student_id=student.id, **data)
        self.db.add(goal)
        await self.db.commit()
        return goal

    async def update_goal_progress(self, student: Student, goal_id: str, current_value: float) -> WellnessGoal:
        goal = await self.db.get(WellnessGoal, goal_id)
        if not goal or goal.student_id != student.id:
            raise ResourceNotFoundError("Wellness goal", goal_id)
        goal.current_value = current_value
        if goal.target_value and current_value >= goal.target_value:
            goal.status = GoalStatus.COMPLETED
        await self.db.commit()
        return goal

    async def get_emergency_contacts(self, student: Student) -> Dict[str, Any]:
        return await get_emergency_service(self.db).get_contacts(student)

    async def send_emergency_alert(self, student: Student, data: Dict[str, Any], user: User):
        """Wellness alerts open a regular emergency report"""
        return await get_emergency_service(self.db).report_emergency(
            student,
            {
                "emergency_type": data.get("alert_type") or "mental_health",
                "severity": data.get("severity") or "high",
                "description": data.get("description") or "Emergency alert sent from the wellness portal",
                "location": data.get("location"),
            },
            user,
        )


def get_wellness_service(db: AsyncSession) -> WellnessService:
    return WellnessService(db)
