"""
Transportation Service Layer

Route assignments, a timetable-derived vehicle position, schedules, feedback
and route notifications.
"""

import math
from datetime import datetime, time
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ResourceNotFoundError, StudentNotFoundError, ValidationError
from app.core.logging_config import logger
from app.models.student import Student
from app.models.transportation import StudentTransport, TransportFeedback, TransportRoute
from app.models.user import User
from app.services.emergency_service import get_emergency_service
from app.services.notification_service import NotificationService

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DEFAULT_TRANSPORT_COORDINATOR = {
    "name": "Transport Coordinator",
    "role": "transport_coordinator",
    "phone": "+1234567895",
}


def parse_hhmm(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    return datetime.strptime(value, "%H:%M").time()


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _trip(stops: List[dict], key: str) -> List[Tuple[dict, time]]:
    return [(stop, parse_hhmm(stop.get(key))) for stop in stops if stop.get(key)]


def vehicle_position(route: TransportRoute, now: datetime, student_stop: Optional[str] = None) -> Dict[str, Any]:
    """
    Estimate where the vehicle is from the route timetable.

    The morning trip follows pickup times, the afternoon trip drop times. The
    next stop is the first one scheduled at or after `now`.
    """
    operating = WEEKDAY_NAMES[now.weekday()] in (route.operating_days or [])
    morning = _trip(route.stops or [], "pickup_time")
    afternoon = _trip(route.stops or [], "drop_time")
    current = _minutes(now.time())

    if not operating or not (morning or afternoon):
        return {
            "status": "not_started",
            "operating_today": operating,
            "trip": None,
            "next_stop": None,
            "minutes_to_next_stop": None,
            "minutes_to_your_stop": None,
        }

    if morning and (current <= _minutes(morning[-1][1]) or not afternoon):
        trip_name, trip = "morning", morning
    else:
        trip_name, trip = "afternoon", afternoon

    upcoming = [(stop, at) for stop, at in trip if _minutes(at) >= current]
    if current < _minutes(trip[0][1]):
        status = "not_started"
    elif upcoming:
        status = "en_route"
    else:
        status = "completed"

    next_stop, next_at = upcoming[0] if upcoming else (None, None)
    your_stop_minutes = None
    if student_stop:
        for stop, at in upcoming:
            if stop.get("name") == student_stop:
                your_stop_minutes = _minutes(at) - current
                break

    return {
        "status": status,
        "operating_today": True,
        "trip": trip_name,
        "next_stop": {
            "name": next_stop.get("name"),
            "scheduled_time": next_at.strftime("%H:%M"),
            "latitude": next_stop.get("latitude"),
            "longitude": next_stop.get("longitude"),
        } if next_stop else None,
        "minutes_to_next_stop": math.ceil(_minutes(next_at) - current) if next_at else None,
        "minutes_to_your_stop": your_stop_minutes,
    }


def serialize_route(route: TransportRoute) -> dict:
    return {
        "id": route.id,
        "route_number": route.route_number,
        "name": route.name,
        "vehicle_number": route.vehicle_number,
        "vehicle_capacity": route.vehicle_capacity,
        "driver": {"name": route.driver_name, "phone": route.driver_phone},
        "attendant": {"name": route.attendant_name, "phone": route.attendant_phone},
        "stops": route.stops or [],
        "operating_days": route.operating_days or [],
        "is_active": route.is_active,
    }


class TransportationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def get_assignment(self, student: Student) -> Tuple[StudentTransport, TransportRoute]:
        result = await self.db.execute(
            select(StudentTransport, TransportRoute)
            .join(TransportRoute, TransportRoute.id == StudentTransport.route_id)
            .where(StudentTransport.student_id == student.id, StudentTransport.is_active.is_(True))
        )
        row = result.first()
        if not row:
            raise ResourceNotFoundError("Transport assignment", student.id)
        return row[0], row[1]

    async def get_route_info(self, student: Student) -> Dict[str, Any]:
        assignment, route = await self.get_assignment(student)
        stop = next((s for s in route.stops or [] if s.get("name") == assignment.stop_name), {})
        return {
            "student_id": student.id,
            "route": serialize_route(route),
            "stop": assignment.stop_name,
            "pickup_time": stop.get("pickup_time"),
            "drop_time": stop.get("drop_time"),
        }

    async def get_vehicle_tracking(self, student: Student, now: Optional[datetime] = None) -> Dict[str, Any]:
        assignment, route = await self.get_assignment(student)
        position = vehicle_position(route, now or datetime.now(), assignment.stop_name)
        return {
            "route_id": route.id,
            "route_number": route.route_number,
            "vehicle_number": route.vehicle_number,
            "driver_name": route.driver_name,
            "driver_phone": route.driver_phone,
            **position,
        }

    async def get_schedule(self, student: Student) -> Dict[str, Any]:
        assignment, route = await self.get_assignment(student)
        stop = next((s for s in route.stops or [] if s.get("name") == assignment.stop_name), {})
        days = route.operating_days or []
        return {
            "route_number": route.route_number,
            "stop": assignment.stop_name,
            "weekly_schedule": [
                {
                    "day": day,
                    "operating": day in days,
                    "pickup_time": stop.get("pickup_time") if day in days else None,
                    "drop_time": stop.get("drop_time") if day in days else None,
                }
                for day in WEEKDAY_NAMES
            ],
        }

    async def get_emergency_contacts(self, student: Student) -> List[dict]:
        contacts = []
        try:
            _, route = await self.get_assignment(student)
        except ResourceNotFoundError:
            route = None
        if route:
            if route.driver_name:
                contacts.append({"name": route.driver_name, "role": "driver", "phone": route.driver_phone})
            if route.attendant_name:
                contacts.append({"name": route.attendant_name, "role": "attendant", "phone": route.attendant_phone})
        contacts.append(DEFAULT_TRANSPORT_COORDINATOR)
        return contacts

    async def report_emergency(self, student: Student, data: Dict[str, Any], user: User):
        payload = dict(data, emergency_type="transport")
        return await get_emergency_service(self.db).report_emergency(student, payload, user)

    async def submit_feedback(self, student: Student, data: Dict[str, Any]) -> TransportFeedback:
        if not 1 <= data["rating"] <= 5:
            raise ValidationError("Rating must be between 1 and 5", field="rating")
        try:
            _, route = await self.get_assignment(student)
            route_id = route.id
        except ResourceNotFoundError:
            route_id = None

        feedback = TransportFeedback(
            student_id=student.id,
            route_id=route_id,
            rating=data["rating"],
            category=data.get("category") or "general",
            comments=data.get("comments"),
        )
        self.db.add(feedback)
        await self.db.commit()
        return feedback

    async def get_notifications(self, student: Student) -> list:
        if not student.user_id:
            return []
        return await self.notifications.list_for_user(student.user_id, category="transport")

    # =====================================================
    # ADMIN
    # =====================================================

    async def create_route(self, school_id: str, data: Dict[str, Any]) -> TransportRoute:
        for stop in data.get("stops") or []:
            try:
                parse_hhmm(stop.get("pickup_time"))
                parse_hhmm(stop.get("drop_time"))
            except ValueError:
                raise ValidationError(f"Stop '{stop.get('name')}' times must use HH:MM", field="stops")
        route = TransportRoute(school_id=school_id, **data)
        self.db.add(route)
        await self.db.commit()
        return route

    async def _route(self, school_id: str, route_id: str) -> TransportRoute:
        result = await self.db.execute(
            select(TransportRoute).where(TransportRoute.id == route_id, TransportRoute.school_id == school_id)
        )
        route = result.scalar_one_or_none()
        if not route:
            raise ResourceNotFoundError("Route", route_id)
        return route

    async def assign_student(self, school_id: str, student_id: str, route_id: str, stop_name: str) -> StudentTransport:
        student = await self.db.get(Student, student_id)
        if not student or student.school_id != school_id:
            raise StudentNotFoundError(student_id)
        route = await self._route(school_id, route_id)
        if stop_name not in {s.get("name") for s in route.stops or []}:
            raise ValidationError(f"Stop '{stop_name}' is not on route {route.route_number}", field="stop_name")

        result = await self.db.execute(select(StudentTransport).where(StudentTransport.student_id == student.id))
        assignment = result.scalar_one_or_none()
        if assignment:
            assignment.route_id = route.id
            assignment.stop_name = stop_name
            assignment.is_active = True
        else:
            assignment = StudentTransport(student_id=student.id, route_id=route.id, stop_name=stop_name)
            self.db.add(assignment)
        await self.db.commit()
        return assignment

    async def notify_route(self, school_id: str, route_id: str, title: str, message: str) -> int:
        """Notify every student assigned to the route; returns the number notified"""
        route = await self._route(school_id, route_id)
        result = await self.db.execute(
            select(Student.user_id)
            .join(StudentTransport, StudentTransport.student_id == Student.id)
            .where(
                StudentTransport.route_id == route.id,
                StudentTransport.is_active.is_(True),
                Student.user_id.is_not(None),
            )
        )
        count = self.notifications.notify_many(
            [row[0] for row in result.all()],
            title,
            message,
            category="transport",
            school_id=school_id,
            data={"route_id": route.id},
        )
        await self.db.commit()
        logger.info(f"Sent route {route.route_number} notice to {count} students")
        return count


def get_transportation_service(db: AsyncSession) -> TransportationService:
    return TransportationService(db)
