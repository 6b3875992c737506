"""
Emergency Service Layer

Routes student emergency reports to the responsible department, tracks
their status timeline and serves the safety reference material shown in the
student portal.
"""

from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStatusTransitionError, ResourceNotFoundError
from app.core.logging_config import logger
from app.core.types import generate_reference
from app.models.activity_tracking import ActivityType
from app.models.emergency import (
    EmergencyReport,
    EmergencySeverity,
    EmergencyStatus,
    EmergencyType,
    SafetyCheck,
    SafetyStatus,
)
from app.models.school import School
from app.models.student import Student
from app.models.user import User, UserRole
from app.services.activity_service import log_activity
from app.services.notification_service import NotificationService


PRIORITY_BY_SEVERITY = {
    EmergencySeverity.CRITICAL: "immediate",
    EmergencySeverity.HIGH: "urgent",
    EmergencySeverity.MEDIUM: "high",
    EmergencySeverity.LOW: "normal",
}

RESPONSE_TIME_BY_SEVERITY = {
    EmergencySeverity.CRITICAL: "2-5 minutes",
    EmergencySeverity.HIGH: "5-15 minutes",
    EmergencySeverity.MEDIUM: "15-30 minutes",
    EmergencySeverity.LOW: "30-60 minutes",
}

# type -> (department, primary contact)
ROUTING = {
    EmergencyType.MEDICAL: ("Medical Services", "School Nurse"),
    EmergencyType.MENTAL_HEALTH: ("Medical Services", "School Nurse"),
    EmergencyType.SAFETY: ("Safety & Security", "Safety Officer"),
    EmergencyType.ACCIDENT: ("Safety & Security", "Safety Officer"),
    EmergencyType.FIRE: ("Safety & Security", "Safety Officer"),
    EmergencyType.HARASSMENT: ("Counseling Services", "School Counselor"),
    EmergencyType.BULLYING: ("Counseling Services", "School Counselor"),
    EmergencyType.SECURITY: ("Security Department", "Security Chief"),
    EmergencyType.TRANSPORT: ("Transportation", "Transport Coordinator"),
}
DEFAULT_ROUTE = ("Emergency Response Team", "Emergency Coordinator")

STATUS_ORDER = [
    EmergencyStatus.REPORTED,
    EmergencyStatus.ACKNOWLEDGED,
    EmergencyStatus.RESPONDING,
    EmergencyStatus.IN_PROGRESS,
    EmergencyStatus.RESOLVED,
    EmergencyStatus.CLOSED,
]
CLOSED_STATUSES = (EmergencyStatus.RESOLVED, EmergencyStatus.CLOSED)

DEFAULT_SCHOOL_CONTACTS = [
    {
        "name": "School Emergency Control Center",
        "type": "emergency_coordinator",
        "phone": "+1234567890",
        "email": "emergency@school.edu",
        "availability": "24/7",
        "priority": "critical",
    },
    {
        "name": "School Nurse/Medical Officer",
        "type": "medical",
        "phone": "+1234567891",
        "email": "nurse@school.edu",
        "availability": "School Hours + Emergency",
        "priority": "high",
    },
    {
        "name": "School Security Office",
        "type": "security",
        "phone": "+1234567892",
        "email": "security@school.edu",
        "availability": "24/7",
        "priority": "high",
    },
]

EXTERNAL_CONTACTS = [
    {"name": "Local Police", "type": "police", "phone": "911", "priority": "critical"},
    {"name": "Fire Department", "type": "fire", "phone": "911", "priority": "critical"},
    {"name": "Ambulance Service", "type": "medical", "phone": "911", "priority": "critical"},
    {"name": "Poison Control Center", "type": "medical", "phone": "+18002221222", "priority": "high"},
]

EMERGENCY_PROCEDURES = {
    "medical": "Call the school nurse immediately, then the emergency contact",
    "safety": "Move to a safe location and contact security",
    "mental_health": "Contact the counselor or a trusted adult",
}

SAFETY_RESOURCES = {
    "safety_guides": [
        {
            "id": "guide-1",
            "title": "Campus Safety Guidelines",
            "category": "general_safety",
            "url": "/resources/safety/campus-safety-guide.pdf",
        },
        {
            "id": "guide-2",
            "title": "Emergency Evacuation Procedures",
            "category": "emergency_procedures",
            "url": "/resources/safety/evacuation-procedures.pdf",
        },
        {
            "id": "guide-3",
            "title": "Cybersecurity Best Practices",
            "category": "digital_safety",
            "url": "/resources/safety/cybersecurity-guide.pdf",
        },
    ],
    "drills": [
        {"type": "Fire Drill", "frequency": "Monthly"},
        {"type": "Earthquake Drill", "frequency": "Quarterly"},
        {"type": "Lockdown Drill", "frequency": "Semi-annual"},
    ],
    "safety_tips": [
        {
            "category": "Personal Safety",
            "tips": [
                "Always walk in well-lit areas",
                "Keep emergency contacts updated",
                "Trust your instincts about unsafe situations",
            ],
        },
        {
            "category": "Digital Safety",
            "tips": [
                "Use strong passwords",
                "Report cyberbullying immediately",
            ],
        },
    ],
}


def route_emergency(emergency_type: EmergencyType, severity: EmergencySeverity) -> Dict[str, str]:
    """Department, contact, priority and expected response time for a report"""
    department, contact = ROUTING.get(emergency_type, DEFAULT_ROUTE)
    return {
        "assigned_department": department,
        "primary_contact": contact,
        "priority": PRIORITY_BY_SEVERITY[severity],
        "estimated_response_time": RESPONSE_TIME_BY_SEVERITY[severity],
    }


def generate_tracking_number() -> str:
    return generate_reference("TRK", length=6)


def timeline_entry(status: EmergencyStatus, note: Optional[str] = None, by: Optional[str] = None) -> dict:
    return {"status": status.value, "at": datetime.utcnow().isoformat(), "note": note, "by": by}


def serialize_report(report: EmergencyReport) -> dict:
    return {
        "id": report.id,
        "student_id": report.student_id,
        "tracking_number": report.tracking_number,
        "emergency_type": report.emergency_type.value,
        "severity": report.severity.value,
        "priority": report.priority,
        "description": report.description,
        "location": report.location,
        "contact_number": report.contact_number,
        "assigned_department": report.assigned_department,
        "primary_contact": report.primary_contact,
        "estimated_response_time": report.estimated_response_time,
        "status": report.status.value,
        "timeline": report.timeline or [],
        "created_at": report.created_at.isoformat() if report.created_at else None,
        "resolved_at": report.resolved_at.isoformat() if report.resolved_at else None,
    }


class EmergencyService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def _unique_tracking_number(self) -> str:
        while True:
            candidate = generate_tracking_number()
            taken = await self.db.execute(
                select(EmergencyReport.id).where(EmergencyReport.tracking_number == candidate)
            )
            if not taken.first():
                return candidate

    async def report_emergency(self, student: Student, data: Dict[str, Any], reported_by: User) -> EmergencyReport:
        emergency_type = EmergencyType(data["emergency_type"])
        severity = EmergencySeverity(data.get("severity") or EmergencySeverity.MEDIUM)

        report = EmergencyReport(
            school_id=student.school_id,
            student_id=student.id,
            reported_by_user_id=reported_by.id,
            tracking_number=await self._unique_tracking_number(),
            emergency_type=emergency_type,
            severity=severity,
            description=data["description"],
            location=data.get("location"),
            contact_number=data.get("contact_number"),
            witnesses=data.get("witnesses") or [],
            injured_parties=data.get("injured_parties") or [],
            immediate_actions=data.get("immediate_actions"),
            attachments=data.get("attachments") or [],
            status=EmergencyStatus.REPORTED,
            timeline=[timeline_entry(EmergencyStatus.REPORTED, "Report submitted", reported_by.id)],
            **route_emergency(emergency_type, severity),
        )
        self.db.add(report)
        await self.db.flush()

        # Alert the school's admins; staff pick the report up from the admin queue
        admins = await self.db.execute(
            select(User.id).where(
                User.school_id == student.school_id,
                User.role == UserRole.SCHOOL_ADMIN,
                User.is_active.is_(True),
            )
        )
        self.notifications.notify_many(
            [row[0] for row in admins.all()],
            f"{severity.value.upper()} emergency: {emergency_type.value}",
            f"{student.full_name} reported an emergency ({report.tracking_number})",
            category="emergency",
            school_id=student.school_id,
            data={"emergency_id": report.id},
        )

        await log_activity(
            self.db, student.id, ActivityType.EMERGENCY,
            f"Emergency reported: {emergency_type.value}",
            resource_type="emergency", resource_id=report.id,
            details={"severity": severity.value, "location": report.location},
        )
        await self.db.commit()

        logger.warning(
            f"Emergency {report.tracking_number} ({emergency_type.value}/{severity.value}) "
            f"routed to {report.assigned_department}"
        )
        return report

    async def get_report(self, student: Student, emergency_id: str) -> EmergencyReport:
        result = await self.db.execute(
            select(EmergencyReport).where(
                EmergencyReport.id == emergency_id,
                EmergencyReport.student_id == student.id,
            )
        )
        report = result.scalar_one_or_none()
        if not report:
            raise ResourceNotFoundError("Emergency report", emergency_id)
        return report

    async def list_school_reports(
        self, school_id: str, status: Optional[EmergencyStatus] = None
    ) -> List[EmergencyReport]:
        query = select(EmergencyReport).where(EmergencyReport.school_id == school_id)
        if status:
            query = query.where(EmergencyReport.status == status)
        result = await self.db.execute(query.order_by(EmergencyReport.created_at.desc()))
        return list(result.scalars().all())

    async def update_status(
        self,
        school_id: str,
        emergency_id: str,
        new_status: EmergencyStatus,
        note: Optional[str],
        updated_by: str,
    ) -> EmergencyReport:
        result = await self.db.execute(
            select(EmergencyReport).where(
                EmergencyReport.id == emergency_id,
                EmergencyReport.school_id == school_id,
            )
        )
        report = result.scalar_one_or_none()
        if not report:
            raise ResourceNotFoundError("Emergency report", emergency_id)

        current = report.status
        if current == EmergencyStatus.CLOSED or STATUS_ORDER.index(new_status) <= STATUS_ORDER.index(current):
            raise InvalidStatusTransitionError(current.value, new_status.value)

        report.status = new_status
        # Reassign so the JSON column is flagged dirty
        report.timeline = list(report.timeline or []) + [timeline_entry(new_status, note, updated_by)]
        if new_status in CLOSED_STATUSES and not report.resolved_at:
            report.resolved_at = datetime.utcnow()

        if report.reported_by_user_id:
            self.notifications.notify(
                report.reported_by_user_id,
                f"Emergency {report.tracking_number} update",
                f"Status changed to {new_status.value}" + (f": {note}" if note else ""),
                category="emergency",
                school_id=school_id,
                data={"emergency_id": report.id, "status": new_status.value},
            )
        await self.db.commit()
        return report

    async def get_contacts(self, student: Student) -> Dict[str, Any]:
        school = await self.db.get(School, student.school_id)
        school_contacts = ((school.settings or {}).get("emergency_contacts") if school else None) \
            or DEFAULT_SCHOOL_CONTACTS
        return {
            "student_id": student.id,
            "personal_contact": student.emergency_contact or {},
            "school_contacts": school_contacts,
            "external_contacts": EXTERNAL_CONTACTS,
            "procedures": EMERGENCY_PROCEDURES,
        }

    def get_safety_resources(self) -> Dict[str, Any]:
        return SAFETY_RESOURCES

    async def submit_safety_check(self, student: Student, data: Dict[str, Any]) -> Dict[str, Any]:
        status = SafetyStatus(data["status"])
        check = SafetyCheck(
            student_id=student.id,
            status=status,
            location=data.get("location"),
            notes=data.get("notes"),
            needs=data.get("needs") or [],
        )
        self.db.add(check)
        await self.db.commit()

        follow_up = status != SafetyStatus.SAFE
        if follow_up:
            logger.warning(f"Safety check for student {student.id} needs follow-up: {status.value}")
        return {
            "id": check.id,
            "student_id": student.id,
            "status": status.value,
            "location": check.location,
            "submitted_at": check.created_at.isoformat() if check.created_at else None,
            "follow_up_required": follow_up,
            "message": "Safety check confirmed. Thank you for updating your status."
            if not follow_up else "Assistance request noted. Help is being arranged.",
        }

    async def get_history(self, student: Student) -> Dict[str, Any]:
        result = await self.db.execute(
            select(EmergencyReport)
            .where(EmergencyReport.student_id == student.id)
            .order_by(EmergencyReport.created_at.desc())
        )
        reports = list(result.scalars().all())

        resolved = sum(1 for r in reports if r.status in CLOSED_STATUSES)
        return {
            "student_id": student.id,
            "reports": [serialize_report(r) for r in reports],
            "statistics": {
                "total_reports": len(reports),
                "by_type": dict(Counter(r.emergency_type.value for r in reports)),
                "by_severity": dict(Counter(r.severity.value for r in reports)),
                "resolved": resolved,
                "resolution_rate": round(resolved / len(reports) * 100, 2) if reports else 0.0,
            },
        }


def get_emergency_service(db: AsyncSession) -> EmergencyService:
    return EmergencyService(db)
