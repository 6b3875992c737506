"""
Self-Service Service Layer
Student profile edits, leave, documents, service requests and password change
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidStatusTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.security import get_password_hash, verify_password
from app.core.types import generate_reference
from app.models.activity_tracking import ActivityType
from app.models.self_service import DocumentRequest, LeaveRequest, RequestStatus, ServiceRequest
from app.models.student import Student
from app.models.user import User
from app.services.activity_service import log_activity
from app.services.notification_service import NotificationService


STUDENT_EDITABLE_FIELDS = ("email", "phone", "address", "emergency_contact")
BLOCKING_LEAVE_STATUSES = (RequestStatus.PENDING, RequestStatus.APPROVED)
LEAVE_DECISIONS = (RequestStatus.APPROVED, RequestStatus.REJECTED)


def serialize_profile(student: Student) -> dict:
    return {
        "id": student.id,
        "admission_number": student.admission_number,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "full_name": student.full_name,
        "date_of_birth": student.date_of_birth.isoformat() if student.date_of_birth else None,
        "gender": student.gender.value if student.gender else None,
        "grade_level": student.grade_level,
        "section": student.section,
        "roll_number": student.roll_number,
        "status": student.status.value,
        "email": student.email,
        "phone": student.phone,
        "address": student.address,
        "blood_group": student.blood_group,
        "emergency_contact": student.emergency_contact or {},
        "enrollment_date": student.enrollment_date.isoformat() if student.enrollment_date else None,
    }


def serialize_leave(leave: LeaveRequest) -> dict:
    return {
        "id": leave.id,
        "leave_type": leave.leave_type.value,
        "start_date": leave.start_date.isoformat(),
        "end_date": leave.end_date.isoformat(),
        "total_days": leave.total_days,
        "reason": leave.reason,
        "attachments": leave.attachments or [],
        "status": leave.status.value,
        "review_comments": leave.review_comments,
        "created_at": leave.created_at.isoformat() if leave.created_at else None,
        "reviewed_at": leave.reviewed_at.isoformat() if leave.reviewed_at else None,
    }


def serialize_document_request(request: DocumentRequest) -> dict:
    return {
        "id": request.id,
        "reference_number": request.reference_number,
        "document_type": request.document_type.value,
        "purpose": request.purpose,
        "copies": request.copies,
        "delivery_method": request.delivery_method,
        "status": request.status.value,
        "created_at": request.created_at.isoformat() if request.created_at else None,
    }


def serialize_service_request(request: ServiceRequest) -> dict:
    return {
        "id": request.id,
        "reference_number": request.reference_number,
        "category": request.category,
        "subject": request.subject,
        "description": request.description,
        "priority": request.priority,
        "status": request.status.value,
        "created_at": request.created_at.isoformat() if request.created_at else None,
    }


class SelfServiceService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ---------------- profile ----------------

    async def update_profile(self, student: Student, data: Dict[str, Any]) -> Student:
        updated = []
        for key in STUDENT_EDITABLE_FIELDS:
            if data.get(key) is not None:
                setattr(student, key, data[key])
                updated.append(key)
        if updated:
            await log_activity(
                self.db, student.id, ActivityType.SELF_SERVICE,
                "Updated profile", resource_type="student", resource_id=student.id,
                details={"fields": updated},
            )
            await self.db.commit()
        return student

    async def change_password(self, student: Student, current_password: str, new_password: str) -> None:
        if not student.user_id:
            raise ValidationError("Student does not have a login account")
        user = await self.db.get(User, student.user_id)
        if not user or not verify_password(current_password, user.hashed_password):
            raise AuthenticationError("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        await self.db.commit()
        logger.log_auth_event("password_changed", success=True, user_email=user.email)

    # ---------------- leave ----------------

    async def list_leave_requests(self, student: Student, status: Optional[RequestStatus] = None) -> List[LeaveRequest]:
        query = select(LeaveRequest).where(LeaveRequest.student_id == student.id)
        if status:
            query = query.where(LeaveRequest.status == status)
        result = await self.db.execute(query.order_by(LeaveRequest.start_date.desc()))
        return list(result.scalars().all())

    async def get_leave_request(self, student: Student, leave_id: str) -> LeaveRequest:
        leave = await self.db.get(LeaveRequest, leave_id)
        if not leave or leave.student_id != student.id:
            raise ResourceNotFoundError("Leave request", leave_id)
        return leave

    async def create_leave_request(self, student: Student, data: Dict[str, Any]) -> LeaveRequest:
        start: date = data["start_date"]
        end: date = data["end_date"]
        if end < start:
            raise ValidationError("End date cannot be before start date", field="end_date")

        overlap = await self.db.execute(
            select(LeaveRequest.id).where(
                LeaveRequest.student_id == student.id,
                LeaveRequest.status.in_(BLOCKING_LEAVE_STATUSES),
                LeaveRequest.start_date <= end,
                LeaveRequest.end_date >= start,
            )
        )
        if overlap.first():
            raise ConflictError("An overlapping leave request already exists")

        leave = LeaveRequest(school_id=student.school_id, student_id=student.id, **data)
        self.db.add(leave)
        await self.db.flush()
        await log_activity(
            self.db, student.id, ActivityType.SELF_SERVICE,
            f"Requested {leave.leave_type.value} leave",
            resource_type="leave_request", resource_id=leave.id,
        )
        await self.db.commit()
        return leave

    async def review_leave_request(
        self, school_id: str, leave_id: str, status: RequestStatus, comments: Optional[str], reviewer_id: str
    ) -> LeaveRequest:
        result = await self.db.execute(
            select(LeaveRequest).where(LeaveRequest.id == leave_id, LeaveRequest.school_id == school_id)
        )
        leave = result.scalar_one_or_none()
        if not leave:
            raise ResourceNotFoundError("Leave request", leave_id)
        if status not in LEAVE_DECISIONS or leave.status != RequestStatus.PENDING:
            raise InvalidStatusTransitionError(leave.status.value, status.value)

        leave.status = status
        leave.review_comments = comments
        leave.reviewed_by = reviewer_id
        leave.reviewed_at = datetime.utcnow()

        student = await self.db.get(Student, leave.student_id)
        if student and student.user_id:
            NotificationService(self.db).notify(
                student.user_id,
                f"Leave request {status.value}",
                f"Your leave from {leave.start_date.isoformat()} to {leave.end_date.isoformat()} was {status.value}",
                category="academic",
                school_id=school_id,
                data={"leave_request_id": leave.id},
            )
        await self.db.commit()
        return leave

    # ---------------- documents ----------------

    async def list_document_requests(self, student: Student) -> List[DocumentRequest]:
        result = await self.db.execute(
            select(DocumentRequest)
            .where(DocumentRequest.student_id == student.id)
            .order_by(DocumentRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def request_document(self, student: Student, data: Dict[str, Any]) -> DocumentRequest:
        request = DocumentRequest(
            school_id=student.school_id,
            student_id=student.id,
            reference_number=generate_reference("DOC", length=8),
            **data,
        )
        self.db.add(request)
        await self.db.flush()
        await log_activity(
            self.db, student.id, ActivityType.SELF_SERVICE,
            f"Requested document: {request.document_type.value}",
            resource_type="document_request", resource_id=request.id,
        )
        await self.db.commit()
        return request

    # ---------------- service requests ----------------

    async def list_service_requests(self, student: Student) -> List[ServiceRequest]:
        result = await self.db.execute(
            select(ServiceRequest)
            .where(ServiceRequest.student_id == student.id)
            .order_by(ServiceRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_service_request(self, student: Student, data: Dict[str, Any]) -> ServiceRequest:
        request = ServiceRequest(
            school_id=student.school_id,
            student_id=student.id,
            reference_number=generate_reference("SRQ", length=8),
            **data,
        )
        self.db.add(request)
        await self.db.flush()
        await log_activity(
            self.db, student.id, ActivityType.SELF_SERVICE,
            f"Opened service request: {request.subject}",
            resource_type="service_request", resource_id=request.id,
        )
        await self.db.commit()
        return request


def get_self_service_service(db: AsyncSession) -> SelfServiceService:
    return SelfServiceService(db)
