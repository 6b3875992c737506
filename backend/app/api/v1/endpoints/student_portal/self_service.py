"""
Student portal: profile edits, leave, documents and service requests.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.self_service import RequestStatus
from app.models.student import Student
from app.modules.auth.dependencies import get_portal_student
from app.schemas.auth import PasswordChange
from app.schemas.self_service import (
    StudentProfileUpdate,
    LeaveRequestCreate,
    DocumentRequestCreate,
    ServiceRequestCreate,
)
from app.services.self_service_service import (
    SelfServiceService,
    serialize_document_request,
    serialize_leave,
    serialize_profile,
    serialize_service_request,
)


router = APIRouter()


@router.get("/{student_id}/profile")
async def get_profile(student: Student = Depends(get_portal_student)):
    """Student profile"""
    return serialize_profile(student)


@router.put("/{student_id}/profile")
async def update_profile(
    data: StudentProfileUpdate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Update contact details"""
    return serialize_profile(await SelfServiceService(db).update_profile(student, data.model_dump(exclude_unset=True)))


@router.post("/{student_id}/change-password")
async def change_password(
    data: PasswordChange,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Change the password of the student's login"""
    await SelfServiceService(db).change_password(student, data.current_password, data.new_password)
    return {"success": True, "message": "Password changed successfully"}


@router.get("/{student_id}/leave-requests")
async def list_leave_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Leave requests"""
    leaves = await SelfServiceService(db).list_leave_requests(student, status=status_filter)
    return [serialize_leave(leave) for leave in leaves]


@router.post("/{student_id}/leave-requests", status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    data: LeaveRequestCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Request leave"""
    return serialize_leave(await SelfServiceService(db).create_leave_request(student, data.model_dump()))


@router.get("/{student_id}/leave-requests/{leave_id}")
async def get_leave_request(
    leave_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """One leave request"""
    return serialize_leave(await SelfServiceService(db).get_leave_request(student, leave_id))


@router.get("/{student_id}/documents")
async def list_document_requests(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Document requests"""
    return [serialize_document_request(r) for r in await SelfServiceService(db).list_document_requests(student)]


@router.post("/{student_id}/documents/request", status_code=status.HTTP_201_CREATED)
async def request_document(
    data: DocumentRequestCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Request a certificate or transcript"""
    return serialize_document_request(await SelfServiceService(db).request_document(student, data.model_dump()))


@router.get("/{student_id}/service-requests")
async def list_service_requests(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Service requests"""
    return [serialize_service_request(r) for r in await SelfServiceService(db).list_service_requests(student)]


@router.post("/{student_id}/service-requests", status_code=status.HTTP_201_CREATED)
async def create_service_request(
    data: ServiceRequestCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Open a service request"""
    return serialize_service_request(await SelfServiceService(db).create_service_request(student, data.model_dump()))
