from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.models.student import StudentStatus, TransferStatus
from app.modules.auth.dependencies import get_admin_school_context, get_staff_school_context
from app.schemas.student import (
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    StudentListResponse,
    ParentLinkCreate,
    ParentLinkResponse,
    PromotionRequest,
    PromotionResult,
    GraduationRequest,
    GraduationResult,
    TransferCreate,
    TransferReview,
    TransferResponse,
)
from app.services.school_context_service import SchoolContext
from app.services.student_service import StudentService


router = APIRouter()


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    data: StudentCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Enroll a student"""
    return await StudentService(db, ctx.school_id).create_student(data.model_dump(), created_by=ctx.user.id)


@router.get("", response_model=StudentListResponse)
async def list_students(
    grade_level: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    status_filter: Optional[StudentStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """List students with filters"""
    return await StudentService(db, ctx.school_id).list_students(
        grade_level=grade_level,
        section=section,
        status=status_filter,
        search=search,
        page=page,
        page_size=page_size,
    )


# ==================== Lifecycle ====================

@router.post("/promote", response_model=PromotionResult)
async def promote_students(
    data: PromotionRequest,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Move a grade (or part of one) up to the next grade"""
    return await StudentService(db, ctx.school_id).promote_students(data.model_dump(), promoted_by=ctx.user.id)


@router.post("/graduate", response_model=GraduationResult)
async def graduate_students(
    data: GraduationRequest,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Graduate final-grade students; ineligible ones come back in errors"""
    return await StudentService(db, ctx.school_id).graduate_students(
        ctx.user.id, student_ids=data.student_ids, graduation_year=data.graduation_year
    )


@router.get("/transfers", response_model=List[TransferResponse])
async def list_transfers(
    status_filter: Optional[TransferStatus] = Query(None, alias="status"),
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Transfer requests, newest first"""
    return await StudentService(db, ctx.school_id).list_transfers(status=status_filter)


@router.post("/transfers/{transfer_id}/review", response_model=TransferResponse)
async def review_transfer(
    transfer_id: str,
    data: TransferReview,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Approve, reject or cancel a pending transfer"""
    return await StudentService(db, ctx.school_id).review_transfer(
        transfer_id, data.status, data.notes, reviewed_by=ctx.user.id
    )


@router.post("/{student_id}/transfers", response_model=TransferResponse, status_code=status.HTTP_201_CREATED)
async def request_transfer(
    student_id: str,
    data: TransferCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Start a transfer out of the school"""
    return await StudentService(db, ctx.school_id).request_transfer(
        student_id, data.model_dump(), requested_by=ctx.user.id
    )


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Get a student"""
    return await StudentService(db, ctx.school_id).get_student(student_id)


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    data: StudentUpdate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Update a student record"""
    return await StudentService(db, ctx.school_id).update_student(
        student_id, data.model_dump(exclude_unset=True), updated_by=ctx.user.id
    )


@router.post("/{student_id}/parents", response_model=ParentLinkResponse, status_code=status.HTTP_201_CREATED)
async def link_parent(
    student_id: str,
    data: ParentLinkCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Link a parent account to a student"""
    return await StudentService(db, ctx.school_id).link_parent(student_id, data.model_dump(), linked_by=ctx.user.id)
