"""
Mobile staff app endpoints: today's classes, attendance and class lists.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.academic import DayOfWeek
from app.modules.auth.dependencies import get_staff_school_context
from app.schemas.academic import AttendanceMark
from app.schemas.staff import StaffDetailResponse
from app.services.academic_service import AcademicService
from app.services.mobile_service import MobileService
from app.services.school_context_service import SchoolContext
from app.services.staff_service import StaffService


router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Today's classes for the signed-in teacher"""
    return await MobileService(db).staff_dashboard(ctx.user)


@router.get("/schedule")
async def get_schedule(
    day: Optional[DayOfWeek] = Query(None),
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Teaching schedule for the week or one day"""
    service = MobileService(db)
    staff = await service.get_staff_for_user(ctx.user)
    return await service.staff_schedule(staff, day)


@router.post("/attendance/mark")
async def mark_attendance(
    data: AttendanceMark,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Mark attendance for a class"""
    records = await AcademicService(db).mark_attendance(
        ctx.school_id,
        data.attendance_date,
        [entry.model_dump() for entry in data.entries],
        marked_by=ctx.user.id,
    )
    return {"date": data.attendance_date.isoformat(), "marked": len(records)}


@router.get("/students")
async def list_class_students(
    grade_level: Optional[str] = Query(None),
    section: Optional[str] = Query(None),
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Active students of a class"""
    students = await MobileService(db).class_students(ctx.school_id, grade_level, section)
    return [
        {
            "id": s.id,
            "full_name": s.full_name,
            "admission_number": s.admission_number,
            "roll_number": s.roll_number,
            "grade_level": s.grade_level,
            "section": s.section,
        }
        for s in students
    ]


@router.get("/profile", response_model=StaffDetailResponse)
async def get_profile(
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """The signed-in staff member's record"""
    staff = await MobileService(db).get_staff_for_user(ctx.user)
    response = StaffDetailResponse.model_validate(staff)
    response.departments = await StaffService(db, ctx.school_id).get_department_names(staff.id)
    return response
