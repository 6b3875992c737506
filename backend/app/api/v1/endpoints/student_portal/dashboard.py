from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.student import Student
from app.modules.auth.dependencies import get_portal_student
from app.services.dashboard_service import DashboardService


router = APIRouter()


@router.get("/{student_id}")
async def get_student_dashboard(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Everything the portal home page shows for a student"""
    return await DashboardService(db).get_student_dashboard(student)
