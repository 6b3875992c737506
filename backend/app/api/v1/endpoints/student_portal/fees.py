"""
Student portal: fee summary, payments, payment plans and scholarships.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.student import Student
from app.models.user import User
from app.modules.auth.dependencies import get_current_user, get_portal_student
from app.schemas.fee import PaymentCreate, PaymentPlanCreate, ScholarshipApply
from app.services.fee_service import FeeService, serialize_payment, serialize_plan


router = APIRouter()


@router.get("/{student_id}/summary")
async def get_fee_summary(
    academic_year: Optional[str] = Query(None),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Totals, overdue amount, breakdown by category and the active plan"""
    return await FeeService(db).get_summary(student, academic_year=academic_year)


@router.get("/{student_id}/payment-history")
async def get_payment_history(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Payments, newest first"""
    return [serialize_payment(p) for p in await FeeService(db).get_payment_history(student)]


@router.get("/{student_id}/receipts")
async def get_receipts(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Receipts for completed payments"""
    return await FeeService(db).get_receipts(student)


@router.get("/{student_id}/outstanding")
async def get_outstanding(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Unpaid fee items with days overdue"""
    return await FeeService(db).get_outstanding(student)


@router.post("/{student_id}/pay", status_code=status.HTTP_201_CREATED)
async def make_payment(
    data: PaymentCreate,
    student: Student = Depends(get_portal_student),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Pay toward the outstanding balance, oldest items first"""
    payment = await FeeService(db).make_payment(student, data.amount, data.method, current_user, data.notes)
    return serialize_payment(payment)


@router.post("/{student_id}/payment-plan", status_code=status.HTTP_201_CREATED)
async def create_payment_plan(
    data: PaymentPlanCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Split the outstanding balance into installments"""
    plan = await FeeService(db).create_payment_plan(
        student, data.installment_count, data.frequency, data.start_date, data.notes
    )
    return serialize_plan(plan)


@router.get("/{student_id}/scholarships")
async def list_scholarships(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Open scholarships with the student's application status"""
    return await FeeService(db).list_scholarships(student)


@router.post("/{student_id}/scholarship/{scholarship_id}/apply", status_code=status.HTTP_201_CREATED)
async def apply_for_scholarship(
    scholarship_id: str,
    data: ScholarshipApply,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Apply for a scholarship"""
    application = await FeeService(db).apply_for_scholarship(student, scholarship_id, data.model_dump())
    return {
        "id": application.id,
        "scholarship_id": application.scholarship_id,
        "status": application.status.value,
        "applied_at": application.applied_at.isoformat(),
    }
