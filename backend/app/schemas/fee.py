"""
Fee Schemas - payments, payment plans, scholarships
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date

from app.models.fee import FeeCategory, PaymentMethod, PlanFrequency


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    method: PaymentMethod = PaymentMethod.ONLINE
    notes: Optional[str] = Field(None, max_length=500)


class ChildPaymentCreate(PaymentCreate):
    """Parent paying for one of their children"""
    student_id: str


class PaymentPlanCreate(BaseModel):
    installment_count: int = Field(..., ge=2, le=12)
    frequency: PlanFrequency = PlanFrequency.MONTHLY
    start_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)


class ScholarshipApply(BaseModel):
    statement: Optional[str] = Field(None, max_length=5000)
    documents: List[str] = Field(default_factory=list)


class FeeItemCreate(BaseModel):
    student_id: str
    category: FeeCategory
    description: Optional[str] = Field(None, max_length=255)
    amount: float = Field(..., gt=0)
    due_date: date
    academic_year: Optional[str] = Field(None, max_length=20)


class ScholarshipCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    scholarship_type: str = Field(default="merit", pattern=r'^(merit|need_based|sports|arts)$')
    amount: float = Field(..., gt=0)
    eligibility: List[str] = Field(default_factory=list)
    application_deadline: Optional[date] = None
