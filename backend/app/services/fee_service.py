"""
Fee Service Layer

Fee summaries, payments allocated across fee items, installment plans,
scholarships, and the admin side (billing items, defaulters).
"""

from collections import defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    OverpaymentError,
    ResourceNotFoundError,
    StudentNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.types import generate_reference
from app.models.activity_tracking import ActivityType
from app.models.fee import (
    FeeItem,
    FeePayment,
    PaymentMethod,
    PaymentPlan,
    PaymentStatus,
    PlanFrequency,
    Scholarship,
    ScholarshipApplication,
    ScholarshipApplicationStatus,
)
from app.models.student import Student
from app.models.user import User
from app.services.activity_service import log_activity


MIN_INSTALLMENTS = 2
MAX_INSTALLMENTS = 12
MONTHS_PER_INSTALLMENT = {PlanFrequency.MONTHLY: 1, PlanFrequency.QUARTERLY: 3}

# Float cents tolerance when comparing money
EPSILON = 0.005


def split_installments(total: float, count: int) -> List[float]:
    """Equal installments; the last absorbs the rounding remainder"""
    base = round(total / count, 2)
    last = round(total - base * (count - 1), 2)
    return [base] * (count - 1) + [last]


def build_schedule(total: float, count: int, frequency: PlanFrequency, start_date: date) -> List[dict]:
    step = MONTHS_PER_INSTALLMENT[frequency]
    return [
        {
            "installment_number": index + 1,
            "amount": amount,
            "due_date": (start_date + relativedelta(months=index * step)).isoformat(),
            "status": "pending",
        }
        for index, amount in enumerate(split_installments(total, count))
    ]


def allocate_payment(items: List[FeeItem], amount: float) -> List[Dict[str, Any]]:
    """Apply amount to items oldest due date first; mutates amount_paid"""
    allocations = []
    remaining = round(amount, 2)
    for item in sorted(items, key=lambda i: (i.due_date, i.created_at or datetime.min)):
        if remaining <= 0:
            break
        owed = item.outstanding
        if owed <= 0:
            continue
        applied = round(min(owed, remaining), 2)
        item.amount_paid = round((item.amount_paid or 0.0) + applied, 2)
        remaining = round(remaining - applied, 2)
        allocations.append({"fee_item_id": item.id, "category": item.category.value, "amount": applied})
    return allocations


def payment_status(total: float, paid: float, outstanding: float, overdue: float) -> str:
    if outstanding <= EPSILON:
        return "paid"
    if overdue > EPSILON:
        return "overdue"
    if paid > EPSILON:
        return "partial"
    return "unpaid"


def serialize_fee_item(item: FeeItem, today: Optional[date] = None) -> dict:
    today = today or date.today()
    return {
        "id": item.id,
        "category": item.category.value,
        "description": item.description,
        "amount": item.amount,
        "amount_paid": item.amount_paid,
        "outstanding": item.outstanding,
        "due_date": item.due_date.isoformat(),
        "days_overdue": max(0, (today - item.due_date).days) if item.outstanding > 0 else 0,
        "academic_year": item.academic_year,
    }


def serialize_payment(payment: FeePayment) -> dict:
    return {
        "id": payment.id,
        "amount": payment.amount,
        "currency": payment.currency,
        "method": payment.method.value,
        "status": payment.status.value,
        "receipt_number": payment.receipt_number,
        "transaction_id": payment.transaction_id,
        "allocations": payment.allocations or [],
        "notes": payment.notes,
        "paid_at": payment.paid_at.isoformat() if payment.paid_at else None,
    }


def serialize_plan(plan: PaymentPlan) -> dict:
    return {
        "id": plan.id,
        "total_amount": plan.total_amount,
        "installment_count": plan.installment_count,
        "frequency": plan.frequency.value,
        "start_date": plan.start_date.isoformat(),
        "schedule": plan.schedule or [],
        "is_active": plan.is_active,
    }


class FeeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _items(self, student: Student, academic_year: Optional[str] = None) -> List[FeeItem]:
        query = select(FeeItem).where(FeeItem.student_id == student.id)
        if academic_year:
            query = query.where(FeeItem.academic_year == academic_year)
        result = await self.db.execute(query.order_by(FeeItem.due_date))
        return list(result.scalars().all())

    async def _active_plan(self, student: Student) -> Optional[PaymentPlan]:
        result = await self.db.execute(
            select(PaymentPlan)
            .where(PaymentPlan.student_id == student.id, PaymentPlan.is_active.is_(True))
            .order_by(PaymentPlan.created_at.desc())
        )
        return result.scalars().first()

    async def get_outstanding_balance(self, student: Student) -> float:
        return round(sum(item.outstanding for item in await self._items(student)), 2)

    async def get_summary(
        self, student: Student, academic_year: Optional[str] = None, today: Optional[date] = None
    ) -> Dict[str, Any]:
        today = today or date.today()
        items = await self._items(student, academic_year)

        total = round(sum(i.amount for i in items), 2)
        paid = round(sum(i.amount_paid or 0 for i in items), 2)
        outstanding = round(sum(i.outstanding for i in items), 2)
        overdue = round(sum(i.outstanding for i in items if i.due_date < today), 2)
        upcoming = [i.due_date for i in items if i.outstanding > 0 and i.due_date >= today]

        breakdown: Dict[str, Dict[str, float]] = defaultdict(lambda: {"total": 0.0, "paid": 0.0, "outstanding": 0.0})
        for item in items:
            entry = breakdown[item.category.value]
            entry["total"] = round(entry["total"] + item.amount, 2)
            entry["paid"] = round(entry["paid"] + (item.amount_paid or 0), 2)
            entry["outstanding"] = round(entry["outstanding"] + item.outstanding, 2)

        scholarships = await self.db.execute(
            select(Scholarship, ScholarshipApplication)
            .join(ScholarshipApplication, ScholarshipApplication.scholarship_id == Scholarship.id)
            .where(
                ScholarshipApplication.student_id == student.id,
                ScholarshipApplication.status == ScholarshipApplicationStatus.APPROVED,
            )
        )
        plan = await self._active_plan(student)

        return {
            "student_id": student.id,
            "academic_year": academic_year,
            "currency": settings.DEFAULT_CURRENCY,
            "total_fees": total,
            "total_paid": paid,
            "outstanding": outstanding,
            "overdue_amount": overdue,
            "next_due_date": min(upcoming).isoformat() if upcoming else None,
            "payment_status": payment_status(total, paid, outstanding, overdue),
            "breakdown": dict(breakdown),
            "scholarships": [
                {"id": s.id, "name": s.name, "amount": s.amount} for s, _ in scholarships.all()
            ],
            "payment_plan": serialize_plan(plan) if plan else None,
        }

    async def get_outstanding(self, student: Student, today: Optional[date] = None) -> List[dict]:
        return [serialize_fee_item(i, today) for i in await self._items(student) if i.outstanding > 0]

    async def get_payment_history(self, student: Student) -> List[FeePayment]:
        result = await self.db.execute(
            select(FeePayment).where(FeePayment.student_id == student.id).order_by(FeePayment.paid_at.desc())
        )
        return list(result.scalars().all())

    async def get_receipts(self, student: Student) -> List[dict]:
        return [
            {
                "receipt_number": p.receipt_number,
                "payment_id": p.id,
                "amount": p.amount,
                "currency": p.currency,
                "paid_at": p.paid_at.isoformat(),
                "items": p.allocations or [],
            }
            for p in await self.get_payment_history(student)
            if p.status == PaymentStatus.COMPLETED
        ]

    async def make_payment(
        self,
        student: Student,
        amount: float,
        method: PaymentMethod,
        paid_by: User,
        notes: Optional[str] = None,
    ) -> FeePayment:
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero", field="amount")

        items = await self._items(student)
        outstanding = round(sum(i.outstanding for i in items), 2)
        if amount > outstanding + EPSILON:
            raise OverpaymentError(amount, outstanding)

        allocations = allocate_payment(items, amount)
        payment = FeePayment(
            school_id=student.school_id,
            student_id=student.id,
            paid_by_user_id=paid_by.id,
            amount=round(amount, 2),
            currency=settings.DEFAULT_CURRENCY,
            method=method,
            status=PaymentStatus.COMPLETED,
            receipt_number=generate_reference("RCP", length=10),
            transaction_id=generate_reference("TXN", length=16),
            allocations=allocations,
            notes=notes,
            paid_at=datetime.utcnow(),
        )
        self.db.add(payment)
        await self.db.flush()

        await log_activity(
            self.db, student.id, ActivityType.FEE_PAYMENT,
            f"Paid {payment.amount:.2f} {payment.currency}",
            resource_type="fee_payment", resource_id=payment.id,
            details={"receipt_number": payment.receipt_number, "method": method.value},
        )
        await self.db.commit()

        logger.info(f"Payment {payment.receipt_number} of {payment.amount:.2f} for student {student.id}")
        return payment

    async def create_payment_plan(
        self,
        student: Student,
        installment_count: int,
        frequency: PlanFrequency,
        start_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> PaymentPlan:
        if not MIN_INSTALLMENTS <= installment_count <= MAX_INSTALLMENTS:
            raise ValidationError(
                f"Installments must be between {MIN_INSTALLMENTS} and {MAX_INSTALLMENTS}",
                field="installment_count",
            )
        outstanding = await self.get_outstanding_balance(student)
        if outstanding <= 0:
            raise ValidationError("There is no outstanding balance to split", field="installment_count")

        current = await self._active_plan(student)
        if current:
            current.is_active = False

        start_date = start_date or date.today()
        plan = PaymentPlan(
            student_id=student.id,
            total_amount=outstanding,
            installment_count=installment_count,
            frequency=frequency,
            start_date=start_date,
            schedule=build_schedule(outstanding, installment_count, frequency, start_date),
            is_active=True,
            notes=notes,
        )
        self.db.add(plan)
        await self.db.commit()
        return plan

    async def list_scholarships(self, student: Student) -> List[dict]:
        result = await self.db.execute(
            select(Scholarship)
            .where(Scholarship.school_id == student.school_id, Scholarship.is_active.is_(True))
            .order_by(Scholarship.name)
        )
        applications = await self.db.execute(
            select(ScholarshipApplication).where(ScholarshipApplication.student_id == student.id)
        )
        status_by_id = {a.scholarship_id: a.status.value for a in applications.scalars().all()}
        return [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "scholarship_type": s.scholarship_type,
                "amount": s.amount,
                "eligibility": s.eligibility or [],
                "application_deadline": s.application_deadline.isoformat() if s.application_deadline else None,
                "application_status": status_by_id.get(s.id, "not_applied"),
            }
            for s in result.scalars().all()
        ]

    async def apply_for_scholarship(
        self, student: Student, scholarship_id: str, data: Dict[str, Any], today: Optional[date] = None
    ) -> ScholarshipApplication:
        today = today or date.today()
        scholarship = await self.db.get(Scholarship, scholarship_id)
        if not scholarship or scholarship.school_id != student.school_id or not scholarship.is_active:
            raise ResourceNotFoundError("Scholarship", scholarship_id)
        if scholarship.application_deadline and scholarship.application_deadline < today:
            raise ValidationError("The application deadline has passed")

        existing = await self.db.execute(
            select(ScholarshipApplication.id).where(
                ScholarshipApplication.scholarship_id == scholarship.id,
                ScholarshipApplication.student_id == student.id,
            )
        )
        if existing.first():
            raise ConflictError("You have already applied for this scholarship")

        application = ScholarshipApplication(
            scholarship_id=scholarship.id,
            student_id=student.id,
            statement=data.get("statement"),
            documents=data.get("documents") or [],
        )
        self.db.add(application)
        await self.db.commit()
        return application

    # =====================================================
    # ADMIN
    # =====================================================

    async def create_fee_item(self, school_id: str, data: Dict[str, Any]) -> FeeItem:
        student = await self.db.get(Student, data["student_id"])
        if not student or student.school_id != school_id:
            raise StudentNotFoundError(data["student_id"])

        item = FeeItem(
            school_id=school_id,
            academic_year=data.pop("academic_year", None) or settings.CURRENT_ACADEMIC_YEAR,
            **data,
        )
        self.db.add(item)
        await self.db.commit()
        return item

    async def create_scholarship(self, school_id: str, data: Dict[str, Any]) -> Scholarship:
        scholarship = Scholarship(school_id=school_id, **data)
        self.db.add(scholarship)
        await self.db.commit()
        return scholarship

    async def get_defaulters(self, school_id: str, today: Optional[date] = None) -> List[dict]:
        """Students with overdue unpaid fees, largest balance first"""
        today = today or date.today()
        result = await self.db.execute(
            select(FeeItem, Student)
            .join(Student, Student.id == FeeItem.student_id)
            .where(FeeItem.school_id == school_id, FeeItem.due_date < today)
        )

        defaulters: Dict[str, Dict[str, Any]] = {}
        for item, student in result.all():
            if item.outstanding <= 0:
                continue
            entry = defaulters.setdefault(student.id, {
                "student_id": student.id,
                "student_name": student.full_name,
                "admission_number": student.admission_number,
                "grade_level": student.grade_level,
                "overdue_amount": 0.0,
                "oldest_due_date": item.due_date,
            })
            entry["overdue_amount"] = round(entry["overdue_amount"] + item.outstanding, 2)
            entry["oldest_due_date"] = min(entry["oldest_due_date"], item.due_date)

        rows = sorted(defaulters.values(), key=lambda d: -d["overdue_amount"])
        for row in rows:
            row["days_overdue"] = (today - row["oldest_due_date"]).days
            row["oldest_due_date"] = row["oldest_due_date"].isoformat()
        return rows


def get_fee_service(db: AsyncSession) -> FeeService:
    return FeeService(db)
