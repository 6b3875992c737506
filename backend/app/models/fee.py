"""
Fee Models
- Fee items billed to a student (per category and due date)
- Payments with allocation to fee items and receipt numbers
- Installment payment plans
- Scholarships and applications
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Enum as SQLEnum, Integer, Text, ForeignKey, Float,
    JSON, UniqueConstraint, Index,
)
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class FeeCategory(str, enum.Enum):
    TUITION = "tuition"
    TRANSPORTATION = "transportation"
    HOSTEL = "hostel"
    EXAMINATION = "examination"
    LIBRARY = "library"
    ACTIVITY = "activity"


class PaymentMethod(str, enum.Enum):
    ONLINE = "online"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHEQUE = "cheque"
    CARD = "card"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PlanFrequency(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class ScholarshipApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FeeItem(Base):
    """An amount billed to one student"""
    __tablename__ = "fee_items"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(SQLEnum(FeeCategory), nullable=False)
    description = Column(String(255), nullable=True)
    amount = Column(Float, nullable=False)
    amount_paid = Column(Float, default=0.0, nullable=False)
    due_date = Column(Date, nullable=False)
    academic_year = Column(String(20), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_fee_item_student_due', 'student_id', 'due_date'),
    )

    @property
    def outstanding(self) -> float:
        return round(max(self.amount - (self.amount_paid or 0.0), 0.0), 2)


class FeePayment(Base):
    __tablename__ = "fee_payments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    paid_by_user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False)
    method = Column(SQLEnum(PaymentMethod), nullable=False)
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.COMPLETED, nullable=False)
    receipt_number = Column(String(50), unique=True, nullable=False)
    transaction_id = Column(String(100), unique=True, nullable=False)
    allocations = Column(JSON, default=list)  # [{fee_item_id, category, amount}]
    notes = Column(Text, nullable=True)

    paid_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class PaymentPlan(Base):
    __tablename__ = "payment_plans"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    installment_count = Column(Integer, nullable=False)
    frequency = Column(SQLEnum(PlanFrequency), nullable=False)
    start_date = Column(Date, nullable=False)
    schedule = Column(JSON, default=list)  # [{installment_number, amount, due_date, status}]
    is_active = Column(Boolean, default=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Scholarship(Base):
    __tablename__ = "scholarships"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    scholarship_type = Column(String(30), default="merit")  # merit, need_based, sports, arts
    amount = Column(Float, nullable=False)
    eligibility = Column(JSON, default=list)
    application_deadline = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ScholarshipApplication(Base):
    __tablename__ = "scholarship_applications"
    __table_args__ = (
        UniqueConstraint("scholarship_id", "student_id", name="uq_scholarship_application"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    scholarship_id = Column(GUID, ForeignKey("scholarships.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    statement = Column(Text, nullable=True)
    documents = Column(JSON, default=list)
    status = Column(
        SQLEnum(ScholarshipApplicationStatus),
        default=ScholarshipApplicationStatus.PENDING,
        nullable=False,
    )

    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    decided_at = Column(DateTime, nullable=True)
