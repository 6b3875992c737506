"""
Student Models
- Student enrollment record (per school)
- Parent <-> student links used by the parent portal
- Transfer requests out of the school
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Integer, Enum as SQLEnum, Text, ForeignKey, JSON,
    UniqueConstraint,
)
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"
    TRANSFERRED = "transferred"
    SUSPENDED = "suspended"


class Student(Base):
    """Enrolled student; user_id links the student's own login when one exists"""
    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("school_id", "admission_number", name="uq_student_school_admission"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)

    admission_number = Column(String(30), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(SQLEnum(Gender), nullable=True)
    grade_level = Column(String(20), nullable=False, index=True)  # "Grade 10"
    section = Column(String(10), nullable=True)  # "A"
    roll_number = Column(String(20), nullable=True)
    status = Column(SQLEnum(StudentStatus), default=StudentStatus.ACTIVE, nullable=False, index=True)

    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    blood_group = Column(String(5), nullable=True)

    # {allergies: [...], conditions: [...], medications: [...]}
    medical_info = Column(JSON, default=dict)
    # {name, relationship, phone}
    emergency_contact = Column(JSON, default=dict)

    enrollment_date = Column(Date, nullable=True)
    graduation_year = Column(Integer, nullable=True)
    # [{from_grade, to_grade, academic_year, promoted_at}]
    promotion_history = Column(JSON, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Student {self.admission_number}: {self.full_name}>"


class ParentStudentLink(Base):
    """Which parent accounts may see which students"""
    __tablename__ = "parent_student_links"
    __table_args__ = (
        UniqueConstraint("parent_user_id", "student_id", name="uq_parent_student"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    parent_user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    relationship_type = Column(String(30), default="guardian")  # father, mother, guardian
    is_primary = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ParentStudentLink {self.parent_user_id} -> {self.student_id}>"


class TransferType(str, enum.Enum):
    INTER_SCHOOL = "inter_school"
    INTER_STATE = "inter_state"
    INTER_COUNTRY = "inter_country"


class TransferReason(str, enum.Enum):
    PARENT_JOB_TRANSFER = "parent_job_transfer"
    FAMILY_RELOCATION = "family_relocation"
    ACADEMIC_PERFORMANCE = "academic_performance"
    FINANCIAL_REASONS = "financial_reasons"
    HEALTH_CONCERNS = "health_concerns"
    OTHER = "other"


class TransferStatus(str, enum.Enum):
    INITIATED = "initiated"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class StudentTransfer(Base):
    """A request to move a student out of the school; approval marks the student transferred"""
    __tablename__ = "student_transfers"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    transfer_type = Column(SQLEnum(TransferType), nullable=False)
    reason = Column(SQLEnum(TransferReason), nullable=False)
    reason_details = Column(Text, nullable=True)
    to_school_name = Column(String(255), nullable=False)
    from_grade = Column(String(20), nullable=False)
    from_section = Column(String(10), nullable=True)
    transfer_date = Column(Date, nullable=True)
    status = Column(SQLEnum(TransferStatus), default=TransferStatus.INITIATED, nullable=False, index=True)

    requested_by = Column(GUID, nullable=True)
    reviewed_by = Column(GUID, nullable=True)
    review_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<StudentTransfer {self.student_id} {self.status.value}>"
