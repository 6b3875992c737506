"""
Staff and Department Models
- Departments are unique per (school, type, name)
- Staff members can belong to several departments
"""

from sqlalchemy import (
    Column, String, DateTime, Date, Enum as SQLEnum, Text, ForeignKey, Float, Table,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class DepartmentType(str, enum.Enum):
    ADMINISTRATION = "administration"
    TEACHING = "teaching"
    MEDICAL = "medical"
    COUNSELING = "counseling"
    BOARDING = "boarding"
    TRANSPORTATION = "transportation"
    CATERING = "catering"
    FACILITIES = "facilities"
    SECURITY = "security"
    FINANCE = "finance"
    HR = "hr"
    IT = "it"


class StaffType(str, enum.Enum):
    TEACHING = "teaching"
    ADMINISTRATIVE = "administrative"
    SUPPORT = "support"
    TECHNICAL = "technical"
    MEDICAL = "medical"
    SECURITY = "security"
    OPERATIONS = "operations"
    FINANCE = "finance"
    MAINTENANCE = "maintenance"
    LIBRARIAN = "librarian"
    COUNSELOR = "counselor"
    OTHER = "other"


class StaffStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"
    ON_LEAVE = "on_leave"
    SUSPENDED = "suspended"
    RETIRED = "retired"
    DECEASED = "deceased"


class EmploymentType(str, enum.Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    TEMPORARY = "temporary"
    INTERN = "intern"
    VOLUNTEER = "volunteer"


staff_departments = Table(
    "staff_departments",
    Base.metadata,
    Column("department_id", GUID, ForeignKey("departments.id", ondelete="CASCADE"), primary_key=True),
    Column("staff_id", GUID, ForeignKey("staff.id", ondelete="CASCADE"), primary_key=True),
)


class Department(Base):
    """Organisational unit inside a school"""
    __tablename__ = "departments"
    __table_args__ = (
        UniqueConstraint("school_id", "type", "name", name="uq_department_school_type_name"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(DepartmentType), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    created_by = Column(GUID, nullable=True)
    updated_by = Column(GUID, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    staff_members = relationship(
        "Staff",
        secondary=staff_departments,
        lazy="selectin",
        order_by="Staff.last_name",
    )

    def __repr__(self):
        return f"<Department {self.type.value}: {self.name}>"


class Staff(Base):
    """Employee record; user_id links an optional login account"""
    __tablename__ = "staff"
    __table_args__ = (
        UniqueConstraint("school_id", "employee_id", name="uq_staff_school_employee"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    employee_id = Column(String(20), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)

    staff_type = Column(SQLEnum(StaffType), default=StaffType.TEACHING, nullable=False)
    employment_type = Column(SQLEnum(EmploymentType), default=EmploymentType.FULL_TIME, nullable=False)
    status = Column(SQLEnum(StaffStatus), default=StaffStatus.ACTIVE, nullable=False, index=True)
    designation = Column(String(100), nullable=True)
    joining_date = Column(Date, nullable=True)
    basic_salary = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Staff {self.employee_id}: {self.full_name}>"
