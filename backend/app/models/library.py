"""
Library Models
- Book catalog with copy counts
- Loans, reservations (queue per book) and fines
"""

from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, Float, JSON
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class BookFormat(str, enum.Enum):
    PHYSICAL = "physical"
    EBOOK = "ebook"
    AUDIOBOOK = "audiobook"
    JOURNAL = "journal"


class LoanStatus(str, enum.Enum):
    ACTIVE = "active"
    RETURNED = "returned"
    LOST = "lost"


class ReservationStatus(str, enum.Enum):
    WAITING = "waiting"
    READY = "ready"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class FineStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    WAIVED = "waived"


class Book(Base):
    __tablename__ = "books"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    isbn = Column(String(20), nullable=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False)
    publisher = Column(String(255), nullable=True)
    publication_year = Column(Integer, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    format = Column(SQLEnum(BookFormat), default=BookFormat.PHYSICAL, nullable=False)
    digital_url = Column(String(500), nullable=True)
    location = Column(String(50), nullable=True)  # shelf code
    tags = Column(JSON, default=list)
    total_copies = Column(Integer, default=1, nullable=False)
    available_copies = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_available(self) -> bool:
        return (self.available_copies or 0) > 0


class BookLoan(Base):
    __tablename__ = "book_loans"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    book_id = Column(GUID, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    issued_by = Column(GUID, nullable=True)

    borrowed_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    due_date = Column(DateTime, nullable=False)
    returned_at = Column(DateTime, nullable=True)
    renewal_count = Column(Integer, default=0, nullable=False)
    status = Column(SQLEnum(LoanStatus), default=LoanStatus.ACTIVE, nullable=False, index=True)


class BookReservation(Base):
    __tablename__ = "book_reservations"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    book_id = Column(GUID, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(ReservationStatus), default=ReservationStatus.WAITING, nullable=False)
    notes = Column(Text, nullable=True)

    reserved_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=True)


class LibraryFine(Base):
    __tablename__ = "library_fines"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    loan_id = Column(GUID, ForeignKey("book_loans.id", ondelete="CASCADE"), nullable=False, unique=True)
    amount = Column(Float, nullable=False)
    days_overdue = Column(Integer, nullable=False)
    reason = Column(String(255), default="Overdue return")
    status = Column(SQLEnum(FineStatus), default=FineStatus.UNPAID, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    paid_at = Column(DateTime, nullable=True)
