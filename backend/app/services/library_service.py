"""
Library Service Layer

Catalog search, reservations with a simple queue, loans with renewals and
overdue fines, plus the librarian side (cataloging, issue, return).
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, LibraryRuleError, ResourceNotFoundError, StudentNotFoundError
from app.core.logging_config import logger
from app.models.activity_tracking import ActivityType
from app.models.library import (
    Book,
    BookFormat,
    BookLoan,
    BookReservation,
    FineStatus,
    LibraryFine,
    LoanStatus,
    ReservationStatus,
)
from app.models.student import Student
from app.services.activity_service import log_activity
from app.services.notification_service import NotificationService


ACTIVE_RESERVATION_STATUSES = (ReservationStatus.WAITING, ReservationStatus.READY)


def days_overdue(due_date: datetime, reference: Optional[datetime] = None) -> int:
    reference = reference or datetime.utcnow()
    return max(0, (reference.date() - due_date.date()).days)


def calculate_fine(due_date: datetime, reference: Optional[datetime] = None) -> float:
    return round(days_overdue(due_date, reference) * settings.LIBRARY_FINE_PER_DAY, 2)


def is_overdue(loan: BookLoan, now: Optional[datetime] = None) -> bool:
    now = now or datetime.utcnow()
    return loan.status == LoanStatus.ACTIVE and loan.due_date < now


def serialize_book(book: Book, queue_length: Optional[int] = None) -> dict:
    data = {
        "id": book.id,
        "isbn": book.isbn,
        "title": book.title,
        "author": book.author,
        "publisher": book.publisher,
        "publication_year": book.publication_year,
        "category": book.category,
        "description": book.description,
        "format": book.format.value,
        "digital_url": book.digital_url,
        "location": book.location,
        "tags": book.tags or [],
        "total_copies": book.total_copies,
        "available_copies": book.available_copies,
        "is_available": book.available_copies > 0,
    }
    if queue_length is not None:
        data["reservation_queue"] = queue_length
    return data


def serialize_loan(loan: BookLoan, book: Optional[Book] = None, now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    overdue = is_overdue(loan, now)
    return {
        "id": loan.id,
        "book_id": loan.book_id,
        "title": book.title if book else None,
        "author": book.author if book else None,
        "borrowed_at": loan.borrowed_at.isoformat(),
        "due_date": loan.due_date.isoformat(),
        "returned_at": loan.returned_at.isoformat() if loan.returned_at else None,
        "renewal_count": loan.renewal_count,
        "renewals_remaining": max(0, settings.LIBRARY_MAX_RENEWALS - loan.renewal_count),
        "status": loan.status.value,
        "is_overdue": overdue,
        "days_overdue": days_overdue(loan.due_date, now) if overdue else 0,
        "accrued_fine": calculate_fine(loan.due_date, now) if overdue else 0.0,
    }


def serialize_reservation(reservation: BookReservation, book: Optional[Book] = None,
                          position: Optional[int] = None) -> dict:
    return {
        "id": reservation.id,
        "book_id": reservation.book_id,
        "title": book.title if book else None,
        "status": reservation.status.value,
        "queue_position": position,
        "reserved_at": reservation.reserved_at.isoformat(),
        "expires_at": reservation.expires_at.isoformat() if reservation.expires_at else None,
    }


def serialize_fine(fine: LibraryFine) -> dict:
    return {
        "id": fine.id,
        "loan_id": fine.loan_id,
        "amount": fine.amount,
        "days_overdue": fine.days_overdue,
        "reason": fine.reason,
        "status": fine.status.value,
        "created_at": fine.created_at.isoformat() if fine.created_at else None,
        "paid_at": fine.paid_at.isoformat() if fine.paid_at else None,
    }


class LibraryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # CATALOG
    # =====================================================

    async def get_book(self, school_id: str, book_id: str) -> Book:
        result = await self.db.execute(select(Book).where(Book.id == book_id, Book.school_id == school_id))
        book = result.scalar_one_or_none()
        if not book:
            raise ResourceNotFoundError("Book", book_id)
        return book

    async def _active_reservations(self, book_id: str) -> List[BookReservation]:
        result = await self.db.execute(
            select(BookReservation)
            .where(
                BookReservation.book_id == book_id,
                BookReservation.status.in_(ACTIVE_RESERVATION_STATUSES),
            )
            .order_by(BookReservation.reserved_at)
        )
        return list(result.scalars().all())

    async def search_books(
        self,
        school_id: str,
        query: Optional[str] = None,
        category: Optional[str] = None,
        available_only: bool = False,
        limit: int = 50,
    ) -> List[Book]:
        stmt = select(Book).where(Book.school_id == school_id)
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(or_(Book.title.ilike(pattern), Book.author.ilike(pattern), Book.isbn.ilike(pattern)))
        if category:
            stmt = stmt.where(Book.category == category)
        if available_only:
            stmt = stmt.where(Book.available_copies > 0)
        result = await self.db.execute(stmt.order_by(Book.title).limit(limit))
        return list(result.scalars().all())

    async def get_book_details(self, school_id: str, book_id: str) -> dict:
        book = await self.get_book(school_id, book_id)
        return serialize_book(book, queue_length=len(await self._active_reservations(book.id)))

    async def get_digital_resources(self, school_id: str) -> List[Book]:
        result = await self.db.execute(
            select(Book)
            .where(Book.school_id == school_id, Book.format != BookFormat.PHYSICAL)
            .order_by(Book.title)
        )
        return list(result.scalars().all())

    # =====================================================
    # RESERVATIONS
    # =====================================================

    async def reserve_book(self, student: Student, book_id: str, notes: Optional[str] = None) -> dict:
        book = await self.get_book(student.school_id, book_id)
        queue = await self._active_reservations(book.id)
        if any(r.student_id == student.id for r in queue):
            raise ConflictError("You already have an active reservation for this book")

        now = datetime.utcnow()
        ready = book.available_copies > len(queue)
        reservation = BookReservation(
            book_id=book.id,
            student_id=student.id,
            status=ReservationStatus.READY if ready else ReservationStatus.WAITING,
            notes=notes,
            reserved_at=now,
            expires_at=now + timedelta(days=settings.LIBRARY_RESERVATION_HOLD_DAYS) if ready else None,
        )
        self.db.add(reservation)
        await self.db.flush()

        await log_activity(
            self.db, student.id, ActivityType.LIBRARY,
            f"Reserved book: {book.title}",
            resource_type="book", resource_id=book.id,
        )
        await self.db.commit()
        return serialize_reservation(reservation, book, position=len(queue) + 1)

    async def get_reservations(self, student: Student) -> List[dict]:
        result = await self.db.execute(
            select(BookReservation, Book)
            .join(Book, Book.id == BookReservation.book_id)
            .where(BookReservation.student_id == student.id)
            .order_by(BookReservation.reserved_at.desc())
        )
        items = []
        for reservation, book in result.all():
            position = None
            if reservation.status in ACTIVE_RESERVATION_STATUSES:
                queue = await self._active_reservations(book.id)
                position = next(i for i, r in enumerate(queue, start=1) if r.id == reservation.id)
            items.append(serialize_reservation(reservation, book, position))
        return items

    # =====================================================
    # LOANS
    # =====================================================

    async def _student_loans(self, student: Student):
        result = await self.db.execute(
            select(BookLoan, Book)
            .join(Book, Book.id == BookLoan.book_id)
            .where(BookLoan.student_id == student.id)
            .order_by(BookLoan.borrowed_at.desc())
        )
        return result.all()

    async def get_loans(self, student: Student) -> Dict[str, Any]:
        now = datetime.utcnow()
        current, overdue, history = [], [], []
        for loan, book in await self._student_loans(student):
            data = serialize_loan(loan, book, now)
            if loan.status != LoanStatus.ACTIVE:
                history.append(data)
            elif data["is_overdue"]:
                overdue.append(data)
            else:
                current.append(data)

        return {
            "current": current,
            "overdue": overdue,
            "history": history,
            "statistics": {
                "total_borrowed": len(current) + len(overdue) + len(history),
                "currently_borrowed": len(current) + len(overdue),
                "overdue_count": len(overdue),
                "accrued_fines": round(sum(item["accrued_fine"] for item in overdue), 2),
                "max_active_loans": settings.LIBRARY_MAX_ACTIVE_LOANS,
            },
        }

    async def renew_loan(self, student: Student, loan_id: str) -> BookLoan:
        loan = await self.db.get(BookLoan, loan_id)
        if not loan or loan.student_id != student.id or loan.status != LoanStatus.ACTIVE:
            raise ResourceNotFoundError("Loan", loan_id)

        if is_overdue(loan):
            raise LibraryRuleError("Overdue loans cannot be renewed", rule="overdue")
        if loan.renewal_count >= settings.LIBRARY_MAX_RENEWALS:
            raise LibraryRuleError(
                f"Maximum of {settings.LIBRARY_MAX_RENEWALS} renewals reached", rule="max_renewals"
            )
        if any(r.student_id != student.id for r in await self._active_reservations(loan.book_id)):
            raise LibraryRuleError("Another student has reserved this book", rule="reserved")

        loan.due_date = loan.due_date + timedelta(days=settings.LIBRARY_LOAN_DAYS)
        loan.renewal_count += 1

        await log_activity(
            self.db, student.id, ActivityType.LIBRARY,
            "Renewed library loan",
            resource_type="book_loan", resource_id=loan.id,
            details={"renewal_count": loan.renewal_count},
        )
        await self.db.commit()
        return loan

    async def get_reading_history(self, student: Student) -> Dict[str, Any]:
        rows = [(loan, book) for loan, book in await self._student_loans(student) if loan.status == LoanStatus.RETURNED]
        categories = Counter(book.category for _, book in rows)
        return {
            "books": [
                {
                    "book_id": book.id,
                    "title": book.title,
                    "author": book.author,
                    "category": book.category,
                    "borrowed_at": loan.borrowed_at.isoformat(),
                    "returned_at": loan.returned_at.isoformat() if loan.returned_at else None,
                }
                for loan, book in rows
            ],
            "total_books_read": len(rows),
            "favorite_categories": [category for category, _ in categories.most_common(3)],
        }

    # =====================================================
    # FINES
    # =====================================================

    async def get_fines(self, student: Student) -> Dict[str, Any]:
        result = await self.db.execute(
            select(LibraryFine).where(LibraryFine.student_id == student.id).order_by(LibraryFine.created_at.desc())
        )
        fines = list(result.scalars().all())

        now = datetime.utcnow()
        accruing = [
            serialize_loan(loan, book, now)
            for loan, book in await self._student_loans(student)
            if is_overdue(loan, now)
        ]
        unpaid = sum(f.amount for f in fines if f.status == FineStatus.UNPAID)
        return {
            "fines": [serialize_fine(f) for f in fines],
            "accruing": accruing,
            "total_unpaid": round(unpaid, 2),
            "total_accruing": round(sum(item["accrued_fine"] for item in accruing), 2),
            "fine_per_day": settings.LIBRARY_FINE_PER_DAY,
        }

    async def pay_fine(self, student: Student, fine_id: str) -> LibraryFine:
        fine = await self.db.get(LibraryFine, fine_id)
        if not fine or fine.student_id != student.id:
            raise ResourceNotFoundError("Fine", fine_id)
        if fine.status != FineStatus.UNPAID:
            raise ConflictError(f"Fine is already {fine.status.value}")

        fine.status = FineStatus.PAID
        fine.paid_at = datetime.utcnow()
        await log_activity(
            self.db, student.id, ActivityType.LIBRARY,
            f"Paid library fine of {fine.amount:.2f}",
            resource_type="library_fine", resource_id=fine.id,
        )
        await self.db.commit()
        return fine

    # =====================================================
    # LIBRARIAN
    # =====================================================

    async def add_book(self, school_id: str, data: Dict[str, Any]) -> Book:
        book = Book(school_id=school_id, available_copies=data.get("total_copies", 1), **data)
        self.db.add(book)
        await self.db.commit()
        return book

    async def issue_loan(self, school_id: str, book_id: str, student_id: str, issued_by: str) -> dict:
        student = await self.db.get(Student, student_id)
        if not student or student.school_id != school_id:
            raise StudentNotFoundError(student_id)
        book = await self.get_book(school_id, book_id)

        if book.available_copies < 1:
            raise LibraryRuleError("No copies of this book are available", rule="unavailable")

        now = datetime.utcnow()
        queue = await self._active_reservations(book.id)
        held_for_others = sum(
            1 for r in queue
            if r.status == ReservationStatus.READY
            and r.student_id != student.id
            and (r.expires_at is None or r.expires_at > now)
        )
        if book.available_copies <= held_for_others:
            raise LibraryRuleError("Every available copy is on hold for another student", rule="reserved")

        active = (await self.db.execute(
            select(func.count(BookLoan.id)).where(
                BookLoan.student_id == student.id,
                BookLoan.status == LoanStatus.ACTIVE,
            )
        )).scalar() or 0
        if active >= settings.LIBRARY_MAX_ACTIVE_LOANS:
            raise LibraryRuleError(
                f"Student already has {settings.LIBRARY_MAX_ACTIVE_LOANS} active loans", rule="max_loans"
            )

        loan = BookLoan(
            school_id=school_id,
            book_id=book.id,
            student_id=student.id,
            issued_by=issued_by,
            borrowed_at=now,
            due_date=now + timedelta(days=settings.LIBRARY_LOAN_DAYS),
            status=LoanStatus.ACTIVE,
        )
        book.available_copies -= 1
        self.db.add(loan)

        for reservation in queue:
            if reservation.student_id == student.id:
                reservation.status = ReservationStatus.FULFILLED

        await self.db.commit()
        logger.info(f"Issued book {book.id} to student {student.id}")
        return serialize_loan(loan, book, now)

    async def return_loan(self, school_id: str, loan_id: str) -> Dict[str, Any]:
        result = await self.db.execute(
            select(BookLoan).where(BookLoan.id == loan_id, BookLoan.school_id == school_id)
        )
        loan = result.scalar_one_or_none()
        if not loan:
            raise ResourceNotFoundError("Loan", loan_id)
        if loan.status != LoanStatus.ACTIVE:
            raise ConflictError("Loan is already closed")

        now = datetime.utcnow()
        loan.returned_at = now
        loan.status = LoanStatus.RETURNED
        book = await self.db.get(Book, loan.book_id)
        book.available_copies = min(book.total_copies, book.available_copies + 1)

        fine = None
        late_days = days_overdue(loan.due_date, now)
        if late_days > 0:
            fine = LibraryFine(
                student_id=loan.student_id,
                loan_id=loan.id,
                amount=calculate_fine(loan.due_date, now),
                days_overdue=late_days,
            )
            self.db.add(fine)

        # The next student in the queue gets the returned copy on hold
        waiting = [r for r in await self._active_reservations(book.id) if r.status == ReservationStatus.WAITING]
        if waiting:
            promoted = waiting[0]
            promoted.status = ReservationStatus.READY
            promoted.expires_at = now + timedelta(days=settings.LIBRARY_RESERVATION_HOLD_DAYS)
            waiting_student = await self.db.get(Student, promoted.student_id)
            if waiting_student and waiting_student.user_id:
                NotificationService(self.db).notify(
                    waiting_student.user_id,
                    "Reserved book available",
                    f"'{book.title}' is ready for pickup",
                    category="library",
                    school_id=school_id,
                    data={"book_id": book.id, "reservation_id": promoted.id},
                )

        await self.db.commit()
        return {
            "loan_id": loan.id,
            "returned_at": now.isoformat(),
            "days_overdue": late_days,
            "fine": serialize_fine(fine) if fine else None,
        }


def get_library_service(db: AsyncSession) -> LibraryService:
    return LibraryService(db)
