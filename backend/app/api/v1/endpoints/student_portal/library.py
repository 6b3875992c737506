"""
Student portal: catalog search, reservations, loans and fines.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.student import Student
from app.modules.auth.dependencies import get_portal_student
from app.schemas.library import ReservationCreate
from app.services.library_service import LibraryService, serialize_book, serialize_fine, serialize_loan


router = APIRouter()


@router.get("/{student_id}/books/search")
async def search_books(
    query: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None),
    available_only: bool = Query(False),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Search the school catalog by title, author or ISBN"""
    books = await LibraryService(db).search_books(
        student.school_id, query=query, category=category, available_only=available_only
    )
    return [serialize_book(b) for b in books]


@router.get("/{student_id}/books/{book_id}")
async def get_book(
    book_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Book details with reservation queue length"""
    return await LibraryService(db).get_book_details(student.school_id, book_id)


@router.post("/{student_id}/books/{book_id}/reserve", status_code=status.HTTP_201_CREATED)
async def reserve_book(
    book_id: str,
    data: Optional[ReservationCreate] = None,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Reserve a book"""
    return await LibraryService(db).reserve_book(student, book_id, data.notes if data else None)


@router.get("/{student_id}/reservations")
async def get_reservations(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Reservations with queue position"""
    return await LibraryService(db).get_reservations(student)


@router.get("/{student_id}/loans")
async def get_loans(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Current, overdue and past loans"""
    return await LibraryService(db).get_loans(student)


@router.post("/{student_id}/loans/{loan_id}/renew")
async def renew_loan(
    loan_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Extend a loan's due date"""
    return serialize_loan(await LibraryService(db).renew_loan(student, loan_id))


@router.get("/{student_id}/digital-resources")
async def get_digital_resources(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """E-books, audiobooks and other digital material"""
    return [serialize_book(b) for b in await LibraryService(db).get_digital_resources(student.school_id)]


@router.get("/{student_id}/fines")
async def get_fines(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Recorded fines and fines accruing on overdue loans"""
    return await LibraryService(db).get_fines(student)


@router.post("/{student_id}/fines/{fine_id}/pay")
async def pay_fine(
    fine_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Pay a fine"""
    return serialize_fine(await LibraryService(db).pay_fine(student, fine_id))


@router.get("/{student_id}/reading-history")
async def get_reading_history(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Returned books and favorite categories"""
    return await LibraryService(db).get_reading_history(student)
