"""
Librarian endpoints: catalog additions, issuing and returning loans.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import get_staff_school_context
from app.schemas.library import BookCreate, LoanIssue
from app.services.library_service import LibraryService, serialize_book
from app.services.school_context_service import SchoolContext


router = APIRouter()


@router.post("/books", status_code=status.HTTP_201_CREATED)
async def add_book(
    data: BookCreate,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Add a book to the catalog"""
    book = await LibraryService(db).add_book(ctx.school_id, data.model_dump())
    return serialize_book(book)


@router.post("/loans", status_code=status.HTTP_201_CREATED)
async def issue_loan(
    data: LoanIssue,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Issue a copy to a student; copies on hold for other students are not lendable"""
    return await LibraryService(db).issue_loan(ctx.school_id, data.book_id, data.student_id, issued_by=ctx.user.id)


@router.post("/loans/{loan_id}/return")
async def return_loan(
    loan_id: str,
    ctx: SchoolContext = Depends(get_staff_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Check a loan back in; late returns record a fine"""
    return await LibraryService(db).return_loan(ctx.school_id, loan_id)
