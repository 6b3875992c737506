"""
Library Schemas
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from app.models.library import BookFormat


class ReservationCreate(BaseModel):
    notes: Optional[str] = Field(None, max_length=500)


class BookCreate(BaseModel):
    isbn: Optional[str] = Field(None, max_length=20)
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    publisher: Optional[str] = Field(None, max_length=255)
    publication_year: Optional[int] = Field(None, ge=1000, le=3000)
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    format: BookFormat = BookFormat.PHYSICAL
    digital_url: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=50)
    tags: List[str] = Field(default_factory=list)
    total_copies: int = Field(default=1, ge=1)


class LoanIssue(BaseModel):
    book_id: str
    student_id: str
