"""
Student portal endpoints.

Every route takes the student id in the path; access is granted to the
student, their linked parents, and staff of the student's school.
"""
from fastapi import APIRouter

from app.api.v1.endpoints.student_portal import (
    academic,
    wellness,
    career,
    fees,
    library,
    transportation,
    emergency,
    self_service,
    dashboard,
)

portal_router = APIRouter(prefix="/student-portal")

portal_router.include_router(dashboard.router, prefix="/dashboard", tags=["Student Portal - Dashboard"])
portal_router.include_router(academic.router, prefix="/academic", tags=["Student Portal - Academic"])
portal_router.include_router(wellness.router, prefix="/wellness", tags=["Student Portal - Wellness"])
portal_router.include_router(career.router, prefix="/career", tags=["Student Portal - Career"])
portal_router.include_router(fees.router, prefix="/fees", tags=["Student Portal - Fees"])
portal_router.include_router(library.router, prefix="/library", tags=["Student Portal - Library"])
portal_router.include_router(transportation.router, prefix="/transportation", tags=["Student Portal - Transportation"])
portal_router.include_router(emergency.router, prefix="/emergency", tags=["Student Portal - Emergency"])
portal_router.include_router(self_service.router, prefix="/self-service", tags=["Student Portal - Self Service"])
