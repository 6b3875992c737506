from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth,
    schools,
    departments,
    staff,
    students,
    academic,
    fees,
    library,
    transportation,
    emergency,
    self_service,
    health,
)
from app.api.v1.endpoints.student_portal import portal_router
from app.api.v1.endpoints.mobile import mobile_router

api_router = APIRouter()

# Include deep health check endpoints (use /health/ready for load balancers)
api_router.include_router(health.router)

# Simple health check endpoint (backward compatible)
@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "academia-pro-backend"}


api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(schools.router, prefix="/schools", tags=["Schools"])
api_router.include_router(departments.router, prefix="/departments", tags=["Departments"])
api_router.include_router(staff.router, prefix="/staff", tags=["Staff"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])

# School administration of the student-facing domains
api_router.include_router(academic.router, prefix="/academic", tags=["Academic"])
api_router.include_router(fees.router, prefix="/fees", tags=["Fees"])
api_router.include_router(library.router, prefix="/library", tags=["Library"])
api_router.include_router(transportation.router, prefix="/transportation", tags=["Transportation"])
api_router.include_router(emergency.router, prefix="/emergency", tags=["Emergency"])
api_router.include_router(self_service.router, prefix="/self-service", tags=["Self Service"])

# Student portal (students and their linked parents)
api_router.include_router(portal_router)

# Mobile apps
api_router.include_router(mobile_router)
