"""
Mobile app endpoints.

Thin compositions of the portal and admin services shaped for the iOS and
Android apps.
"""
from fastapi import APIRouter

from app.api.v1.endpoints.mobile import auth, student, parent, staff, sync

mobile_router = APIRouter(prefix="/mobile")

mobile_router.include_router(auth.router, prefix="/auth", tags=["Mobile - Auth"])
mobile_router.include_router(student.router, prefix="/student", tags=["Mobile - Student"])
mobile_router.include_router(parent.router, prefix="/parent", tags=["Mobile - Parent"])
mobile_router.include_router(staff.router, prefix="/staff", tags=["Mobile - Staff"])
mobile_router.include_router(sync.router, prefix="/sync", tags=["Mobile - Sync"])
