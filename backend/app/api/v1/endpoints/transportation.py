"""
Transport administration: routes, student assignments and route notices.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import get_admin_school_context
from app.schemas.transportation import RouteCreate, TransportAssignmentCreate, RouteNotification
from app.services.school_context_service import SchoolContext
from app.services.transportation_service import TransportationService, serialize_route


router = APIRouter()


@router.post("/routes", status_code=status.HTTP_201_CREATED)
async def create_route(
    data: RouteCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Create a bus route with its stops"""
    route = await TransportationService(db).create_route(ctx.school_id, data.model_dump())
    return serialize_route(route)


@router.post("/assignments", status_code=status.HTTP_201_CREATED)
async def assign_student(
    data: TransportAssignmentCreate,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Assign a student to a route stop"""
    assignment = await TransportationService(db).assign_student(
        ctx.school_id, data.student_id, data.route_id, data.stop_name
    )
    return {
        "id": assignment.id,
        "student_id": assignment.student_id,
        "route_id": assignment.route_id,
        "stop_name": assignment.stop_name,
        "is_active": assignment.is_active,
    }


@router.post("/routes/{route_id}/notify")
async def notify_route(
    route_id: str,
    data: RouteNotification,
    ctx: SchoolContext = Depends(get_admin_school_context),
    db: AsyncSession = Depends(get_db)
):
    """Send a notice to every student on a route"""
    count = await TransportationService(db).notify_route(ctx.school_id, route_id, data.title, data.message)
    return {"route_id": route_id, "notified": count}
