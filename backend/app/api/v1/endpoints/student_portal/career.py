"""
Student portal: career profile, assessments, goals, colleges and opportunities.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.models.student import Student
from app.modules.auth.dependencies import get_portal_student
from app.schemas.career import (
    CareerProfileUpdate,
    AssessmentSubmit,
    CareerGoalCreate,
    CareerGoalProgress,
    OpportunityApply,
    CareerCounselingCreate,
)
from app.services.career_service import (
    CareerService,
    serialize_application,
    serialize_attempt,
    serialize_career_goal,
    serialize_profile,
)
from app.services.wellness_service import serialize_counseling


router = APIRouter()


# ==================== Profile ====================

@router.get("/{student_id}/profile")
async def get_profile(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Career profile (created on first access)"""
    return serialize_profile(await CareerService(db).get_or_create_profile(student))


@router.put("/{student_id}/profile")
async def update_profile(
    data: CareerProfileUpdate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Update the career profile"""
    profile = await CareerService(db).update_profile(student, data.model_dump(exclude_unset=True))
    return serialize_profile(profile)


# ==================== Assessments ====================

@router.get("/{student_id}/assessments")
async def list_assessments(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Assessment catalog with the student's progress"""
    return await CareerService(db).list_assessments(student)


@router.post("/{student_id}/assessments/{assessment_id}/start", status_code=status.HTTP_201_CREATED)
async def start_assessment(
    assessment_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Start an assessment attempt"""
    return serialize_attempt(await CareerService(db).start_assessment(student, assessment_id))


@router.post("/{student_id}/assessments/{assessment_id}/submit")
async def submit_assessment(
    assessment_id: str,
    data: AssessmentSubmit,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Submit answers and score the assessment"""
    attempt = await CareerService(db).submit_assessment(
        student, assessment_id, [a.model_dump() for a in data.answers], data.time_spent
    )
    return serialize_attempt(attempt)


@router.get("/{student_id}/assessments/{assessment_id}/results")
async def get_assessment_results(
    assessment_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Latest completed attempt"""
    return serialize_attempt(await CareerService(db).get_assessment_results(student, assessment_id))


# ==================== Goals ====================

@router.get("/{student_id}/goals")
async def list_goals(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Career goals"""
    return [serialize_career_goal(g) for g in await CareerService(db).list_goals(student)]


@router.post("/{student_id}/goals", status_code=status.HTTP_201_CREATED)
async def create_goal(
    data: CareerGoalCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Create a career goal with milestones"""
    return serialize_career_goal(await CareerService(db).create_goal(student, data.model_dump()))


@router.put("/{student_id}/goals/{goal_id}/progress")
async def update_goal_progress(
    goal_id: str,
    data: CareerGoalProgress,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Update progress; 100 completes the goal"""
    goal = await CareerService(db).update_goal_progress(student, goal_id, data.progress, data.milestone_id)
    return serialize_career_goal(goal)


# ==================== Colleges ====================

@router.get("/{student_id}/colleges")
async def get_college_recommendations(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Colleges ranked by match with the profile"""
    return await CareerService(db).get_college_recommendations(student)


@router.get("/{student_id}/colleges/search")
async def search_colleges(
    name: Optional[str] = Query(None),
    program: Optional[str] = Query(None),
    college_type: Optional[str] = Query(None, alias="type"),
    max_tuition: Optional[float] = Query(None, ge=0),
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Search colleges"""
    return await CareerService(db).search_colleges(
        student, name=name, program=program, college_type=college_type, max_tuition=max_tuition
    )


@router.post("/{student_id}/colleges/{college_id}/favorites")
async def add_college_favorite(
    college_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Save a college to favorites"""
    return await CareerService(db).add_college_favorite(student, college_id)


# ==================== Opportunities ====================

@router.get("/{student_id}/opportunities")
async def get_opportunities(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Internships and programs with match score and application status"""
    return await CareerService(db).get_opportunities(student)


@router.post("/{student_id}/opportunities/{opportunity_id}/apply", status_code=status.HTTP_201_CREATED)
async def apply_for_opportunity(
    opportunity_id: str,
    data: OpportunityApply,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Apply for an opportunity"""
    application = await CareerService(db).apply_for_opportunity(student, opportunity_id, data.model_dump())
    return serialize_application(application)


# ==================== Counseling & Resources ====================

@router.get("/{student_id}/counseling")
async def list_counseling(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Career counseling appointments"""
    return [serialize_counseling(r) for r in await CareerService(db).list_counseling(student)]


@router.post("/{student_id}/counseling/appointment", status_code=status.HTTP_201_CREATED)
async def schedule_counseling(
    data: CareerCounselingCreate,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Request a career counseling appointment"""
    return serialize_counseling(await CareerService(db).schedule_counseling(student, data.model_dump()))


@router.get("/{student_id}/resources")
async def get_resources(
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Career guides and tools"""
    return CareerService(db).get_resources()


@router.post("/{student_id}/resources/{resource_id}/access")
async def track_resource_access(
    resource_id: str,
    student: Student = Depends(get_portal_student),
    db: AsyncSession = Depends(get_db)
):
    """Record that the student opened a resource"""
    return await CareerService(db).track_resource_access(student, resource_id)
