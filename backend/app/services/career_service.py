"""
Career Planning Service Layer

Career profile, self-assessments, goals, college and opportunity matching.
Colleges, opportunities, assessments and resources are static catalogs kept
in this module; student choices are stored against their catalog ids.
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from app.core.logging_config import logger
from app.core.types import generate_uuid
from app.models.activity_tracking import ActivityType
from app.models.career import (
    AssessmentStatus,
    CareerAssessmentAttempt,
    CareerGoal,
    CareerGoalStatus,
    CareerProfile,
    CollegeFavorite,
    OpportunityApplication,
)
from app.models.student import Student
from app.models.wellness import CounselingCategory
from app.services.activity_service import log_activity
from app.services.wellness_service import get_wellness_service


# =====================================================
# CATALOGS
# =====================================================

ASSESSMENTS = [
    {
        "id": "assessment-001",
        "title": "Career Interest Assessment",
        "description": "Discover your career interests and personality type",
        "type": "interests",
        "estimated_time": 15,
        "questions_count": 60,
    },
    {
        "id": "assessment-002",
        "title": "Skills Assessment",
        "description": "Evaluate your current skills and areas for development",
        "type": "skills",
        "estimated_time": 20,
        "questions_count": 80,
    },
    {
        "id": "assessment-003",
        "title": "Work Values Assessment",
        "description": "Identify what matters most to you in a career",
        "type": "values",
        "estimated_time": 10,
        "questions_count": 40,
    },
    {
        "id": "assessment-004",
        "title": "Personality Assessment",
        "description": "Understand how you work, learn and interact with others",
        "type": "personality",
        "estimated_time": 12,
        "questions_count": 50,
    },
]

COLLEGES = [
    {
        "id": "college-001",
        "name": "State University",
        "location": "Local City, State",
        "type": "public",
        "ranking": 150,
        "tuition": {"in_state": 8000, "out_of_state": 25000, "average": 12000},
        "acceptance_rate": 75,
        "programs": ["Computer Science", "Engineering", "Business"],
        "size": "large",
        "website": "https://www.stateuniversity.edu",
    },
    {
        "id": "college-002",
        "name": "Liberal Arts College",
        "location": "Nearby City, State",
        "type": "private",
        "ranking": 80,
        "tuition": {"average": 45000},
        "acceptance_rate": 45,
        "programs": ["Psychology", "English", "Biology"],
        "size": "medium",
        "website": "https://www.liberalartscollege.edu",
    },
    {
        "id": "college-003",
        "name": "Institute of Technology",
        "location": "Capital City, State",
        "type": "private",
        "ranking": 25,
        "tuition": {"average": 52000},
        "acceptance_rate": 12,
        "programs": ["Engineering", "Computer Science", "Mathematics", "Physics"],
        "size": "medium",
        "website": "https://www.instituteoftechnology.edu",
    },
]

OPPORTUNITIES = [
    {
        "id": "opportunity-001",
        "title": "Software Development Intern",
        "company": "Tech Startup Inc.",
        "type": "internship",
        "location": "Remote",
        "description": "Work on real projects with experienced developers",
        "requirements": ["Basic programming knowledge", "Enrolled in CS program"],
        "skills": ["JavaScript", "Python", "Git"],
        "application_deadline": "2027-01-15",
        "compensation": "$20/hour",
        "duration": "3 months",
    },
    {
        "id": "opportunity-002",
        "title": "Research Assistant",
        "company": "University Lab",
        "type": "research",
        "location": "On-campus",
        "description": "Assist in ongoing research projects",
        "requirements": ["Strong academic record", "Relevant coursework"],
        "skills": ["Data Analysis", "Research Methods"],
        "application_deadline": "2027-02-01",
        "compensation": "$15/hour",
        "duration": "6 months",
    },
]

CAREER_RESOURCES = [
    {
        "id": "resource-001",
        "title": "Resume Writing Guide",
        "type": "guide",
        "category": "job_search",
        "description": "Complete guide to writing effective resumes",
        "url": "/resources/resume-guide",
        "difficulty": "beginner",
        "estimated_time": 30,
    },
    {
        "id": "resource-002",
        "title": "Interview Preparation",
        "type": "video_course",
        "category": "job_search",
        "description": "Master common interview questions and techniques",
        "url": "/resources/interview-prep",
        "difficulty": "intermediate",
        "estimated_time": 120,
    },
    {
        "id": "resource-003",
        "title": "Career Exploration Quiz",
        "type": "interactive",
        "category": "self_assessment",
        "description": "Discover career paths that match your interests",
        "url": "/resources/career-quiz",
        "difficulty": "beginner",
        "estimated_time": 15,
    },
]

CATEGORY_CAREERS = {
    "investigative": ["Research Scientist", "Data Analyst", "Software Developer"],
    "analytical": ["Data Analyst", "Financial Analyst", "Software Developer"],
    "technical": ["Software Developer", "Mechanical Engineer", "Network Administrator"],
    "realistic": ["Civil Engineer", "Electrician", "Pilot"],
    "artistic": ["Graphic Designer", "Writer", "Architect"],
    "creative": ["Graphic Designer", "Product Designer", "Marketing Specialist"],
    "social": ["Teacher", "Counselor", "Nurse"],
    "communication": ["Journalist", "Public Relations Specialist", "Teacher"],
    "enterprising": ["Entrepreneur", "Sales Manager", "Lawyer"],
    "leadership": ["Project Manager", "Entrepreneur", "School Principal"],
    "conventional": ["Accountant", "Auditor", "Operations Manager"],
}

PERSONALITY_TYPES = {
    "investigative": "Analytical Thinker",
    "analytical": "Analytical Thinker",
    "technical": "Practical Problem Solver",
    "realistic": "Practical Problem Solver",
    "artistic": "Creative Explorer",
    "creative": "Creative Explorer",
    "social": "Supportive Helper",
    "communication": "Supportive Helper",
    "enterprising": "Persuasive Leader",
    "leadership": "Persuasive Leader",
    "conventional": "Organized Planner",
}

PROFILE_SECTIONS = (
    "career_interests",
    "preferred_industries",
    "work_values",
    "skills",
    "long_term_goal",
    "short_term_goals",
    "assessment_results",
)

SKILL_LEVELS = {"beginner": 1, "intermediate": 2, "advanced": 3, "expert": 4}

MAX_ANSWER_SCORE = 5
STRENGTH_COUNT = 3
DEVELOPMENT_COUNT = 2


# =====================================================
# CALCULATIONS
# =====================================================

def skill_proficiency_to_number(proficiency: str) -> int:
    return SKILL_LEVELS.get(proficiency, 1)


def number_to_skill_proficiency(value: float) -> str:
    if value >= 4:
        return "expert"
    if value >= 3:
        return "advanced"
    if value >= 2:
        return "intermediate"
    return "beginner"


def profile_completion(profile: CareerProfile) -> int:
    filled = sum(1 for section in PROFILE_SECTIONS if getattr(profile, section))
    return round(filled / len(PROFILE_SECTIONS) * 100)


def score_assessment(answers: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Score a submitted assessment on a 5-point scale.

    Category averages rank the strengths (top) and development areas
    (bottom); recommended careers come from the strongest categories.
    """
    if not answers:
        raise ValidationError("At least one answer is required", field="answers")

    total = sum(answer["score"] for answer in answers)
    score = round(total / (len(answers) * MAX_ANSWER_SCORE) * 100)

    by_category: Dict[str, List[float]] = defaultdict(list)
    for answer in answers:
        by_category[(answer.get("category") or "general").lower()].append(answer["score"])

    averages = {cat: round(sum(values) / len(values), 2) for cat, values in by_category.items()}
    ranked = sorted(averages, key=lambda cat: (-averages[cat], cat))

    strengths = ranked[:STRENGTH_COUNT]
    development = [cat for cat in reversed(ranked) if cat not in strengths][:DEVELOPMENT_COUNT]

    careers: List[str] = []
    for category in strengths:
        for career in CATEGORY_CAREERS.get(category, []):
            if career not in careers:
                careers.append(career)

    return {
        "score": score,
        "results": {
            "personality_type": PERSONALITY_TYPES.get(ranked[0], "Balanced Explorer"),
            "category_scores": averages,
            "strengths": strengths,
            "areas_for_development": development,
            "recommended_careers": careers[:5],
        },
    }


def _interest_keywords(profile: Optional[CareerProfile]) -> set:
    if not profile:
        return set()
    words = list(profile.career_interests or []) + list(profile.preferred_industries or [])
    return {word.lower() for word in words}


def _skill_names(profile: Optional[CareerProfile]) -> set:
    if not profile:
        return set()
    names = set()
    for skill in profile.skills or []:
        name = skill.get("skill_name") if isinstance(skill, dict) else skill
        if name:
            names.add(str(name).lower())
    return names


def college_match_score(college: Dict[str, Any], profile: Optional[CareerProfile]) -> int:
    keywords = _interest_keywords(profile)
    overlap = sum(1 for program in college["programs"] if program.lower() in keywords)
    return min(100, 50 + overlap * 15)


def opportunity_match_score(opportunity: Dict[str, Any], profile: Optional[CareerProfile]) -> int:
    skills = _skill_names(profile)
    overlap = sum(1 for skill in opportunity["skills"] if skill.lower() in skills)
    bonus = 10 if opportunity["type"] in _interest_keywords(profile) else 0
    return min(100, 50 + overlap * 15 + bonus)


def _catalog_item(catalog: List[dict], item_id: str, resource_type: str) -> dict:
    for item in catalog:
        if item["id"] == item_id:
            return item
    raise ResourceNotFoundError(resource_type, item_id)


def serialize_profile(profile: CareerProfile) -> dict:
    return {
        "id": profile.id,
        "student_id": profile.student_id,
        "academic_year": profile.academic_year,
        "career_interests": profile.career_interests or [],
        "preferred_industries": profile.preferred_industries or [],
        "work_values": profile.work_values or [],
        "skills": profile.skills or [],
        "long_term_goal": profile.long_term_goal,
        "short_term_goals": profile.short_term_goals or [],
        "future_plans": profile.future_plans or {},
        "assessment_results": profile.assessment_results or {},
        "completion_percentage": profile.completion_percentage,
        "updated_at": profile.updated_at.isoformat() if profile.updated_at else None,
    }


def serialize_career_goal(goal: CareerGoal) -> dict:
    return {
        "id": goal.id,
        "title": goal.title,
        "description": goal.description,
        "category": goal.category,
        "priority": goal.priority,
        "target_date": goal.target_date.isoformat() if goal.target_date else None,
        "progress": goal.progress,
        "status": goal.status.value,
        "milestones": goal.milestones or [],
    }


def serialize_attempt(attempt: CareerAssessmentAttempt) -> dict:
    return {
        "id": attempt.id,
        "assessment_id": attempt.assessment_id,
        "status": attempt.status.value,
        "score": attempt.score,
        "results": attempt.results,
        "started_at": attempt.started_at.isoformat() if attempt.started_at else None,
        "completed_at": attempt.completed_at.isoformat() if attempt.completed_at else None,
    }


def serialize_application(application: OpportunityApplication) -> dict:
    return {
        "id": application.id,
        "opportunity_id": application.opportunity_id,
        "status": application.status.value,
        "applied_at": application.applied_at.isoformat() if application.applied_at else None,
    }


# =====================================================
# SERVICE
# =====================================================

class CareerService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_profile(self, student: Student) -> Optional[CareerProfile]:
        result = await self.db.execute(select(CareerProfile).where(CareerProfile.student_id == student.id))
        return result.scalar_one_or_none()

    async def get_or_create_profile(self, student: Student) -> CareerProfile:
        profile = await self._find_profile(student)
        if profile:
            return profile
        profile = CareerProfile(
            student_id=student.id,
            academic_year=settings.CURRENT_ACADEMIC_YEAR,
            career_interests=[],
            preferred_industries=[],
            work_values=[],
            skills=[],
            short_term_goals=[],
            future_plans={},
            assessment_results={},
            completion_percentage=0,
        )
        self.db.add(profile)
        await self.db.commit()
        return profile

    async def update_profile(self, student: Student, data: Dict[str, Any]) -> CareerProfile:
        profile = await self.get_or_create_profile(student)
        for key, value in data.items():
            if value is not None:
                setattr(profile, key, value)
        profile.completion_percentage = profile_completion(profile)

        await log_activity(
            self.db, student.id, ActivityType.CAREER_PROFILE,
            "Updated career profile",
            resource_type="career_profile", resource_id=profile.id,
            details={"updated_fields": sorted(k for k, v in data.items() if v is not None)},
        )
        await self.db.commit()
        return profile

    # ---------------- assessments ----------------

    async def _attempts(self, student: Student, assessment_id: Optional[str] = None) -> List[CareerAssessmentAttempt]:
        query = select(CareerAssessmentAttempt).where(CareerAssessmentAttempt.student_id == student.id)
        if assessment_id:
            query = query.where(CareerAssessmentAttempt.assessment_id == assessment_id)
        result = await self.db.execute(query.order_by(CareerAssessmentAttempt.started_at.desc()))
        return list(result.scalars().all())

    async def list_assessments(self, student: Student) -> List[dict]:
        latest: Dict[str, CareerAssessmentAttempt] = {}
        for attempt in await self._attempts(student):
            latest.setdefault(attempt.assessment_id, attempt)

        items = []
        for assessment in ASSESSMENTS:
            attempt = latest.get(assessment["id"])
            items.append({
                **assessment,
                "status": attempt.status.value if attempt else AssessmentStatus.NOT_STARTED.value,
                "last_score": attempt.score if attempt else None,
            })
        return items

    async def start_assessment(self, student: Student, assessment_id: str) -> CareerAssessmentAttempt:
        assessment = _catalog_item(ASSESSMENTS, assessment_id, "Assessment")
        attempt = CareerAssessmentAttempt(
            student_id=student.id,
            assessment_id=assessment["id"],
            status=AssessmentStatus.IN_PROGRESS,
            answers=[],
            started_at=datetime.utcnow(),
        )
        self.db.add(attempt)
        await self.db.flush()

        await log_activity(
            self.db, student.id, ActivityType.CAREER_ASSESSMENT,
            f"Started {assessment['title']}",
            resource_type="assessment", resource_id=assessment["id"],
        )
        await self.db.commit()
        return attempt

    async def submit_assessment(
        self, student: Student, assessment_id: str, answers: List[Dict[str, Any]],
        time_spent: Optional[int] = None,
    ) -> CareerAssessmentAttempt:
        assessment = _catalog_item(ASSESSMENTS, assessment_id, "Assessment")
        scored = score_assessment(answers)
        now = datetime.utcnow()

        in_progress = [a for a in await self._attempts(student, assessment_id) if a.status == AssessmentStatus.IN_PROGRESS]
        attempt = in_progress[0] if in_progress else None
        if not attempt:
            attempt = CareerAssessmentAttempt(student_id=student.id, assessment_id=assessment_id, started_at=now)
            self.db.add(attempt)

        attempt.answers = answers
        attempt.score = scored["score"]
        attempt.results = scored["results"]
        attempt.status = AssessmentStatus.COMPLETED
        attempt.completed_at = now

        profile = await self.get_or_create_profile(student)
        results = dict(profile.assessment_results or {})
        results[assessment_id] = {
            "assessment_type": assessment["type"],
            "score": scored["score"],
            "completed_at": now.isoformat(),
            **scored["results"],
        }
        profile.assessment_results = results
        profile.completion_percentage = profile_completion(profile)

        await log_activity(
            self.db, student.id, ActivityType.CAREER_ASSESSMENT,
            f"Completed {assessment['title']}",
            resource_type="assessment", resource_id=assessment_id,
            details={"score": scored["score"], "time_spent": time_spent},
        )
        await self.db.commit()

        logger.info(f"Student {student.id} completed {assessment_id} with score {scored['score']}")
        return attempt

    async def get_assessment_results(self, student: Student, assessment_id: str) -> CareerAssessmentAttempt:
        _catalog_item(ASSESSMENTS, assessment_id, "Assessment")
        for attempt in await self._attempts(student, assessment_id):
            if attempt.status == AssessmentStatus.COMPLETED:
                return attempt
        raise ResourceNotFoundError("Assessment results", assessment_id)

    # ---------------- goals ----------------

    async def list_goals(self, student: Student) -> List[CareerGoal]:
        result = await self.db.execute(
            select(CareerGoal).where(CareerGoal.student_id == student.id).order_by(CareerGoal.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_goal(self, student: Student, data: Dict[str, Any]) -> CareerGoal:
        milestones = [
            {
                "id": generate_uuid(),
                "title": m["title"],
                "due_date": m["due_date"].isoformat() if m.get("due_date") else None,
                "completed": False,
                "completed_at": None,
            }
            for m in data.pop("milestones", None) or []
        ]
        goal = CareerGoal(student_id=student.id, milestones=milestones, **data)
        self.db.add(goal)
        await self.db.flush()

        await log_activity(
            self.db, student.id, ActivityType.CAREER_GOAL,
            f"Created career goal: {goal.title}",
            resource_type="career_goal", resource_id=goal.id,
        )
        await self.db.commit()
        return goal

    async def update_goal_progress(
        self, student: Student, goal_id: str, progress: int, milestone_id: Optional[str] = None
    ) -> CareerGoal:
        goal = await self.db.get(CareerGoal, goal_id)
        if not goal or goal.student_id != student.id:
            raise ResourceNotFoundError("Career goal", goal_id)

        if milestone_id:
            milestones = [dict(m) for m in goal.milestones or []]
            target = next((m for m in milestones if m["id"] == milestone_id), None)
            if not target:
                raise ResourceNotFoundError("Milestone", milestone_id)
            target["completed"] = not target["completed"]
            target["completed_at"] = datetime.utcnow().isoformat() if target["completed"] else None
            goal.milestones = milestones

        goal.progress = progress
        if progress >= 100:
            goal.status = CareerGoalStatus.COMPLETED
        elif goal.status == CareerGoalStatus.COMPLETED:
            goal.status = CareerGoalStatus.ACTIVE
        await self.db.commit()
        return goal

    # ---------------- colleges ----------------

    async def _favorite_ids(self, student: Student) -> set:
        result = await self.db.execute(
            select(CollegeFavorite.college_id).where(CollegeFavorite.student_id == student.id)
        )
        return {row[0] for row in result.all()}

    async def _with_college_match(self, student: Student, colleges: List[dict]) -> List[dict]:
        profile = await self._find_profile(student)
        favorites = await self._favorite_ids(student)
        items = [
            {**college, "match_score": college_match_score(college, profile), "is_favorite": college["id"] in favorites}
            for college in colleges
        ]
        return sorted(items, key=lambda c: -c["match_score"])

    async def get_college_recommendations(self, student: Student) -> List[dict]:
        return await self._with_college_match(student, COLLEGES)

    async def search_colleges(
        self,
        student: Student,
        name: Optional[str] = None,
        program: Optional[str] = None,
        college_type: Optional[str] = None,
        max_tuition: Optional[float] = None,
    ) -> List[dict]:
        matches = []
        for college in COLLEGES:
            if name and name.lower() not in college["name"].lower():
                continue
            if program and not any(program.lower() in p.lower() for p in college["programs"]):
                continue
            if college_type and college["type"] != college_type:
                continue
            if max_tuition is not None and college["tuition"]["average"] > max_tuition:
                continue
            matches.append(college)
        return await self._with_college_match(student, matches)

    async def add_college_favorite(self, student: Student, college_id: str) -> Dict[str, Any]:
        college = _catalog_item(COLLEGES, college_id, "College")
        if college_id not in await self._favorite_ids(student):
            self.db.add(CollegeFavorite(student_id=student.id, college_id=college_id))
            await log_activity(
                self.db, student.id, ActivityType.COLLEGE_FAVORITE,
                f"Added {college['name']} to favorites",
                resource_type="college", resource_id=college_id,
            )
            await self.db.commit()
        return {"college_id": college_id, "is_favorite": True}

    # ---------------- opportunities ----------------

    async def _applications(self, student: Student) -> Dict[str, OpportunityApplication]:
        result = await self.db.execute(
            select(OpportunityApplication).where(OpportunityApplication.student_id == student.id)
        )
        return {app.opportunity_id: app for app in result.scalars().all()}

    async def get_opportunities(self, student: Student) -> List[dict]:
        profile = await self._find_profile(student)
        applications = await self._applications(student)
        items = []
        for opportunity in OPPORTUNITIES:
            application = applications.get(opportunity["id"])
            items.append({
                **opportunity,
                "match_score": opportunity_match_score(opportunity, profile),
                "application_status": application.status.value if application else "not_applied",
            })
        return sorted(items, key=lambda o: -o["match_score"])

    async def apply_for_opportunity(
        self, student: Student, opportunity_id: str, data: Dict[str, Any]
    ) -> OpportunityApplication:
        opportunity = _catalog_item(OPPORTUNITIES, opportunity_id, "Opportunity")
        if opportunity_id in await self._applications(student):
            raise ConflictError("You have already applied for this opportunity")

        application = OpportunityApplication(
            student_id=student.id,
            opportunity_id=opportunity_id,
            cover_letter=data.get("cover_letter"),
            resume_url=data.get("resume_url"),
        )
        self.db.add(application)
        await self.db.flush()

        await log_activity(
            self.db, student.id, ActivityType.OPPORTUNITY_APPLICATION,
            f"Applied for {opportunity['title']}",
            resource_type="opportunity", resource_id=opportunity_id,
        )
        await self.db.commit()
        return application

    # ---------------- counseling & resources ----------------

    async def list_counseling(self, student: Student):
        return await get_wellness_service(self.db).list_counseling(student, CounselingCategory.CAREER)

    async def schedule_counseling(self, student: Student, data: Dict[str, Any]):
        return await get_wellness_service(self.db).request_counseling(student, data, CounselingCategory.CAREER)

    def get_resources(self) -> List[dict]:
        return CAREER_RESOURCES

    async def track_resource_access(self, student: Student, resource_id: str) -> Dict[str, Any]:
        resource = _catalog_item(CAREER_RESOURCES, resource_id, "Career resource")
        await log_activity(
            self.db, student.id, ActivityType.CAREER_RESOURCE,
            f"Accessed career resource: {resource['title']}",
            resource_type="career_resource", resource_id=resource_id,
        )
        await self.db.commit()
        return {"resource_id": resource_id, "url": resource["url"], "tracked": True}


def get_career_service(db: AsyncSession) -> CareerService:
    return CareerService(db)
