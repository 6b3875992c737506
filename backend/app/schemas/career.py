"""
Career Schemas - career profile, assessments, goals and applications
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date


class SkillEntry(BaseModel):
    skill_name: str = Field(..., min_length=1, max_length=100)
    proficiency: str = Field(default="beginner", pattern=r'^(beginner|intermediate|advanced|expert)$')
    category: Optional[str] = None


class CareerProfileUpdate(BaseModel):
    career_interests: Optional[List[str]] = None
    preferred_industries: Optional[List[str]] = None
    work_values: Optional[List[str]] = None
    skills: Optional[List[SkillEntry]] = None
    long_term_goal: Optional[str] = None
    short_term_goals: Optional[List[str]] = None
    future_plans: Optional[Dict[str, Any]] = None


class AssessmentAnswer(BaseModel):
    question_id: str
    score: int = Field(..., ge=1, le=5)
    category: Optional[str] = None


class AssessmentSubmit(BaseModel):
    answers: List[AssessmentAnswer]
    time_spent: Optional[int] = Field(None, ge=0, description="Seconds spent on the assessment")


class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    due_date: Optional[date] = None


class CareerGoalCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    category: str = Field(default="education", pattern=r'^(education|skills|experience|networking|personal)$')
    priority: str = Field(default="medium", pattern=r'^(low|medium|high)$')
    target_date: Optional[date] = None
    milestones: List[MilestoneCreate] = Field(default_factory=list)


class CareerGoalProgress(BaseModel):
    progress: int = Field(..., ge=0, le=100)
    milestone_id: Optional[str] = None


class OpportunityApply(BaseModel):
    cover_letter: Optional[str] = Field(None, max_length=5000)
    resume_url: Optional[str] = Field(None, max_length=500)


class CareerCounselingCreate(BaseModel):
    topic: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    urgency: str = Field(default="normal", pattern=r'^(low|normal|high|urgent)$')
    preferred_times: List[str] = Field(default_factory=list)
    session_type: str = Field(default="in_person", pattern=r'^(in_person|virtual|phone)$')
