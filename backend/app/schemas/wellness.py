"""
Wellness Schemas - daily check-ins, counseling and goals
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date

from app.models.emergency import EmergencyType, EmergencySeverity
from app.models.wellness import PhysicalActivity


class WellnessCheckinCreate(BaseModel):
    """Daily check-in; mood, stress and energy are 1-10"""
    mood: int = Field(..., ge=1, le=10)
    stress: int = Field(..., ge=1, le=10)
    energy: int = Field(..., ge=1, le=10)
    sleep_quality: Optional[int] = Field(None, ge=1, le=10)
    sleep_hours: Optional[float] = Field(None, ge=0, le=24)
    physical_activity: Optional[PhysicalActivity] = None
    notes: Optional[str] = Field(None, max_length=2000)
    triggers: List[str] = Field(default_factory=list)
    record_date: Optional[date] = None


class CounselingRequestCreate(BaseModel):
    topic: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    urgency: str = Field(default="normal", pattern=r'^(low|normal|high|urgent)$')
    preferred_times: List[str] = Field(default_factory=list)
    session_type: str = Field(default="in_person", pattern=r'^(in_person|virtual|phone)$')


class WellnessGoalCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    category: str = Field(..., pattern=r'^(sleep|stress|activity|mood|nutrition)$')
    target_value: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, max_length=30)
    target_date: Optional[date] = None


class WellnessGoalProgress(BaseModel):
    current_value: float = Field(..., ge=0)


class EmergencyAlertCreate(BaseModel):
    alert_type: EmergencyType = EmergencyType.MENTAL_HEALTH
    severity: EmergencySeverity = EmergencySeverity.HIGH
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=255)
