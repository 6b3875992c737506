"""
Emergency Schemas
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from app.models.emergency import EmergencyType, EmergencySeverity, EmergencyStatus, SafetyStatus


class EmergencyReportCreate(BaseModel):
    emergency_type: EmergencyType
    severity: EmergencySeverity = EmergencySeverity.MEDIUM
    description: str = Field(..., min_length=5, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    contact_number: Optional[str] = Field(None, max_length=20)
    witnesses: List[str] = Field(default_factory=list)
    injured_parties: List[str] = Field(default_factory=list)
    immediate_actions: Optional[str] = Field(None, max_length=2000)
    attachments: List[str] = Field(default_factory=list)


class ChildEmergencyReportCreate(EmergencyReportCreate):
    """Parent reporting on behalf of a linked child"""
    student_id: str


class SafetyCheckCreate(BaseModel):
    status: SafetyStatus
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=2000)
    needs: List[str] = Field(default_factory=list)


class EmergencyStatusUpdate(BaseModel):
    status: EmergencyStatus
    note: Optional[str] = Field(None, max_length=1000)
