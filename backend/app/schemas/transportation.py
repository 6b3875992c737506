"""
Transportation Schemas
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from app.models.emergency import EmergencySeverity

HHMM_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d$'
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class RouteStop(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    pickup_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    drop_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class RouteCreate(BaseModel):
    route_number: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=200)
    vehicle_number: Optional[str] = Field(None, max_length=30)
    vehicle_capacity: int = Field(default=40, ge=1)
    driver_name: Optional[str] = Field(None, max_length=200)
    driver_phone: Optional[str] = Field(None, max_length=20)
    attendant_name: Optional[str] = Field(None, max_length=200)
    attendant_phone: Optional[str] = Field(None, max_length=20)
    stops: List[RouteStop] = Field(..., min_length=1)
    operating_days: List[str] = Field(
        default_factory=lambda: ["monday", "tuesday", "wednesday", "thursday", "friday"]
    )

    @field_validator("operating_days")
    @classmethod
    def validate_days(cls, value: List[str]) -> List[str]:
        days = [day.lower() for day in value]
        unknown = [day for day in days if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown operating days: {', '.join(unknown)}")
        return days


class TransportAssignmentCreate(BaseModel):
    student_id: str
    route_id: str
    stop_name: str = Field(..., min_length=1, max_length=200)


class RouteNotification(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)


class TransportFeedbackCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    category: str = Field(default="general", pattern=r'^(punctuality|safety|driver|cleanliness|general)$')
    comments: Optional[str] = Field(None, max_length=2000)


class TransportEmergencyCreate(BaseModel):
    severity: EmergencySeverity = EmergencySeverity.HIGH
    description: str = Field(..., min_length=5, max_length=2000)
    location: Optional[str] = Field(None, max_length=255)
    contact_number: Optional[str] = Field(None, max_length=20)
