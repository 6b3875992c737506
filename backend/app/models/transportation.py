"""
Transportation Models
- Bus routes with an ordered stop timetable
- Student route assignments
- Feedback on transport service
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, JSON, UniqueConstraint
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class TransportRoute(Base):
    __tablename__ = "transport_routes"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    route_number = Column(String(20), nullable=False)
    name = Column(String(200), nullable=False)
    vehicle_number = Column(String(30), nullable=True)
    vehicle_capacity = Column(Integer, default=40)
    driver_name = Column(String(200), nullable=True)
    driver_phone = Column(String(20), nullable=True)
    attendant_name = Column(String(200), nullable=True)
    attendant_phone = Column(String(20), nullable=True)
    # Ordered: [{name, pickup_time: "07:10", drop_time: "15:40", latitude, longitude}]
    stops = Column(JSON, default=list)
    operating_days = Column(JSON, default=lambda: ["monday", "tuesday", "wednesday", "thursday", "friday"])
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class StudentTransport(Base):
    """Student -> route/stop assignment (one active per student)"""
    __tablename__ = "student_transports"
    __table_args__ = (
        UniqueConstraint("student_id", name="uq_student_transport_student"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    route_id = Column(GUID, ForeignKey("transport_routes.id", ondelete="CASCADE"), nullable=False, index=True)
    stop_name = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class TransportFeedback(Base):
    __tablename__ = "transport_feedback"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    route_id = Column(GUID, ForeignKey("transport_routes.id", ondelete="CASCADE"), nullable=True)
    rating = Column(Integer, nullable=False)
    category = Column(String(50), default="general")  # punctuality, safety, driver, cleanliness, general
    comments = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
