"""
Unit Tests for emergency routing and tracking numbers
"""
import re
import pytest

from app.models.emergency import EmergencySeverity, EmergencyStatus, EmergencyType
from app.services.emergency_service import generate_tracking_number, route_emergency, timeline_entry


class TestRouteEmergency:
    @pytest.mark.parametrize("emergency_type,department,contact", [
        (EmergencyType.MEDICAL, "Medical Services", "School Nurse"),
        (EmergencyType.MENTAL_HEALTH, "Medical Services", "School Nurse"),
        (EmergencyType.FIRE, "Safety & Security", "Safety Officer"),
        (EmergencyType.BULLYING, "Counseling Services", "School Counselor"),
        (EmergencyType.SECURITY, "Security Department", "Security Chief"),
        (EmergencyType.TRANSPORT, "Transportation", "Transport Coordinator"),
        (EmergencyType.OTHER, "Emergency Response Team", "Emergency Coordinator"),
    ])
    def test_department_by_type(self, emergency_type, department, contact):
        route = route_emergency(emergency_type, EmergencySeverity.MEDIUM)

        assert route["assigned_department"] == department
        assert route["primary_contact"] == contact

    @pytest.mark.parametrize("severity,priority,response_time", [
        (EmergencySeverity.CRITICAL, "immediate", "2-5 minutes"),
        (EmergencySeverity.HIGH, "urgent", "5-15 minutes"),
        (EmergencySeverity.MEDIUM, "high", "15-30 minutes"),
        (EmergencySeverity.LOW, "normal", "30-60 minutes"),
    ])
    def test_priority_by_severity(self, severity, priority, response_time):
        route = route_emergency(EmergencyType.ACCIDENT, severity)

        assert route["priority"] == priority
        assert route["estimated_response_time"] == response_time


class TestTracking:
    def test_tracking_number_format(self):
        assert re.fullmatch(r"TRK[A-Z0-9]{6}", generate_tracking_number())

    def test_timeline_entry(self):
        entry = timeline_entry(EmergencyStatus.ACKNOWLEDGED, note="Nurse on the way", by="user-1")

        assert entry["status"] == "acknowledged"
        assert entry["note"] == "Nurse on the way"
