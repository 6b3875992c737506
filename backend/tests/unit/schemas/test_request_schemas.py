"""
Unit Tests for request schemas
Tests for: field bounds, patterns and custom validators
"""
import pytest
from pydantic import ValidationError

from app.schemas.auth import UserLogin, PasswordChange
from app.schemas.career import AssessmentAnswer, SkillEntry
from app.schemas.department import DepartmentCreate
from app.schemas.school import SchoolCreate
from app.schemas.student import StudentCreate
from app.schemas.transportation import RouteCreate, TransportFeedbackCreate
from app.schemas.wellness import WellnessCheckinCreate


class TestAuthSchemas:
    """Test login and password schemas"""

    def test_login_invalid_email(self):
        with pytest.raises(ValidationError):
            UserLogin(email="not-an-email", password="secret")

    def test_new_password_min_length(self):
        with pytest.raises(ValidationError):
            PasswordChange(current_password="oldpassword", new_password="short")


class TestSchoolCreate:

    def test_valid_code(self):
        school = SchoolCreate(name="Greenwood High", code="GWH-001")
        assert school.code == "GWH-001"

    def test_code_rejects_spaces(self):
        with pytest.raises(ValidationError):
            SchoolCreate(name="Greenwood High", code="GWH 001")


class TestDepartmentCreate:

    def test_valid(self):
        department = DepartmentCreate(type="teaching", name="Science")
        assert department.type.value == "teaching"
        assert department.description is None

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            DepartmentCreate(type="cafeteria", name="Science")

    def test_name_too_short(self):
        with pytest.raises(ValidationError):
            DepartmentCreate(type="teaching", name="S")


class TestStudentCreate:

    def test_defaults(self):
        student = StudentCreate(
            admission_number="ADM100",
            first_name="Ishaan",
            last_name="Verma",
            grade_level="Grade 9"
        )
        assert student.medical_info == {}
        assert student.password is None

    def test_emergency_contact_requires_phone(self):
        with pytest.raises(ValidationError):
            StudentCreate(
                admission_number="ADM100",
                first_name="Ishaan",
                last_name="Verma",
                grade_level="Grade 9",
                emergency_contact={"name": "Ritu Verma"}
            )


class TestWellnessCheckin:

    @pytest.mark.parametrize("field", ["mood", "stress", "energy"])
    def test_scores_are_one_to_ten(self, field):
        data = {"mood": 5, "stress": 5, "energy": 5}
        data[field] = 0
        with pytest.raises(ValidationError):
            WellnessCheckinCreate(**data)

    def test_triggers_default_empty(self):
        checkin = WellnessCheckinCreate(mood=5, stress=5, energy=5)
        assert checkin.triggers == []


class TestRouteCreate:

    def test_operating_days_are_normalised(self):
        route = RouteCreate(
            route_number="R1",
            name="North Loop",
            stops=[{"name": "Main Gate", "pickup_time": "07:30"}],
            operating_days=["Monday", "FRIDAY"]
        )
        assert route.operating_days == ["monday", "friday"]

    def test_unknown_operating_day(self):
        with pytest.raises(ValidationError) as exc_info:
            RouteCreate(
                route_number="R1",
                name="North Loop",
                stops=[{"name": "Main Gate"}],
                operating_days=["funday"]
            )
        assert "Unknown operating days" in str(exc_info.value)

    def test_stop_time_format(self):
        with pytest.raises(ValidationError):
            RouteCreate(route_number="R1", name="North Loop", stops=[{"name": "Main Gate", "pickup_time": "7:30am"}])

    def test_requires_a_stop(self):
        with pytest.raises(ValidationError):
            RouteCreate(route_number="R1", name="North Loop", stops=[])

    def test_feedback_rating_bounds(self):
        with pytest.raises(ValidationError):
            TransportFeedbackCreate(rating=6)


class TestCareerSchemas:

    def test_skill_proficiency_names(self):
        assert SkillEntry(skill_name="Python", proficiency="expert").proficiency == "expert"
        with pytest.raises(ValidationError):
            SkillEntry(skill_name="Python", proficiency="guru")

    def test_answer_score_bounds(self):
        with pytest.raises(ValidationError):
            AssessmentAnswer(question_id="q1", score=6)
