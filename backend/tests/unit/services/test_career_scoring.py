"""
Unit Tests for career assessment scoring and match scores
"""
import pytest
from types import SimpleNamespace

from app.core.exceptions import ValidationError
from app.services.career_service import (
    college_match_score,
    number_to_skill_proficiency,
    opportunity_match_score,
    score_assessment,
    skill_proficiency_to_number,
)


class TestScoreAssessment:
    def test_strengths_and_development_areas(self):
        answers = [
            {"question_id": "q1", "score": 5, "category": "Analytical"},
            {"question_id": "q2", "score": 5, "category": "analytical"},
            {"question_id": "q3", "score": 4, "category": "creative"},
            {"question_id": "q4", "score": 3, "category": "social"},
            {"question_id": "q5", "score": 2, "category": "leadership"},
            {"question_id": "q6", "score": 1, "category": "conventional"},
        ]

        scored = score_assessment(answers)
        results = scored["results"]

        assert scored["score"] == 67
        assert results["personality_type"] == "Analytical Thinker"
        assert results["strengths"] == ["analytical", "creative", "social"]
        assert results["areas_for_development"] == ["conventional", "leadership"]
        assert results["category_scores"]["analytical"] == 5.0
        assert results["recommended_careers"] == [
            "Data Analyst", "Financial Analyst", "Software Developer", "Graphic Designer", "Product Designer",
        ]

    def test_uncategorised_answers(self):
        scored = score_assessment([{"question_id": "q1", "score": 5}])

        assert scored["score"] == 100
        assert scored["results"]["strengths"] == ["general"]
        assert scored["results"]["personality_type"] == "Balanced Explorer"

    def test_requires_answers(self):
        with pytest.raises(ValidationError):
            score_assessment([])


class TestSkillProficiency:
    def test_round_trip_levels(self):
        assert skill_proficiency_to_number("advanced") == 3
        assert skill_proficiency_to_number("unknown") == 1
        assert number_to_skill_proficiency(3.5) == "advanced"
        assert number_to_skill_proficiency(1.2) == "beginner"


class TestMatchScores:
    def test_college_match_uses_interests(self):
        profile = SimpleNamespace(career_interests=["Computer Science"], preferred_industries=[], skills=[])
        college = {"programs": ["Computer Science", "Engineering"]}

        assert college_match_score(college, profile) == 65
        assert college_match_score(college, None) == 50

    def test_opportunity_match_uses_skills_and_type(self):
        profile = SimpleNamespace(
            career_interests=["internship"],
            preferred_industries=[],
            skills=[{"skill_name": "Python", "proficiency": "advanced"}, {"skill_name": "SQL"}],
        )
        opportunity = {"type": "internship", "skills": ["python", "sql", "excel"]}

        assert opportunity_match_score(opportunity, profile) == 90
