"""
Unit Tests for grading, GPA and attendance calculations
"""
import pytest
from types import SimpleNamespace

from app.services.academic_service import letter_grade, attendance_rate, summarize_subjects


def grade(subject, percentage, credits=1.0):
    return SimpleNamespace(subject=subject, percentage=percentage, credits=credits)


class TestLetterGrade:
    @pytest.mark.parametrize("percentage,expected", [
        (100, ("A", 4.0)),
        (90, ("A", 4.0)),
        (89.99, ("A-", 3.7)),
        (80, ("B+", 3.3)),
        (72, ("B-", 2.7)),
        (60, ("C", 2.0)),
        (50, ("D", 1.0)),
        (49.9, ("F", 0.0)),
        (0, ("F", 0.0)),
    ])
    def test_bands(self, percentage, expected):
        assert letter_grade(percentage) == expected


class TestAttendanceRate:
    def test_late_counts_as_attended(self):
        assert attendance_rate(present=8, late=1, total=10) == 90.0

    def test_no_records(self):
        assert attendance_rate(0, 0, 0) == 0.0

    def test_rounded_to_two_places(self):
        assert attendance_rate(present=2, late=0, total=3) == 66.67


class TestSummarizeSubjects:
    def test_credit_weighted_gpa(self):
        summary = summarize_subjects([
            grade("Mathematics", 95, credits=2.0),
            grade("Mathematics", 85, credits=2.0),
            grade("Science", 70),
        ])

        assert [s["subject"] for s in summary["subjects"]] == ["Mathematics", "Science"]
        maths = summary["subjects"][0]
        assert maths["average_percentage"] == 90.0
        assert maths["letter_grade"] == "A"
        assert maths["assessments"] == 2
        # (4.0 * 2 + 2.7 * 1) / 3
        assert summary["gpa"] == 3.57
        assert summary["overall_percentage"] == 80.0
        assert summary["overall_letter_grade"] == "B+"
        assert summary["grade_distribution"] == {"A": 1, "B-": 1}

    def test_empty(self):
        summary = summarize_subjects([])

        assert summary["subjects"] == []
        assert summary["gpa"] == 0.0
        assert summary["overall_letter_grade"] is None
