"""
Unit Tests for wellness check-in scoring, trends and alerts
"""
import pytest
from datetime import date
from types import SimpleNamespace

from app.models.wellness import MoodLevel, PhysicalActivity, WellnessStatus
from app.services.wellness_service import (
    activity_hours,
    calculate_streak,
    calculate_trends,
    generate_alerts,
    generate_recommendations,
    number_to_mood_level,
    overall_status,
    week_start,
)


def record(mood=MoodLevel.NEUTRAL, stress=5, energy=5, sleep=6, status=WellnessStatus.FAIR):
    return SimpleNamespace(
        mood_level=mood,
        stress_level=stress,
        energy_level=energy,
        sleep_quality=sleep,
        overall_status=status,
    )


class TestOverallStatus:
    @pytest.mark.parametrize("mood,stress,energy,expected", [
        (9, 2, 8, WellnessStatus.GOOD),
        (7, 4, 7, WellnessStatus.GOOD),
        (5, 5, 5, WellnessStatus.FAIR),
        (4, 7, 4, WellnessStatus.FAIR),
        (2, 10, 2, WellnessStatus.CONCERNING),
    ])
    def test_stress_is_inverted(self, mood, stress, energy, expected):
        assert overall_status(mood, stress, energy) == expected


class TestMoodMapping:
    @pytest.mark.parametrize("value,expected", [
        (10, MoodLevel.VERY_HAPPY),
        (9, MoodLevel.VERY_HAPPY),
        (7, MoodLevel.HAPPY),
        (5, MoodLevel.NEUTRAL),
        (3, MoodLevel.SAD),
        (1, MoodLevel.VERY_SAD),
    ])
    def test_number_to_mood_level(self, value, expected):
        assert number_to_mood_level(value) == expected

    def test_activity_hours(self):
        assert activity_hours(PhysicalActivity.INTENSE) == 2.0
        assert activity_hours(PhysicalActivity.MODERATE) == 1.0
        assert activity_hours(PhysicalActivity.LIGHT) == 0.5
        assert activity_hours(None) == 0.5


class TestStreakAndWeeks:
    def test_streak_stops_at_gap(self):
        today = date(2026, 10, 18)
        dates = [date(2026, 10, 18), date(2026, 10, 17), date(2026, 10, 16), date(2026, 10, 14)]

        assert calculate_streak(dates, today=today) == 3

    def test_no_checkin_today(self):
        assert calculate_streak([date(2026, 10, 17)], today=date(2026, 10, 18)) == 0

    def test_weeks_start_on_sunday(self):
        assert week_start(date(2026, 10, 18)) == date(2026, 10, 18)
        assert week_start(date(2026, 10, 21)) == date(2026, 10, 18)
        assert week_start(date(2026, 10, 24)) == date(2026, 10, 18)


class TestTrends:
    def test_stable_with_little_history(self):
        trends = calculate_trends([record() for _ in range(6)])

        assert set(trends.values()) == {"stable"}

    def test_week_over_week(self):
        recent = [record(mood=MoodLevel.VERY_HAPPY, stress=2, energy=5, sleep=6) for _ in range(7)]
        previous = [record(mood=MoodLevel.SAD, stress=8, energy=5, sleep=6) for _ in range(7)]

        trends = calculate_trends(recent + previous)

        assert trends == {"mood": "improving", "stress": "improving", "energy": "stable", "sleep": "stable"}


class TestRecommendationsAndAlerts:
    def test_default_recommendation(self):
        latest = record(stress=3, energy=7, sleep=8)

        assert generate_recommendations(latest, {"mood": "stable"}) == [
            "Keep up the good work with your wellness routine!"
        ]

    def test_high_stress_and_declining_mood(self):
        latest = record(stress=9, energy=3, sleep=4)

        recommendations = generate_recommendations(latest, {"mood": "declining"})

        assert len(recommendations) == 4

    def test_persistent_concern(self):
        concerning = [record(stress=9, status=WellnessStatus.CONCERNING) for _ in range(3)]

        types = [alert["type"] for alert in generate_alerts(concerning)]

        assert types == ["concerning_status", "persistent_concern", "high_stress"]

    def test_no_alerts_without_history(self):
        assert generate_alerts([]) == []
