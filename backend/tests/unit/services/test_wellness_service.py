"""
Unit Tests for WellnessService insights and weekly trends over stored check-ins
"""
import pytest
from datetime import date, datetime, timedelta

from app.core.config import settings
from app.models.wellness import WellnessRecord
from app.services.wellness_service import (
    STARTER_RECOMMENDATION,
    WellnessService,
    number_to_mood_level,
    overall_status,
)


async def add_checkins(db_session, student, days, mood=7, stress=3, energy=8, sleep=None):
    """One check-in per date, recorded at noon so newer dates sort first"""
    for day in days:
        db_session.add(WellnessRecord(
            school_id=student.school_id,
            student_id=student.id,
            record_date=day,
            mood_level=number_to_mood_level(mood),
            mood_score=mood,
            stress_level=stress,
            energy_level=energy,
            sleep_quality=sleep,
            overall_status=overall_status(mood, stress, energy),
            recorded_at=datetime.combine(day, datetime.min.time()) + timedelta(hours=12),
        ))
    await db_session.commit()


TODAY = date(2026, 3, 15)


class TestInsights:

    @pytest.mark.asyncio
    async def test_no_checkins(self, db_session, student):
        insights = await WellnessService(db_session).get_insights(student, today=TODAY)

        assert insights['current_status']['overall'] == 'unknown'
        assert insights['recommendations'] == [STARTER_RECOMMENDATION]
        assert insights['alerts'] == []
        assert insights['streak'] == 0

    @pytest.mark.asyncio
    async def test_improving_fortnight(self, db_session, student):
        await add_checkins(db_session, student, [TODAY - timedelta(days=n) for n in range(7, 14)], mood=3)
        await add_checkins(db_session, student, [TODAY - timedelta(days=n) for n in range(7)], mood=9)

        insights = await WellnessService(db_session).get_insights(student, today=TODAY)

        assert insights['current_status'] == {
            'overall': 'good',
            'mood': 'very happy',
            'stress': 'low',
            'energy': 'excellent',
        }
        assert insights['trends']['mood'] == 'improving'
        assert insights['trends']['stress'] == 'stable'
        assert insights['streak'] == 14
        assert insights['alerts'] == []
        assert insights['recommendations'] == ['Keep up the good work with your wellness routine!']

    @pytest.mark.asyncio
    async def test_streak_breaks_on_a_missed_day(self, db_session, student):
        await add_checkins(db_session, student, [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=3)])

        insights = await WellnessService(db_session).get_insights(student, today=TODAY)

        assert insights['streak'] == 2

    @pytest.mark.asyncio
    async def test_persistent_concern_raises_alerts(self, db_session, student):
        await add_checkins(
            db_session, student, [TODAY - timedelta(days=n) for n in range(3)], mood=1, stress=10, energy=1, sleep=3
        )

        insights = await WellnessService(db_session).get_insights(student, today=TODAY)

        assert insights['current_status']['overall'] == 'concerning'
        assert [a['type'] for a in insights['alerts']] == ['concerning_status', 'persistent_concern', 'high_stress']
        assert len(insights['recommendations']) == 3


class TestTrends:

    @pytest.mark.asyncio
    async def test_weekly_averages_start_on_sunday(self, db_session, student):
        # 2026-03-01 is a Sunday
        await add_checkins(db_session, student, [date(2026, 3, 1)], mood=9, stress=2, energy=8)
        await add_checkins(db_session, student, [date(2026, 3, 3)], mood=5, stress=6, energy=4)
        await add_checkins(db_session, student, [date(2026, 3, 9)], mood=3, stress=8, energy=3)

        trends = await WellnessService(db_session).get_trends(student)

        assert trends['weekly_trends'] == [
            {
                'week': '2026-03-01',
                'checkins': 2,
                'average_mood': 8.0,
                'average_stress': 4.0,
                'average_energy': 6.0,
                'average_sleep': None,
            },
            {
                'week': '2026-03-08',
                'checkins': 1,
                'average_mood': 4.0,
                'average_stress': 8.0,
                'average_energy': 3.0,
                'average_sleep': None,
            },
        ]
        assert trends['summary']['total_checkins'] == 3

    @pytest.mark.asyncio
    async def test_window_is_capped(self, db_session, student, monkeypatch):
        monkeypatch.setattr(settings, 'WELLNESS_TREND_MAX_RECORDS', 5)
        await add_checkins(db_session, student, [TODAY - timedelta(days=n) for n in range(8)])

        trends = await WellnessService(db_session).get_trends(student)

        assert trends['summary']['total_checkins'] == 5
        assert sum(week['checkins'] for week in trends['weekly_trends']) == 5
