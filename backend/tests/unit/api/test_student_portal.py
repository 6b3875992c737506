"""
Unit Tests for Student Portal API Endpoints

Covers portal access rules plus the academic, self-service, library,
career, fee, transport, wellness and emergency flows a student or parent
drives through the portal.
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient

from app.models.library import BookLoan
from app.services.library_service import LibraryService


PORTAL = '/api/v1/student-portal'


class TestPortalAccess:

    @pytest.mark.asyncio
    async def test_student_reads_own_records(self, client: AsyncClient, student, student_headers):
        response = await client.get(f'{PORTAL}/academic/{student.id}/grades', headers=student_headers)

        assert response.status_code == 200
        assert response.json() == {'student_id': student.id, 'grades': []}

    @pytest.mark.asyncio
    async def test_student_cannot_read_classmate(self, client: AsyncClient, classmate, student_headers):
        response = await client.get(f'{PORTAL}/academic/{classmate.id}/grades', headers=student_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_other_school_student_is_not_found(self, client: AsyncClient, outside_student, student_headers):
        response = await client.get(f'{PORTAL}/academic/{outside_student.id}/grades', headers=student_headers)

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'STUDENT_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_linked_parent_has_access(self, client: AsyncClient, student, parent_headers):
        response = await client.get(f'{PORTAL}/academic/{student.id}/grades', headers=parent_headers)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_parent_cannot_read_unlinked_student(self, client: AsyncClient, classmate, parent_headers):
        response = await client.get(f'{PORTAL}/academic/{classmate.id}/grades', headers=parent_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_teacher_has_access(self, client: AsyncClient, classmate, teacher_headers):
        response = await client.get(f'{PORTAL}/academic/{classmate.id}/grades', headers=teacher_headers)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_student(self, client: AsyncClient, student_headers):
        response = await client.get(f'{PORTAL}/academic/missing-id/grades', headers=student_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient, student):
        response = await client.get(f'{PORTAL}/academic/{student.id}/grades')

        assert response.status_code in (401, 403)


class TestAcademicRecords:

    @pytest.mark.asyncio
    async def test_recorded_grade_shows_in_portal(self, client: AsyncClient, student, teacher_headers, student_headers):
        recorded = await client.post('/api/v1/academic/grades', headers=teacher_headers, json={
            'student_id': student.id,
            'subject': 'Mathematics',
            'score': 92,
            'max_score': 100,
            'term': 'Term 1'
        })
        assert recorded.status_code == 201
        assert recorded.json()['letter_grade'] == 'A'

        grades = await client.get(f'{PORTAL}/academic/{student.id}/grades', headers=student_headers)
        assert [g['subject'] for g in grades.json()['grades']] == ['Mathematics']

        summary = await client.get(f'{PORTAL}/academic/{student.id}/grades/summary', headers=student_headers)
        assert summary.status_code == 200
        data = summary.json()
        assert data['student_id'] == student.id
        assert data['gpa'] == 4.0
        assert data['subjects'][0]['letter_grade'] == 'A'

    @pytest.mark.asyncio
    async def test_score_above_maximum_is_rejected(self, client: AsyncClient, student, teacher_headers):
        response = await client.post('/api/v1/academic/grades', headers=teacher_headers, json={
            'student_id': student.id,
            'subject': 'Physics',
            'score': 60,
            'max_score': 50,
            'term': 'Term 1'
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_grade_for_other_school_student(self, client: AsyncClient, outside_student, teacher_headers):
        response = await client.post('/api/v1/academic/grades', headers=teacher_headers, json={
            'student_id': outside_student.id,
            'subject': 'Physics',
            'score': 40,
            'term': 'Term 1'
        })

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_students_cannot_record_grades(self, client: AsyncClient, student, student_headers):
        response = await client.post('/api/v1/academic/grades', headers=student_headers, json={
            'student_id': student.id,
            'subject': 'Mathematics',
            'score': 100,
            'term': 'Term 1'
        })

        assert response.status_code == 403


class TestWellness:

    @pytest.mark.asyncio
    async def test_concerning_checkin(self, client: AsyncClient, student, student_headers):
        response = await client.post(f'{PORTAL}/wellness/{student.id}/checkins', headers=student_headers, json={
            'mood': 2,
            'stress': 10,
            'energy': 2
        })

        assert response.status_code == 201
        data = response.json()
        assert data['overall_status'] == 'concerning'
        assert data['mood_level'] == 'very_sad'

    @pytest.mark.asyncio
    async def test_good_checkin_listed(self, client: AsyncClient, student, student_headers):
        await client.post(f'{PORTAL}/wellness/{student.id}/checkins', headers=student_headers, json={
            'mood': 9,
            'stress': 2,
            'energy': 8,
            'sleep_hours': 8
        })

        response = await client.get(f'{PORTAL}/wellness/{student.id}/checkins', headers=student_headers)

        assert response.status_code == 200
        checkins = response.json()
        assert len(checkins) == 1
        assert checkins[0]['overall_status'] == 'good'

    @pytest.mark.asyncio
    async def test_checkin_values_are_bounded(self, client: AsyncClient, student, student_headers):
        response = await client.post(f'{PORTAL}/wellness/{student.id}/checkins', headers=student_headers, json={
            'mood': 11,
            'stress': 5,
            'energy': 5
        })

        assert response.status_code == 422


class TestFees:

    async def _bill(self, client, admin_headers, student, amount, due_date):
        response = await client.post('/api/v1/fees/items', headers=admin_headers, json={
            'student_id': student.id,
            'category': 'tuition',
            'amount': amount,
            'due_date': due_date
        })
        assert response.status_code == 201
        return response.json()

    @pytest.mark.asyncio
    async def test_payment_is_applied_oldest_first(self, client: AsyncClient, student, admin_headers, student_headers):
        first = await self._bill(client, admin_headers, student, 1000, '2099-01-31')
        second = await self._bill(client, admin_headers, student, 500, '2099-02-28')

        response = await client.post(f'{PORTAL}/fees/{student.id}/pay', headers=student_headers, json={
            'amount': 1200
        })

        assert response.status_code == 201
        payment = response.json()
        assert payment['status'] == 'completed'
        assert payment['receipt_number'].startswith('RCP')
        assert payment['allocations'] == [
            {'fee_item_id': first['id'], 'category': 'tuition', 'amount': 1000.0},
            {'fee_item_id': second['id'], 'category': 'tuition', 'amount': 200.0},
        ]

        summary = await client.get(f'{PORTAL}/fees/{student.id}/summary', headers=student_headers)
        data = summary.json()
        assert data['total_fees'] == 1500.0
        assert data['total_paid'] == 1200.0
        assert data['outstanding'] == 300.0
        assert data['payment_status'] == 'partial'

    @pytest.mark.asyncio
    async def test_overpayment_is_rejected(self, client: AsyncClient, student, admin_headers, student_headers):
        await self._bill(client, admin_headers, student, 300, '2099-01-31')

        response = await client.post(f'{PORTAL}/fees/{student.id}/pay', headers=student_headers, json={
            'amount': 301
        })

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'OVERPAYMENT'

    @pytest.mark.asyncio
    async def test_parent_pays_for_child(self, client: AsyncClient, student, admin_headers, parent_headers):
        await self._bill(client, admin_headers, student, 250, '2099-01-31')

        response = await client.post(f'{PORTAL}/fees/{student.id}/pay', headers=parent_headers, json={
            'amount': 250,
            'method': 'card'
        })

        assert response.status_code == 201
        assert response.json()['method'] == 'card'

    @pytest.mark.asyncio
    async def test_payment_plan_splits_outstanding(self, client: AsyncClient, student, admin_headers, student_headers):
        await self._bill(client, admin_headers, student, 1000, '2099-01-31')

        response = await client.post(f'{PORTAL}/fees/{student.id}/payment-plan', headers=student_headers, json={
            'installment_count': 3,
            'frequency': 'quarterly',
            'start_date': '2099-01-15'
        })

        assert response.status_code == 201
        plan = response.json()
        assert plan['total_amount'] == 1000.0
        assert [i['amount'] for i in plan['schedule']] == [333.33, 333.33, 333.34]
        assert [i['due_date'] for i in plan['schedule']] == ['2099-01-15', '2099-04-15', '2099-07-15']

        summary = await client.get(f'{PORTAL}/fees/{student.id}/summary', headers=student_headers)
        assert summary.json()['payment_plan']['id'] == plan['id']

    @pytest.mark.asyncio
    async def test_new_plan_replaces_the_active_one(self, client: AsyncClient, student, admin_headers, student_headers):
        await self._bill(client, admin_headers, student, 600, '2099-01-31')
        url = f'{PORTAL}/fees/{student.id}/payment-plan'
        await client.post(url, headers=student_headers, json={'installment_count': 2, 'start_date': '2099-01-01'})

        response = await client.post(url, headers=student_headers, json={'installment_count': 6, 'start_date': '2099-01-01'})

        assert response.status_code == 201
        summary = await client.get(f'{PORTAL}/fees/{student.id}/summary', headers=student_headers)
        assert summary.json()['payment_plan']['installment_count'] == 6
        assert summary.json()['payment_plan']['schedule'][-1]['due_date'] == '2099-06-01'

    @pytest.mark.asyncio
    async def test_payment_plan_needs_a_balance(self, client: AsyncClient, student, student_headers):
        response = await client.post(f'{PORTAL}/fees/{student.id}/payment-plan', headers=student_headers, json={
            'installment_count': 3
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_payment_plan_installment_bounds(self, client: AsyncClient, student, admin_headers, student_headers):
        await self._bill(client, admin_headers, student, 500, '2099-01-31')

        response = await client.post(f'{PORTAL}/fees/{student.id}/payment-plan', headers=student_headers, json={
            'installment_count': 1
        })

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_billing_requires_admin(self, client: AsyncClient, student, teacher_headers):
        response = await client.post('/api/v1/fees/items', headers=teacher_headers, json={
            'student_id': student.id,
            'category': 'tuition',
            'amount': 100,
            'due_date': '2099-01-31'
        })

        assert response.status_code == 403


class TestEmergency:

    @pytest.mark.asyncio
    async def test_report_and_follow_up(self, client: AsyncClient, student, student_headers, teacher_headers):
        response = await client.post(f'{PORTAL}/emergency/{student.id}/report', headers=student_headers, json={
            'emergency_type': 'medical',
            'severity': 'high',
            'description': 'Fainted during sports practice',
            'location': 'Main field'
        })

        assert response.status_code == 201
        report = response.json()
        assert report['status'] == 'reported'
        assert report['tracking_number'].startswith('TRK')
        assert len(report['timeline']) == 1

        updated = await client.patch(
            f"/api/v1/emergency/reports/{report['id']}/status",
            headers=teacher_headers,
            json={'status': 'acknowledged', 'note': 'Nurse on the way'}
        )
        assert updated.status_code == 200
        assert updated.json()['status'] == 'acknowledged'
        assert len(updated.json()['timeline']) == 2

        status = await client.get(
            f"{PORTAL}/emergency/{student.id}/status/{report['id']}", headers=student_headers
        )
        assert status.status_code == 200
        assert status.json()['status'] == 'acknowledged'

    @pytest.mark.asyncio
    async def test_status_cannot_move_backwards(self, client: AsyncClient, student, student_headers, teacher_headers):
        created = await client.post(f'{PORTAL}/emergency/{student.id}/report', headers=student_headers, json={
            'emergency_type': 'safety',
            'description': 'Broken glass in corridor'
        })
        report_id = created.json()['id']

        resolved = await client.patch(
            f'/api/v1/emergency/reports/{report_id}/status', headers=teacher_headers, json={'status': 'resolved'}
        )
        assert resolved.status_code == 200
        assert resolved.json()['resolved_at'] is not None

        backwards = await client.patch(
            f'/api/v1/emergency/reports/{report_id}/status', headers=teacher_headers, json={'status': 'responding'}
        )
        assert backwards.status_code == 400

    @pytest.mark.asyncio
    async def test_students_cannot_update_status(self, client: AsyncClient, student, student_headers):
        created = await client.post(f'{PORTAL}/emergency/{student.id}/report', headers=student_headers, json={
            'emergency_type': 'other',
            'description': 'Lost my bag on the bus'
        })

        response = await client.patch(
            f"/api/v1/emergency/reports/{created.json()['id']}/status",
            headers=student_headers,
            json={'status': 'closed'}
        )

        assert response.status_code == 403


class TestAttendance:

    @pytest.mark.asyncio
    async def test_marking_again_updates_the_same_record(self, client: AsyncClient, student, teacher_headers, student_headers):
        first = await client.post('/api/v1/academic/attendance', headers=teacher_headers, json={
            'attendance_date': '2026-03-02',
            'entries': [{'student_id': student.id, 'status': 'absent'}]
        })
        assert first.status_code == 200
        assert first.json()['marked'] == 1

        second = await client.post('/api/v1/academic/attendance', headers=teacher_headers, json={
            'attendance_date': '2026-03-02',
            'entries': [{'student_id': student.id, 'status': 'late', 'remarks': 'Bus delayed'}]
        })
        assert second.status_code == 200
        assert second.json()['records'][0]['id'] == first.json()['records'][0]['id']

        response = await client.get(
            f'{PORTAL}/academic/{student.id}/attendance',
            headers=student_headers,
            params={'start_date': '2026-03-01', 'end_date': '2026-03-31'}
        )
        records = response.json()['records']
        assert len(records) == 1
        assert records[0]['status'] == 'late'
        assert records[0]['remarks'] == 'Bus delayed'

    @pytest.mark.asyncio
    async def test_other_school_student_cannot_be_marked(self, client: AsyncClient, outside_student, teacher_headers):
        response = await client.post('/api/v1/academic/attendance', headers=teacher_headers, json={
            'attendance_date': '2026-03-02',
            'entries': [{'student_id': outside_student.id, 'status': 'present'}]
        })

        assert response.status_code == 404


class TestAssignments:

    async def _assign(self, client, teacher_headers, due_date):
        response = await client.post('/api/v1/academic/assignments', headers=teacher_headers, json={
            'grade_level': 'Grade 10',
            'section': 'A',
            'subject': 'History',
            'title': 'Essay on the Mughal Empire',
            'due_date': due_date,
            'max_score': 20
        })
        assert response.status_code == 201
        return response.json()

    @pytest.mark.asyncio
    async def test_on_time_submission(self, client: AsyncClient, student, teacher_headers, student_headers):
        assignment = await self._assign(client, teacher_headers, '2099-12-31T23:59:00')

        response = await client.post(
            f"{PORTAL}/academic/{student.id}/assignments/{assignment['id']}/submit",
            headers=student_headers,
            json={'content': 'My essay'}
        )

        assert response.status_code == 200
        assert response.json()['is_late'] is False
        assert response.json()['status'] == 'submitted'

    @pytest.mark.asyncio
    async def test_submission_after_due_date_is_late(self, client: AsyncClient, student, teacher_headers, student_headers):
        assignment = await self._assign(client, teacher_headers, '2020-01-10T09:00:00')

        response = await client.post(
            f"{PORTAL}/academic/{student.id}/assignments/{assignment['id']}/submit",
            headers=student_headers,
            json={'content': 'Sorry this is late'}
        )

        assert response.status_code == 200
        assert response.json()['is_late'] is True
        assert response.json()['status'] == 'late'

    @pytest.mark.asyncio
    async def test_graded_submission_cannot_be_resubmitted(self, client: AsyncClient, student, teacher_headers, student_headers):
        assignment = await self._assign(client, teacher_headers, '2099-12-31T23:59:00')
        submit_url = f"{PORTAL}/academic/{student.id}/assignments/{assignment['id']}/submit"
        submission = (await client.post(submit_url, headers=student_headers, json={'content': 'Draft'})).json()

        graded = await client.post(
            f"/api/v1/academic/assignments/{assignment['id']}/submissions/{submission['id']}/grade",
            headers=teacher_headers,
            json={'score': 18, 'feedback': 'Well argued'}
        )
        assert graded.status_code == 200
        assert graded.json()['status'] == 'graded'

        response = await client.post(submit_url, headers=student_headers, json={'content': 'Improved draft'})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_empty_submission_is_rejected(self, client: AsyncClient, student, teacher_headers, student_headers):
        assignment = await self._assign(client, teacher_headers, '2099-12-31T23:59:00')

        response = await client.post(
            f"{PORTAL}/academic/{student.id}/assignments/{assignment['id']}/submit",
            headers=student_headers,
            json={'content': '   '}
        )

        assert response.status_code == 422


class TestLeaveRequests:

    @pytest.mark.asyncio
    async def test_request_leave(self, client: AsyncClient, student, student_headers):
        response = await client.post(f'{PORTAL}/self-service/{student.id}/leave-requests', headers=student_headers, json={
            'leave_type': 'sick',
            'start_date': '2099-05-04',
            'end_date': '2099-05-06',
            'reason': 'Fever'
        })

        assert response.status_code == 201
        assert response.json()['status'] == 'pending'
        assert response.json()['total_days'] == 3

    @pytest.mark.asyncio
    async def test_end_before_start_is_rejected(self, client: AsyncClient, student, student_headers):
        response = await client.post(f'{PORTAL}/self-service/{student.id}/leave-requests', headers=student_headers, json={
            'leave_type': 'personal',
            'start_date': '2099-05-06',
            'end_date': '2099-05-04',
            'reason': 'Family function'
        })

        assert response.status_code == 400
        assert response.json()['error']['details'] == {'field': 'end_date'}

    @pytest.mark.asyncio
    async def test_overlapping_request_conflicts(self, client: AsyncClient, student, student_headers):
        url = f'{PORTAL}/self-service/{student.id}/leave-requests'
        first = await client.post(url, headers=student_headers, json={
            'leave_type': 'family',
            'start_date': '2099-05-04',
            'end_date': '2099-05-08',
            'reason': 'Wedding'
        })
        assert first.status_code == 201

        response = await client.post(url, headers=student_headers, json={
            'leave_type': 'sick',
            'start_date': '2099-05-08',
            'end_date': '2099-05-10',
            'reason': 'Cold'
        })

        assert response.status_code == 409


class TestLibrary:

    async def _book(self, client, teacher_headers, copies=1):
        response = await client.post('/api/v1/library/books', headers=teacher_headers, json={
            'title': 'The Discovery of India',
            'author': 'Jawaharlal Nehru',
            'category': 'History',
            'total_copies': copies
        })
        assert response.status_code == 201
        return response.json()

    async def _issue(self, client, teacher_headers, book, borrower):
        return await client.post('/api/v1/library/loans', headers=teacher_headers, json={
            'book_id': book['id'],
            'student_id': borrower.id
        })

    @pytest.mark.asyncio
    async def test_reserve_without_body(self, client: AsyncClient, student, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)

        response = await client.post(f"{PORTAL}/library/{student.id}/books/{book['id']}/reserve", headers=student_headers)

        assert response.status_code == 201
        assert response.json()['status'] == 'ready'
        assert response.json()['queue_position'] == 1

    @pytest.mark.asyncio
    async def test_duplicate_reservation_conflicts(self, client: AsyncClient, student, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)
        url = f"{PORTAL}/library/{student.id}/books/{book['id']}/reserve"
        await client.post(url, headers=student_headers, json={'notes': 'For my project'})

        response = await client.post(url, headers=student_headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_held_copy_is_only_lent_to_the_holder(self, client: AsyncClient, student, classmate, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)
        await client.post(f"{PORTAL}/library/{student.id}/books/{book['id']}/reserve", headers=student_headers)

        blocked = await self._issue(client, teacher_headers, book, classmate)
        assert blocked.status_code == 409
        assert blocked.json()['error']['code'] == 'LIBRARY_RULE_VIOLATION'
        assert blocked.json()['error']['details'] == {'rule': 'reserved'}

        issued = await self._issue(client, teacher_headers, book, student)
        assert issued.status_code == 201
        assert issued.json()['title'] == 'The Discovery of India'
        assert issued.json()['author'] == 'Jawaharlal Nehru'

        reservations = await client.get(f'{PORTAL}/library/{student.id}/reservations', headers=student_headers)
        assert reservations.json()[0]['status'] == 'fulfilled'

    @pytest.mark.asyncio
    async def test_spare_copy_can_be_lent_despite_a_hold(self, client: AsyncClient, student, classmate, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers, copies=2)
        await client.post(f"{PORTAL}/library/{student.id}/books/{book['id']}/reserve", headers=student_headers)

        response = await self._issue(client, teacher_headers, book, classmate)

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_renewal_extends_due_date(self, client: AsyncClient, student, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)
        loan = (await self._issue(client, teacher_headers, book, student)).json()

        response = await client.post(f"{PORTAL}/library/{student.id}/loans/{loan['id']}/renew", headers=student_headers)

        assert response.status_code == 200
        renewed = response.json()
        assert renewed['renewal_count'] == 1
        assert renewed['renewals_remaining'] == 1
        extended = datetime.fromisoformat(renewed['due_date']) - datetime.fromisoformat(loan['due_date'])
        assert extended == timedelta(days=14)

    @pytest.mark.asyncio
    async def test_overdue_loan_cannot_be_renewed(self, client: AsyncClient, db_session, student, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)
        loan_id = (await self._issue(client, teacher_headers, book, student)).json()['id']
        loan = await db_session.get(BookLoan, loan_id)
        loan.due_date = datetime.utcnow() - timedelta(days=2)
        await db_session.commit()

        response = await client.post(f'{PORTAL}/library/{student.id}/loans/{loan_id}/renew', headers=student_headers)

        assert response.status_code == 409
        assert response.json()['error']['details'] == {'rule': 'overdue'}

    @pytest.mark.asyncio
    async def test_renewal_limit(self, client: AsyncClient, db_session, student, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)
        loan_id = (await self._issue(client, teacher_headers, book, student)).json()['id']
        loan = await db_session.get(BookLoan, loan_id)
        loan.renewal_count = 2
        await db_session.commit()

        response = await client.post(f'{PORTAL}/library/{student.id}/loans/{loan_id}/renew', headers=student_headers)

        assert response.status_code == 409
        assert response.json()['error']['details'] == {'rule': 'max_renewals'}

    @pytest.mark.asyncio
    async def test_reserved_book_cannot_be_renewed(self, client: AsyncClient, db_session, student, classmate, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)
        loan_id = (await self._issue(client, teacher_headers, book, student)).json()['id']
        waiting = await LibraryService(db_session).reserve_book(classmate, book['id'])
        assert waiting['status'] == 'waiting'

        response = await client.post(f'{PORTAL}/library/{student.id}/loans/{loan_id}/renew', headers=student_headers)

        assert response.status_code == 409
        assert response.json()['error']['details'] == {'rule': 'reserved'}

    @pytest.mark.asyncio
    async def test_late_return_records_fine(self, client: AsyncClient, db_session, student, teacher_headers, student_headers):
        book = await self._book(client, teacher_headers)
        loan_id = (await self._issue(client, teacher_headers, book, student)).json()['id']
        loan = await db_session.get(BookLoan, loan_id)
        loan.due_date = datetime.utcnow() - timedelta(days=3)
        await db_session.commit()

        response = await client.post(f'/api/v1/library/loans/{loan_id}/return', headers=teacher_headers)

        assert response.status_code == 200
        returned = response.json()
        assert returned['days_overdue'] == 3
        assert returned['fine']['amount'] == 1.5
        assert returned['fine']['status'] == 'unpaid'

        fines = (await client.get(f'{PORTAL}/library/{student.id}/fines', headers=student_headers)).json()
        assert fines['total_unpaid'] == 1.5
        assert fines['accruing'] == []

        again = await client.post(f'/api/v1/library/loans/{loan_id}/return', headers=teacher_headers)
        assert again.status_code == 409

    @pytest.mark.asyncio
    async def test_on_time_return_has_no_fine(self, client: AsyncClient, student, teacher_headers):
        book = await self._book(client, teacher_headers)
        loan_id = (await self._issue(client, teacher_headers, book, student)).json()['id']

        response = await client.post(f'/api/v1/library/loans/{loan_id}/return', headers=teacher_headers)

        assert response.json()['days_overdue'] == 0
        assert response.json()['fine'] is None


class TestCareer:

    @pytest.mark.asyncio
    async def test_second_application_conflicts(self, client: AsyncClient, student, student_headers):
        url = f'{PORTAL}/career/{student.id}/opportunities/opportunity-001/apply'
        first = await client.post(url, headers=student_headers, json={'cover_letter': 'I love building apps'})
        assert first.status_code == 201
        assert first.json()['opportunity_id'] == 'opportunity-001'

        response = await client.post(url, headers=student_headers, json={})

        assert response.status_code == 409

        opportunities = await client.get(f'{PORTAL}/career/{student.id}/opportunities', headers=student_headers)
        applied = [o for o in opportunities.json() if o['id'] == 'opportunity-001']
        assert applied[0]['application_status'] != 'not_applied'

    @pytest.mark.asyncio
    async def test_unknown_opportunity(self, client: AsyncClient, student, student_headers):
        response = await client.post(
            f'{PORTAL}/career/{student.id}/opportunities/opportunity-999/apply', headers=student_headers, json={}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_adding_a_favorite_twice_keeps_one(self, client: AsyncClient, student, student_headers):
        url = f'{PORTAL}/career/{student.id}/colleges/college-001/favorites'
        for _ in range(2):
            response = await client.post(url, headers=student_headers)
            assert response.status_code == 200
            assert response.json() == {'college_id': 'college-001', 'is_favorite': True}

        colleges = await client.get(f'{PORTAL}/career/{student.id}/colleges', headers=student_headers)
        favorites = [c['id'] for c in colleges.json() if c['is_favorite']]
        assert favorites == ['college-001']

    @pytest.mark.asyncio
    async def test_results_before_any_attempt(self, client: AsyncClient, student, student_headers):
        response = await client.get(
            f'{PORTAL}/career/{student.id}/assessments/assessment-001/results', headers=student_headers
        )

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'ASSESSMENT_RESULTS_NOT_FOUND'


class TestTransportFeedback:

    @pytest.mark.asyncio
    async def test_feedback_without_route(self, client: AsyncClient, student, student_headers):
        response = await client.post(f'{PORTAL}/transportation/{student.id}/feedback', headers=student_headers, json={
            'rating': 5,
            'category': 'driver',
            'comments': 'Always on time'
        })

        assert response.status_code == 201
        assert response.json()['rating'] == 5
        assert response.json()['route_id'] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize('rating', [0, 6])
    async def test_rating_outside_one_to_five(self, client: AsyncClient, student, student_headers, rating):
        response = await client.post(f'{PORTAL}/transportation/{student.id}/feedback', headers=student_headers, json={
            'rating': rating
        })

        assert response.status_code == 422
