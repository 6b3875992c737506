"""
Unit Tests for Student enrollment and lifecycle API Endpoints
"""
import pytest
from datetime import date
from httpx import AsyncClient

from app.models.student import Student, StudentStatus


STUDENT = {
    'admission_number': 'ADM100',
    'first_name': 'Ishaan',
    'last_name': 'Verma',
    'grade_level': 'Grade 9',
    'section': 'B',
    'email': 'ishaan.verma@example.com',
    'emergency_contact': {'name': 'Ritu Verma', 'relationship': 'mother', 'phone': '+91-9800000000'}
}


class TestEnrollment:

    @pytest.mark.asyncio
    async def test_enroll_with_login(self, client: AsyncClient, school, admin_headers):
        response = await client.post('/api/v1/students', headers=admin_headers, json={
            **STUDENT, 'password': 'studentPass1'
        })

        assert response.status_code == 201
        data = response.json()
        assert data['school_id'] == school.id
        assert data['status'] == 'active'
        assert data['user_id'] is not None
        assert data['emergency_contact']['name'] == 'Ritu Verma'

        login = await client.post('/api/v1/auth/login', json={
            'email': STUDENT['email'],
            'password': 'studentPass1'
        })
        assert login.status_code == 200
        assert login.json()['user']['role'] == 'student'

    @pytest.mark.asyncio
    async def test_enroll_without_login(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/v1/students', headers=admin_headers, json=STUDENT)

        assert response.status_code == 201
        assert response.json()['user_id'] is None

    @pytest.mark.asyncio
    async def test_duplicate_admission_number(self, client: AsyncClient, student, admin_headers):
        response = await client.post('/api/v1/students', headers=admin_headers, json={
            **STUDENT, 'admission_number': student.admission_number
        })

        assert response.status_code == 409
        assert response.json()['error']['details'] == {'field': 'admission_number'}

    @pytest.mark.asyncio
    async def test_admission_numbers_are_per_school(self, client: AsyncClient, outside_student, admin_headers):
        response = await client.post('/api/v1/students', headers=admin_headers, json={
            **STUDENT, 'admission_number': outside_student.admission_number
        })

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_school_capacity(self, client: AsyncClient, db_session, school, student, admin_headers):
        school.max_students = 1
        await db_session.commit()

        response = await client.post('/api/v1/students', headers=admin_headers, json=STUDENT)

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'CAPACITY_EXCEEDED'

    @pytest.mark.asyncio
    async def test_login_needs_email(self, client: AsyncClient, admin_headers):
        payload = {**STUDENT, 'password': 'studentPass1'}
        payload.pop('email')

        response = await client.post('/api/v1/students', headers=admin_headers, json=payload)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_teacher_cannot_enroll(self, client: AsyncClient, teacher_headers):
        response = await client.post('/api/v1/students', headers=teacher_headers, json=STUDENT)

        assert response.status_code == 403


class TestStudentRecords:

    @pytest.mark.asyncio
    async def test_list_and_filter(self, client: AsyncClient, student, classmate, teacher_headers):
        everyone = await client.get('/api/v1/students', headers=teacher_headers)
        searched = await client.get('/api/v1/students', headers=teacher_headers, params={'search': 'men'})
        paged = await client.get('/api/v1/students', headers=teacher_headers, params={'page_size': 1, 'page': 2})

        assert everyone.json()['total'] == 2
        assert [s['last_name'] for s in searched.json()['items']] == ['Menon']
        assert paged.json()['has_previous'] is True
        assert paged.json()['has_next'] is False
        assert len(paged.json()['items']) == 1

    @pytest.mark.asyncio
    async def test_other_school_student_is_missing(self, client: AsyncClient, outside_student, teacher_headers):
        response = await client.get(f'/api/v1/students/{outside_student.id}', headers=teacher_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, student, admin_headers):
        response = await client.put(f'/api/v1/students/{student.id}', headers=admin_headers, json={
            'section': 'C',
            'status': 'suspended'
        })

        assert response.status_code == 200
        assert response.json()['section'] == 'C'
        assert response.json()['status'] == 'suspended'
        assert response.json()['first_name'] == student.first_name


class TestParentLinks:

    @pytest.mark.asyncio
    async def test_link_new_parent(self, client: AsyncClient, student, admin_headers):
        response = await client.post(f'/api/v1/students/{student.id}/parents', headers=admin_headers, json={
            'email': 'parent.shah@example.com',
            'full_name': 'Nisha Shah',
            'password': 'parentPass1',
            'relationship_type': 'mother',
            'is_primary': True
        })

        assert response.status_code == 201
        assert response.json()['student_id'] == student.id
        assert response.json()['relationship_type'] == 'mother'

        login = await client.post('/api/v1/auth/login', json={
            'email': 'parent.shah@example.com',
            'password': 'parentPass1'
        })
        assert login.json()['user']['role'] == 'parent'

    @pytest.mark.asyncio
    async def test_existing_parent_links_second_child(self, client: AsyncClient, parent_user, classmate,
                                                      admin_headers):
        response = await client.post(f'/api/v1/students/{classmate.id}/parents', headers=admin_headers, json={
            'email': parent_user.email
        })

        assert response.status_code == 201
        assert response.json()['parent_user_id'] == parent_user.id

    @pytest.mark.asyncio
    async def test_duplicate_link(self, client: AsyncClient, parent_user, student, admin_headers):
        response = await client.post(f'/api/v1/students/{student.id}/parents', headers=admin_headers, json={
            'email': parent_user.email
        })

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_new_parent_needs_password(self, client: AsyncClient, student, admin_headers):
        response = await client.post(f'/api/v1/students/{student.id}/parents', headers=admin_headers, json={
            'email': 'no.password@example.com'
        })

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_staff_account_cannot_be_parent(self, client: AsyncClient, student, teacher_user,
                                                  admin_headers):
        response = await client.post(f'/api/v1/students/{student.id}/parents', headers=admin_headers, json={
            'email': teacher_user.email
        })

        assert response.status_code == 409


async def enroll(db_session, school, admission_number, grade_level, section='A', status=StudentStatus.ACTIVE):
    student = Student(
        school_id=school.id,
        admission_number=admission_number,
        first_name='Test',
        last_name=admission_number,
        grade_level=grade_level,
        section=section,
        status=status,
        enrollment_date=date(2020, 6, 1),
    )
    db_session.add(student)
    await db_session.commit()
    return student


class TestPromotion:

    @pytest.mark.asyncio
    async def test_promote_whole_grade(self, client: AsyncClient, student, classmate, admin_headers):
        response = await client.post('/api/v1/students/promote', headers=admin_headers, json={
            'grade_level': 'Grade 10'
        })

        assert response.status_code == 200
        result = response.json()
        assert result['from_grade'] == 'Grade 10'
        assert result['to_grade'] == 'Grade 11'
        assert result['promoted'] == 2
        assert set(result['student_ids']) == {student.id, classmate.id}

        record = await client.get(f'/api/v1/students/{student.id}', headers=admin_headers)
        assert record.json()['grade_level'] == 'Grade 11'
        assert student.promotion_history[0]['from_grade'] == 'Grade 10'
        assert student.promotion_history[0]['to_grade'] == 'Grade 11'

    @pytest.mark.asyncio
    async def test_promote_one_section(self, client: AsyncClient, db_session, school, student, admin_headers):
        other_section = await enroll(db_session, school, 'ADM200', 'Grade 10', section='B')

        response = await client.post('/api/v1/students/promote', headers=admin_headers, json={
            'grade_level': 'Grade 10',
            'section': 'B',
            'target_section': 'A'
        })

        assert response.json()['student_ids'] == [other_section.id]
        assert other_section.grade_level == 'Grade 11'
        assert other_section.section == 'A'
        assert student.grade_level == 'Grade 10'

    @pytest.mark.asyncio
    async def test_inactive_students_are_not_promoted(self, client: AsyncClient, db_session, student, classmate, admin_headers):
        classmate.status = StudentStatus.SUSPENDED
        await db_session.commit()

        response = await client.post('/api/v1/students/promote', headers=admin_headers, json={
            'grade_level': 'Grade 10'
        })

        assert response.json()['student_ids'] == [student.id]
        assert classmate.grade_level == 'Grade 10'

    @pytest.mark.asyncio
    async def test_unnumbered_grade_needs_a_target(self, client: AsyncClient, school, admin_headers):
        response = await client.post('/api/v1/students/promote', headers=admin_headers, json={
            'grade_level': 'Kindergarten'
        })

        assert response.status_code == 400
        assert response.json()['error']['details'] == {'field': 'target_grade_level'}

        explicit = await client.post('/api/v1/students/promote', headers=admin_headers, json={
            'grade_level': 'Kindergarten',
            'target_grade_level': 'Grade 1'
        })
        assert explicit.status_code == 200
        assert explicit.json()['promoted'] == 0

    @pytest.mark.asyncio
    async def test_teacher_cannot_promote(self, client: AsyncClient, teacher_headers):
        response = await client.post('/api/v1/students/promote', headers=teacher_headers, json={
            'grade_level': 'Grade 10'
        })

        assert response.status_code == 403


class TestGraduation:

    @pytest.mark.asyncio
    async def test_graduate_final_grade(self, client: AsyncClient, db_session, school, student, admin_headers):
        first = await enroll(db_session, school, 'ADM120', 'Grade 12')
        second = await enroll(db_session, school, 'ADM121', 'Grade 12', section='B')

        response = await client.post('/api/v1/students/graduate', headers=admin_headers, json={
            'graduation_year': 2026
        })

        assert response.status_code == 200
        result = response.json()
        assert result['graduated'] == 2
        assert set(result['student_ids']) == {first.id, second.id}
        assert result['errors'] == []

        record = await client.get(f'/api/v1/students/{first.id}', headers=admin_headers)
        assert record.json()['status'] == 'graduated'
        assert record.json()['graduation_year'] == 2026
        assert student.status == StudentStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_ineligible_students_are_reported(self, client: AsyncClient, db_session, school, student, admin_headers):
        senior = await enroll(db_session, school, 'ADM120', 'Grade 12')
        inactive = await enroll(db_session, school, 'ADM121', 'Grade 12', status=StudentStatus.INACTIVE)

        response = await client.post('/api/v1/students/graduate', headers=admin_headers, json={
            'student_ids': [senior.id, student.id, inactive.id, 'missing-id']
        })

        result = response.json()
        assert result['student_ids'] == [senior.id]
        reasons = {e['student_id']: e['reason'] for e in result['errors']}
        assert reasons == {
            student.id: 'not_final_grade',
            inactive.id: 'status_inactive',
            'missing-id': 'not_found',
        }
        assert student.status == StudentStatus.ACTIVE
        assert inactive.status == StudentStatus.INACTIVE

    @pytest.mark.asyncio
    async def test_nobody_in_final_grade(self, client: AsyncClient, student, admin_headers):
        response = await client.post('/api/v1/students/graduate', headers=admin_headers, json={})

        assert response.status_code == 200
        assert response.json() == {'graduated': 0, 'student_ids': [], 'errors': []}


class TestTransfers:

    async def _request(self, client, admin_headers, student):
        return await client.post(f'/api/v1/students/{student.id}/transfers', headers=admin_headers, json={
            'reason': 'family_relocation',
            'to_school_name': 'Lakeview International School',
            'transfer_date': '2026-11-01'
        })

    @pytest.mark.asyncio
    async def test_request_and_approve(self, client: AsyncClient, student, admin_headers, teacher_headers):
        requested = await self._request(client, admin_headers, student)

        assert requested.status_code == 201
        transfer = requested.json()
        assert transfer['status'] == 'initiated'
        assert transfer['transfer_type'] == 'inter_school'
        assert transfer['from_grade'] == 'Grade 10'
        assert transfer['from_section'] == 'A'

        pending = await client.get('/api/v1/students/transfers', headers=teacher_headers, params={'status': 'initiated'})
        assert [t['id'] for t in pending.json()] == [transfer['id']]

        approved = await client.post(
            f"/api/v1/students/transfers/{transfer['id']}/review",
            headers=admin_headers,
            json={'status': 'approved', 'notes': 'Leaving certificate issued'}
        )
        assert approved.status_code == 200
        assert approved.json()['status'] == 'approved'
        assert approved.json()['reviewed_at'] is not None

        record = await client.get(f'/api/v1/students/{student.id}', headers=admin_headers)
        assert record.json()['status'] == 'transferred'

    @pytest.mark.asyncio
    async def test_one_pending_transfer_per_student(self, client: AsyncClient, student, admin_headers):
        await self._request(client, admin_headers, student)

        response = await self._request(client, admin_headers, student)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_rejection_keeps_student_active(self, client: AsyncClient, student, admin_headers):
        transfer_id = (await self._request(client, admin_headers, student)).json()['id']

        rejected = await client.post(
            f'/api/v1/students/transfers/{transfer_id}/review', headers=admin_headers, json={'status': 'rejected'}
        )

        assert rejected.json()['status'] == 'rejected'
        assert student.status == StudentStatus.ACTIVE
        again = await self._request(client, admin_headers, student)
        assert again.status_code == 201

    @pytest.mark.asyncio
    async def test_decided_transfer_cannot_be_reviewed_again(self, client: AsyncClient, student, admin_headers):
        transfer_id = (await self._request(client, admin_headers, student)).json()['id']
        url = f'/api/v1/students/transfers/{transfer_id}/review'
        await client.post(url, headers=admin_headers, json={'status': 'approved'})

        response = await client.post(url, headers=admin_headers, json={'status': 'rejected'})

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'INVALID_STATUS_TRANSITION'

    @pytest.mark.asyncio
    async def test_transferred_student_cannot_transfer_again(self, client: AsyncClient, student, admin_headers):
        transfer_id = (await self._request(client, admin_headers, student)).json()['id']
        await client.post(f'/api/v1/students/transfers/{transfer_id}/review', headers=admin_headers,
                          json={'status': 'approved'})

        response = await self._request(client, admin_headers, student)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_other_school_cannot_review(self, client: AsyncClient, student, admin_headers,
                                              other_school_admin, headers_for):
        transfer_id = (await self._request(client, admin_headers, student)).json()['id']

        response = await client.post(
            f'/api/v1/students/transfers/{transfer_id}/review',
            headers=headers_for(other_school_admin),
            json={'status': 'approved'}
        )

        assert response.status_code == 404
