"""
Unit Tests for School (tenant) API Endpoints
"""
import pytest
from httpx import AsyncClient


class TestSchoolAdministration:

    @pytest.mark.asyncio
    async def test_super_admin_creates_school(self, client: AsyncClient, super_admin_headers):
        response = await client.post('/api/v1/schools', headers=super_admin_headers, json={
            'name': 'Lakeside International',
            'code': 'LSI-01',
            'type': 'international',
            'max_students': 500
        })

        assert response.status_code == 201
        data = response.json()
        assert data['code'] == 'LSI-01'
        assert data['status'] == 'active'
        assert data['max_students'] == 500

    @pytest.mark.asyncio
    async def test_duplicate_code(self, client: AsyncClient, school, super_admin_headers):
        response = await client.post('/api/v1/schools', headers=super_admin_headers, json={
            'name': 'Another Greenwood',
            'code': school.code
        })

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'DUPLICATE_RESOURCE'

    @pytest.mark.asyncio
    async def test_school_admin_cannot_create_school(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/v1/schools', headers=admin_headers, json={
            'name': 'Rogue School',
            'code': 'ROGUE'
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_schools(self, client: AsyncClient, school, other_school, super_admin_headers):
        response = await client.get('/api/v1/schools', headers=super_admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['total'] == 2
        assert {item['code'] for item in data['items']} == {'GWH001', 'RSA002'}

    @pytest.mark.asyncio
    async def test_create_school_admin(self, client: AsyncClient, school, super_admin_headers):
        response = await client.post(f'/api/v1/schools/{school.id}/admins', headers=super_admin_headers, json={
            'email': 'principal@example.com',
            'password': 'principalPass1',
            'full_name': 'Anita Kapoor'
        })

        assert response.status_code == 201
        assert response.json()['role'] == 'school_admin'
        assert response.json()['school_id'] == school.id

        login = await client.post('/api/v1/auth/login', json={
            'email': 'principal@example.com',
            'password': 'principalPass1'
        })
        assert login.status_code == 200


class TestSchoolAccess:

    @pytest.mark.asyncio
    async def test_admin_reads_own_school(self, client: AsyncClient, school, admin_headers):
        response = await client.get(f'/api/v1/schools/{school.id}', headers=admin_headers)

        assert response.status_code == 200
        assert response.json()['name'] == 'Greenwood High'

    @pytest.mark.asyncio
    async def test_admin_cannot_read_other_school(self, client: AsyncClient, other_school, admin_headers):
        response = await client.get(f'/api/v1/schools/{other_school.id}', headers=admin_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_statistics(self, client: AsyncClient, school, student, classmate, teacher, admin_headers):
        response = await client.get(f'/api/v1/schools/{school.id}/statistics', headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['total_students'] == 2
        assert data['active_students'] == 2
        assert data['total_staff'] == 1
        assert data['student_capacity_utilization'] == 0.2

    @pytest.mark.asyncio
    async def test_current_context(self, client: AsyncClient, school, teacher_headers):
        response = await client.get('/api/v1/schools/current/context', headers=teacher_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['school_id'] == school.id
        assert data['user_role'] == 'staff'
        assert data['is_school_admin'] is False
        assert 'attendance:mark' in data['permissions']

    @pytest.mark.asyncio
    async def test_super_admin_context_needs_school_header(self, client: AsyncClient, school, super_admin_headers):
        missing = await client.get('/api/v1/schools/current/context', headers=super_admin_headers)
        chosen = await client.get(
            '/api/v1/schools/current/context',
            headers={**super_admin_headers, 'X-School-ID': school.id}
        )

        assert missing.status_code == 400
        assert chosen.status_code == 200
        assert chosen.json()['is_super_admin'] is True

    @pytest.mark.asyncio
    async def test_member_cannot_switch_school(self, client: AsyncClient, other_school, admin_headers):
        response = await client.get(
            '/api/v1/schools/current/context',
            headers={**admin_headers, 'X-School-ID': other_school.id}
        )

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'SCHOOL_ACCESS_DENIED'
