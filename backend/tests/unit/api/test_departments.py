"""
Unit Tests for Department API Endpoints
"""
import pytest
from httpx import AsyncClient


async def create_department(client, headers, dept_type='teaching', name='Mathematics', description=None):
    response = await client.post('/api/v1/departments', headers=headers, json={
        'type': dept_type,
        'name': name,
        'description': description
    })
    assert response.status_code == 201, response.text
    return response.json()


class TestDepartmentCrud:

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, school, school_admin, admin_headers):
        data = await create_department(client, admin_headers, description='Algebra and geometry')

        assert data['school_id'] == school.id
        assert data['type'] == 'teaching'
        assert data['created_by'] == school_admin.id
        assert data['staff_members'] == []

    @pytest.mark.asyncio
    async def test_duplicate_type_and_name(self, client: AsyncClient, admin_headers):
        await create_department(client, admin_headers)

        response = await client.post('/api/v1/departments', headers=admin_headers, json={
            'type': 'teaching',
            'name': 'Mathematics'
        })

        assert response.status_code == 409
        assert response.json()['error']['message'] == 'Department with this type and name already exists'

    @pytest.mark.asyncio
    async def test_same_name_different_type_allowed(self, client: AsyncClient, admin_headers):
        await create_department(client, admin_headers, dept_type='teaching', name='Sports')
        await create_department(client, admin_headers, dept_type='facilities', name='Sports')

    @pytest.mark.asyncio
    async def test_staff_cannot_create(self, client: AsyncClient, teacher_headers):
        response = await client.post('/api/v1/departments', headers=teacher_headers, json={
            'type': 'teaching',
            'name': 'Physics'
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_ordered_by_name_and_filtered(self, client: AsyncClient, admin_headers, teacher_headers):
        await create_department(client, admin_headers, name='Science')
        await create_department(client, admin_headers, name='English')
        await create_department(client, admin_headers, dept_type='finance', name='Accounts')

        everything = await client.get('/api/v1/departments', headers=teacher_headers)
        teaching = await client.get('/api/v1/departments', headers=teacher_headers, params={'type': 'teaching'})
        searched = await client.get('/api/v1/departments', headers=teacher_headers, params={'search': 'sci'})

        assert [d['name'] for d in everything.json()] == ['Accounts', 'English', 'Science']
        assert [d['name'] for d in teaching.json()] == ['English', 'Science']
        assert [d['name'] for d in searched.json()] == ['Science']

    @pytest.mark.asyncio
    async def test_limit_and_offset(self, client: AsyncClient, admin_headers):
        for name in ('Art', 'Biology', 'Chemistry'):
            await create_department(client, admin_headers, name=name)

        response = await client.get('/api/v1/departments', headers=admin_headers, params={'limit': 1, 'offset': 1})

        assert [d['name'] for d in response.json()] == ['Biology']

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, admin_headers):
        dept = await create_department(client, admin_headers)

        response = await client.put(f"/api/v1/departments/{dept['id']}", headers=admin_headers, json={
            'description': 'Pure and applied mathematics'
        })

        assert response.status_code == 200
        assert response.json()['description'] == 'Pure and applied mathematics'
        assert response.json()['name'] == 'Mathematics'

    @pytest.mark.asyncio
    async def test_update_to_duplicate(self, client: AsyncClient, admin_headers):
        await create_department(client, admin_headers, name='Mathematics')
        other = await create_department(client, admin_headers, name='Physics')

        response = await client.put(f"/api/v1/departments/{other['id']}", headers=admin_headers, json={
            'name': 'Mathematics'
        })

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, admin_headers):
        dept = await create_department(client, admin_headers)

        response = await client.delete(f"/api/v1/departments/{dept['id']}", headers=admin_headers)
        missing = await client.get(f"/api/v1/departments/{dept['id']}", headers=admin_headers)

        assert response.status_code == 204
        assert missing.status_code == 404
        assert missing.json()['error']['code'] == 'DEPARTMENT_NOT_FOUND'


class TestDepartmentStaff:

    @pytest.mark.asyncio
    async def test_assign_and_remove(self, client: AsyncClient, teacher, admin_headers):
        dept = await create_department(client, admin_headers)
        url = f"/api/v1/departments/{dept['id']}/staff/{teacher.id}"

        assigned = await client.post(url, headers=admin_headers)
        again = await client.post(url, headers=admin_headers)
        removed = await client.delete(url, headers=admin_headers)
        removed_twice = await client.delete(url, headers=admin_headers)

        assert assigned.status_code == 200
        assert [m['employee_id'] for m in assigned.json()['staff_members']] == ['EMP001']
        assert again.status_code == 409
        assert removed.json()['staff_members'] == []
        assert removed_twice.status_code == 200

    @pytest.mark.asyncio
    async def test_cannot_delete_staffed_department(self, client: AsyncClient, teacher, admin_headers):
        dept = await create_department(client, admin_headers)
        await client.post(f"/api/v1/departments/{dept['id']}/staff/{teacher.id}", headers=admin_headers)

        response = await client.delete(f"/api/v1/departments/{dept['id']}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()['error']['details'] == {'staff_count': 1}

    @pytest.mark.asyncio
    async def test_unknown_staff(self, client: AsyncClient, admin_headers):
        dept = await create_department(client, admin_headers)

        response = await client.post(
            f"/api/v1/departments/{dept['id']}/staff/00000000-0000-4000-8000-000000000000",
            headers=admin_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_statistics(self, client: AsyncClient, teacher, admin_headers):
        maths = await create_department(client, admin_headers, name='Mathematics')
        await create_department(client, admin_headers, name='Physics')
        await create_department(client, admin_headers, dept_type='finance', name='Accounts')
        await client.post(f"/api/v1/departments/{maths['id']}/staff/{teacher.id}", headers=admin_headers)

        response = await client.get('/api/v1/departments/stats/overview', headers=admin_headers)

        assert response.status_code == 200
        stats = response.json()
        assert stats['total_departments'] == 3
        assert stats['departments_by_type'] == {'teaching': 2, 'finance': 1}
        assert stats['average_staff_per_department'] == pytest.approx(1 / 3, abs=0.01)
        assert stats['departments_with_most_staff'][0]['department_name'] == 'Mathematics'


class TestDepartmentTenancy:

    @pytest.mark.asyncio
    async def test_other_school_cannot_see_department(self, client: AsyncClient, admin_headers,
                                                      other_school_admin, headers_for):
        dept = await create_department(client, admin_headers)

        response = await client.get(f"/api/v1/departments/{dept['id']}", headers=headers_for(other_school_admin))
        listing = await client.get('/api/v1/departments', headers=headers_for(other_school_admin))

        assert response.status_code == 404
        assert listing.json() == []
