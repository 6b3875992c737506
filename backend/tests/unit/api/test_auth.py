"""
Unit Tests for Authentication API Endpoints
"""
import pytest
from httpx import AsyncClient


class TestLogin:
    """Test login endpoint"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, school_admin):
        response = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email,
            'password': 'testpassword123'
        })

        assert response.status_code == 200
        data = response.json()
        assert data['token_type'] == 'bearer'
        assert data['access_token']
        assert data['refresh_token']
        assert data['user']['email'] == school_admin.email
        assert data['user']['role'] == 'school_admin'
        assert data['user']['school_id'] == school_admin.school_id
        assert 'hashed_password' not in data['user']

    @pytest.mark.asyncio
    async def test_login_email_is_case_insensitive(self, client: AsyncClient, school_admin):
        response = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email.upper(),
            'password': 'testpassword123'
        })

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, school_admin):
        response = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email,
            'password': 'wrongpassword'
        })

        assert response.status_code == 401
        body = response.json()
        assert body['success'] is False
        assert body['error']['code'] == 'INVALID_CREDENTIALS'

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, client: AsyncClient, school):
        response = await client.post('/api/v1/auth/login', json={
            'email': 'nobody@example.com',
            'password': 'testpassword123'
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, db_session, school_admin):
        school_admin.is_active = False
        await db_session.commit()

        response = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email,
            'password': 'testpassword123'
        })

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_login_invalid_email(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/login', json={
            'email': 'not-an-email',
            'password': 'testpassword123'
        })

        assert response.status_code == 422


class TestTokens:
    """Test token refresh and current user"""

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, student_user, student_headers):
        response = await client.get('/api/v1/auth/me', headers=student_headers)

        assert response.status_code == 200
        assert response.json()['id'] == student_user.id
        assert response.json()['role'] == 'student'

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')

        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_me_rejects_garbage_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer nonsense'})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh(self, client: AsyncClient, school_admin):
        login = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email,
            'password': 'testpassword123'
        })

        response = await client.post('/api/v1/auth/refresh', json={
            'refresh_token': login.json()['refresh_token']
        })

        assert response.status_code == 200
        assert response.json()['user']['id'] == school_admin.id

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, client: AsyncClient, school_admin):
        login = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email,
            'password': 'testpassword123'
        })

        response = await client.post('/api/v1/auth/refresh', json={
            'refresh_token': login.json()['access_token']
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_access_endpoint_rejects_refresh_token(self, client: AsyncClient, school_admin):
        login = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email,
            'password': 'testpassword123'
        })
        refresh = login.json()['refresh_token']

        response = await client.get('/api/v1/auth/me', headers={'Authorization': f'Bearer {refresh}'})

        assert response.status_code == 401


class TestChangePassword:
    """Test password change"""

    @pytest.mark.asyncio
    async def test_change_password(self, client: AsyncClient, school_admin, admin_headers):
        response = await client.post('/api/v1/auth/change-password', headers=admin_headers, json={
            'current_password': 'testpassword123',
            'new_password': 'brandNewPass456'
        })

        assert response.status_code == 200
        assert response.json()['success'] is True

        login = await client.post('/api/v1/auth/login', json={
            'email': school_admin.email,
            'password': 'brandNewPass456'
        })
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, client: AsyncClient, admin_headers):
        response = await client.post('/api/v1/auth/change-password', headers=admin_headers, json={
            'current_password': 'not-my-password',
            'new_password': 'brandNewPass456'
        })

        assert response.status_code == 401
