"""
Unit Tests for health check endpoints
"""
import pytest
from httpx import AsyncClient


class TestHealth:

    @pytest.mark.asyncio
    async def test_app_health(self, client: AsyncClient):
        response = await client.get('/health')

        assert response.status_code == 200
        assert response.json()['app_name'] == 'Academia Pro'

    @pytest.mark.asyncio
    async def test_api_health(self, client: AsyncClient):
        response = await client.get('/api/v1/health')

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy', 'service': 'academia-pro-backend'}

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient):
        response = await client.get('/api/v1/health/live')

        assert response.status_code == 200
        assert response.json()['status'] == 'alive'

    @pytest.mark.asyncio
    async def test_deep_reports_memory_rate_limit_store(self, client: AsyncClient):
        response = await client.get('/api/v1/health/deep')

        assert response.status_code == 200
        checks = response.json()['checks']
        assert checks['redis']['connection'] == 'memory'
        assert checks['environment']['missing_critical'] == []
