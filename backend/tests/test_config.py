"""
IQScaler - Test Configuration API Tests
"""
import pytest
from httpx import AsyncClient

from conftest import create_config
from iqscaler.services.test_config import TestConfigService


@pytest.mark.asyncio
async def test_get_config_creates_default(client: AsyncClient):
    response = await client.get("/api/config/test")
    assert response.status_code == 200
    data = response.json()
    assert data["durationMinutes"] == 15
    assert data["totalQuestions"] == 15
    assert data["difficultyDistribution"] == [
        {"difficulty": "easy", "count": 5},
        {"difficulty": "medium", "count": 5},
        {"difficulty": "hard", "count": 5},
    ]

    # Second read returns the same record
    again = await client.get("/api/config/test")
    assert again.json()["id"] == data["id"]


@pytest.mark.asyncio
async def test_update_config(client: AsyncClient, admin):
    await client.get("/api/config/test")

    response = await client.put(
        "/api/config/test",
        json={
            "durationMinutes": 30,
            "totalQuestions": 20,
            "difficultyDistribution": [
                {"difficulty": "easy", "count": 10},
                {"difficulty": "hard", "count": 0},
            ],
        },
        headers=admin["headers"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["durationMinutes"] == 30
    assert data["totalQuestions"] == 20
    assert data["difficultyDistribution"] == [
        {"difficulty": "easy", "count": 10},
        {"difficulty": "hard", "count": 0},
    ]


@pytest.mark.asyncio
async def test_update_config_partial(client: AsyncClient, admin, db_session):
    await create_config(db_session, 12, [{"difficulty": "medium", "count": 12}], duration_minutes=20)

    response = await client.put("/api/config/test", json={"totalQuestions": 8}, headers=admin["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["totalQuestions"] == 8
    assert data["durationMinutes"] == 20


@pytest.mark.asyncio
async def test_update_config_rejects_duplicate_difficulty(client: AsyncClient, admin):
    await client.get("/api/config/test")

    response = await client.put(
        "/api/config/test",
        json={"difficultyDistribution": [
            {"difficulty": "easy", "count": 1},
            {"difficulty": "easy", "count": 2},
        ]},
        headers=admin["headers"],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_config_rejects_negative_count(client: AsyncClient, admin):
    await client.get("/api/config/test")

    response = await client.put(
        "/api/config/test",
        json={"difficultyDistribution": [{"difficulty": "easy", "count": -1}]},
        headers=admin["headers"],
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_config_without_existing(client: AsyncClient, admin):
    response = await client.put("/api/config/test", json={"totalQuestions": 8}, headers=admin["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_config_requires_admin(client: AsyncClient, user):
    response = await client.put("/api/config/test", json={"totalQuestions": 8}, headers=user["headers"])
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_default_created_by_concurrent_request(db_session, monkeypatch):
    """The default row appears between the read and the insert."""
    await create_config(db_session, 12, [{"difficulty": "medium", "count": 12}])

    service = TestConfigService(db_session)
    real_get_config = service.get_config
    calls = []

    async def stale_first_read():
        calls.append(1)
        if len(calls) == 1:
            return None
        return await real_get_config()

    monkeypatch.setattr(service, "get_config", stale_first_read)

    config = await service.get_or_create_default()
    assert config.total_questions == 12
    assert len(calls) == 2
