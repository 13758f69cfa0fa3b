import pytest
from httpx import AsyncClient

TEST_IDS = [
    "rate-limiting",
    "api-key-validation",
    "risk-scoring",
    "cache",
    "backup-codes",
    "audit-logging",
]


@pytest.mark.asyncio
@pytest.mark.parametrize("test_id", TEST_IDS)
async def test_self_checks_pass(client: AsyncClient, auth_headers, test_id):
    response = await client.get(f"/security-extended/tests/{test_id}", headers=auth_headers())

    assert response.status_code == 200
    assert response.json()["success"] is True, response.json()


@pytest.mark.asyncio
async def test_security_config_passes_with_configured_secret(client: AsyncClient, auth_headers):
    response = await client.get("/security-extended/tests/security-config", headers=auth_headers())

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["recommendations"] == []


@pytest.mark.asyncio
async def test_run_is_logged(client: AsyncClient, auth_headers, runtime):
    await client.get("/security-extended/tests/cache", headers=auth_headers())

    events = runtime.audit.get_security_events(type="SECURITY_TEST_EXECUTED")
    assert len(events) == 1
    assert events[0].metadata == {"test_id": "cache"}
    assert events[0].severity == "low"


@pytest.mark.asyncio
async def test_unknown_test(client: AsyncClient, auth_headers):
    response = await client.get("/security-extended/tests/port-scan", headers=auth_headers())

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "UNKNOWN_TEST"


@pytest.mark.asyncio
async def test_requires_admin(client: AsyncClient, auth_headers):
    response = await client.get("/security-extended/tests/cache", headers=auth_headers("member"))

    assert response.status_code == 403
