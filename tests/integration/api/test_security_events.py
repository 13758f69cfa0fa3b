import pytest
from httpx import AsyncClient

EVENT = {
    "type": "UNAUTHORIZED_ACCESS",
    "severity": "medium",
    "source": "web",
    "description": "Login with revoked token",
    "metadata": {"attempt": 1},
}


@pytest.mark.asyncio
async def test_report_and_list_events(client: AsyncClient, auth_headers, tenant_id):
    """Reported events are attributed to the caller and listed newest first"""
    headers = auth_headers("owner")

    response = await client.post(
        "/security/events", json=EVENT, headers={**headers, "X-Forwarded-For": "203.0.113.5, 10.0.0.1"}
    )
    assert response.status_code == 201
    created = response.json()
    assert created["id"].startswith("sec_")
    assert created["ip_address"] == "203.0.113.5"
    assert created["organization_id"] == str(tenant_id)
    assert created["endpoint"] == "/security/events"
    assert created["resolved"] is False

    response = await client.get("/security/events", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert [e["id"] for e in data["events"]] == [created["id"]]
    assert data["limit"] == 100


@pytest.mark.asyncio
async def test_events_filtered_by_type_and_scoped_to_tenant(client: AsyncClient, auth_headers, runtime):
    from uuid import uuid4

    await client.post("/security/events", json=EVENT, headers=auth_headers("member"))
    await client.post(
        "/security/events", json={**EVENT, "type": "API_ABUSE"}, headers=auth_headers("member")
    )
    await client.post("/security/events", json=EVENT, headers=auth_headers("owner", tenant=uuid4()))

    response = await client.get(
        "/security/events", params={"type": "UNAUTHORIZED_ACCESS"}, headers=auth_headers("admin")
    )

    assert response.status_code == 200
    events = response.json()["events"]
    assert len(events) == 1
    assert events[0]["type"] == "UNAUTHORIZED_ACCESS"
    assert runtime.audit.repository.count() == 3


@pytest.mark.asyncio
async def test_list_events_requires_admin(client: AsyncClient, auth_headers):
    response = await client.get("/security/events", headers=auth_headers("viewer"))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_list_events_requires_token(client: AsyncClient):
    response = await client.get("/security/events")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_limit_is_validated(client: AsyncClient, auth_headers):
    response = await client.get("/security/events", params={"limit": 5000}, headers=auth_headers())

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_resolve_event(client: AsyncClient, auth_headers):
    headers = auth_headers("owner")
    event_id = (await client.post("/security/events", json=EVENT, headers=headers)).json()["id"]

    response = await client.post(f"/security/events/{event_id}/resolve", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"id": event_id, "resolved": True}

    response = await client.get("/security/events", params={"resolved": "true"}, headers=headers)
    assert [e["id"] for e in response.json()["events"]] == [event_id]


@pytest.mark.asyncio
async def test_resolve_unknown_event(client: AsyncClient, auth_headers):
    response = await client.post("/security/events/sec_0_missing/resolve", headers=auth_headers())

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "EVENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, auth_headers):
    headers = auth_headers("owner")
    for _ in range(2):
        await client.post("/security/events", json=EVENT, headers=headers)

    response = await client.get("/security/stats", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_events"] == 2
    assert data["events_by_type"]["UNAUTHORIZED_ACCESS"] == 2
    assert data["events_by_severity"]["medium"] == 2
    assert data["metrics"]["blocked_requests"] == 2
    assert data["metrics"]["rate_limit_violations"] == 0
    assert data["metrics"]["top_targeted_endpoints"] == [{"key": "/security/events", "count": 2}]


@pytest.mark.asyncio
async def test_audit_report(client: AsyncClient, auth_headers, runtime):
    headers = auth_headers("owner")
    await client.post("/security/events", json={**EVENT, "severity": "critical"}, headers=headers)

    response = await client.get("/security/audit-report", headers=headers)

    assert response.status_code == 200
    report = response.json()
    assert report["summary"]["total_events"] == 1
    assert report["summary"]["critical_events"] == 1
    assert report["top_threats"][0]["type"] == "UNAUTHORIZED_ACCESS"
    assert isinstance(report["recommendations"], list)
    assert isinstance(report["vulnerabilities"], list)


@pytest.mark.asyncio
async def test_audit_report_rejects_inverted_period(client: AsyncClient, auth_headers):
    response = await client.get(
        "/security/audit-report",
        params={"start_date": "2024-01-10T00:00:00Z", "end_date": "2024-01-01T00:00:00Z"},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PERIOD"


@pytest.mark.asyncio
async def test_patterns_flag_hostile_ip(client: AsyncClient, auth_headers):
    headers = {**auth_headers("owner"), "X-Real-IP": "198.51.100.66"}
    for _ in range(3):
        await client.post(
            "/security/events",
            json={**EVENT, "type": "BRUTE_FORCE_ATTEMPT", "severity": "critical"},
            headers=headers,
        )

    response = await client.get("/security/patterns", headers=headers)

    assert response.status_code == 200
    suspicious = response.json()["suspicious_ips"]
    assert suspicious[0]["identifier"] == "198.51.100.66"
    assert suspicious[0]["risk_score"] == 100


NAIVE_PERIOD = {"start_date": "2024-01-15T00:00:00", "end_date": "2024-01-16T00:00:00"}


@pytest.mark.asyncio
async def test_events_accept_dates_without_offset(client: AsyncClient, auth_headers):
    headers = auth_headers("owner")
    await client.post("/security/events", json=EVENT, headers=headers)

    response = await client.get("/security/events", params=NAIVE_PERIOD, headers=headers)

    assert response.status_code == 200
    assert len(response.json()["events"]) == 1


@pytest.mark.asyncio
async def test_stats_accept_dates_without_offset(client: AsyncClient, auth_headers):
    headers = auth_headers("owner")
    await client.post("/security/events", json=EVENT, headers=headers)

    response = await client.get("/security/stats", params=NAIVE_PERIOD, headers=headers)

    assert response.status_code == 200
    assert response.json()["total_events"] == 1


@pytest.mark.asyncio
async def test_audit_report_accepts_dates_without_offset(client: AsyncClient, auth_headers):
    headers = auth_headers("owner")
    await client.post("/security/events", json=EVENT, headers=headers)

    response = await client.get("/security/audit-report", params=NAIVE_PERIOD, headers=headers)

    assert response.status_code == 200
    report = response.json()
    assert report["summary"]["total_events"] == 1
    assert report["period"]["start"].startswith("2024-01-15T00:00:00")
