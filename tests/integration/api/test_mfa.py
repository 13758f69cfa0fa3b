import re
from uuid import uuid4

import pyotp
import pytest
from httpx import AsyncClient


@pytest.fixture
def user_headers(auth_headers):
    return auth_headers("member", user_id=uuid4())


async def register_totp(client, headers):
    response = await client.post(
        "/security-extended/mfa/devices",
        json={"type": "totp", "name": "Phone app"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_register_totp_device(client: AsyncClient, user_headers):
    device = await register_totp(client, user_headers)

    assert device["type"] == "totp"
    assert device["verified"] is False
    assert len(device["secret"]) >= 16
    assert device["provisioning_uri"].startswith("otpauth://totp/")
    assert "Security%20Service" in device["provisioning_uri"]


@pytest.mark.asyncio
async def test_totp_first_verification_issues_backup_codes(
    client: AsyncClient, user_headers, runtime
):
    device = await register_totp(client, user_headers)
    code = pyotp.TOTP(device["secret"]).at(runtime.clock.now())

    response = await client.post(
        "/security-extended/mfa/verify",
        json={"device_id": device["device_id"], "code": code, "type": "totp"},
        headers=user_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["verified"] is True
    assert len(data["backup_codes"]) == 10
    assert data["remaining_backup_codes"] == 10

    backup = data["backup_codes"][0]
    response = await client.post(
        "/security-extended/mfa/verify",
        json={"device_id": device["device_id"], "code": backup, "type": "backup_code"},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["backup_codes"] == []
    assert response.json()["remaining_backup_codes"] == 9

    response = await client.post(
        "/security-extended/mfa/verify",
        json={"device_id": device["device_id"], "code": backup, "type": "backup_code"},
        headers=user_headers,
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CODE"


@pytest.mark.asyncio
async def test_wrong_totp_code_logs_event(client: AsyncClient, user_headers, runtime):
    device = await register_totp(client, user_headers)

    response = await client.post(
        "/security-extended/mfa/verify",
        json={"device_id": device["device_id"], "code": "000000", "type": "totp"},
        headers=user_headers,
    )

    # 000000 is a valid code for roughly one in a million secrets
    if response.status_code == 200:
        pytest.skip("generated secret accepts 000000")
    assert response.status_code == 401
    events = runtime.audit.get_security_events(type="UNAUTHORIZED_ACCESS")
    assert events[0].endpoint == "/security-extended/mfa/verify"


@pytest.mark.asyncio
async def test_sms_device_requires_phone_number(client: AsyncClient, user_headers):
    response = await client.post(
        "/security-extended/mfa/devices",
        json={"type": "sms", "name": "Mobile"},
        headers=user_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PHONE_NUMBER_REQUIRED"


@pytest.mark.asyncio
async def test_sms_code_flow(client: AsyncClient, user_headers, sms_sender):
    device = (
        await client.post(
            "/security-extended/mfa/devices",
            json={"type": "sms", "name": "Mobile", "phone_number": "+15550100"},
            headers=user_headers,
        )
    ).json()
    assert device["secret"] is None

    response = await client.post(
        "/security-extended/mfa/sms", json={"device_id": device["device_id"]}, headers=user_headers
    )
    assert response.status_code == 200
    assert response.json() == {"sent": True, "expires_in": 300}

    phone_number, message = sms_sender.messages[-1]
    assert phone_number == "+15550100"
    code = re.search(r"\d{6}", message).group(0)

    response = await client.post(
        "/security-extended/mfa/verify",
        json={"device_id": device["device_id"], "code": code, "type": "sms"},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["verified"] is True

    # codes are single use
    response = await client.post(
        "/security-extended/mfa/verify",
        json={"device_id": device["device_id"], "code": code, "type": "sms"},
        headers=user_headers,
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_sms_to_totp_device_rejected(client: AsyncClient, user_headers):
    device = await register_totp(client, user_headers)

    response = await client.post(
        "/security-extended/mfa/sms", json={"device_id": device["device_id"]}, headers=user_headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "DEVICE_TYPE_MISMATCH"


@pytest.mark.asyncio
async def test_other_users_device_not_found(client: AsyncClient, user_headers, auth_headers):
    device = await register_totp(client, user_headers)

    response = await client.post(
        "/security-extended/mfa/verify",
        json={"device_id": device["device_id"], "code": "123456", "type": "totp"},
        headers=auth_headers("member", user_id=uuid4()),
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "DEVICE_NOT_FOUND"


@pytest.mark.asyncio
async def test_too_many_attempts(client: AsyncClient, user_headers, runtime):
    payload = {"device_id": str(uuid4()), "code": "123456", "type": "totp"}
    for _ in range(5):
        response = await client.post(
            "/security-extended/mfa/verify", json=payload, headers=user_headers
        )
        assert response.status_code == 404

    response = await client.post("/security-extended/mfa/verify", json=payload, headers=user_headers)

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "TOO_MANY_ATTEMPTS"
    assert len(runtime.audit.get_security_events(type="BRUTE_FORCE_ATTEMPT")) == 1


@pytest.mark.asyncio
async def test_mfa_requires_token(client: AsyncClient):
    response = await client.post(
        "/security-extended/mfa/devices", json={"type": "totp", "name": "Phone app"}
    )

    assert response.status_code in (401, 403)
