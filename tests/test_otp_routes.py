from fastapi.testclient import TestClient

from app.config.settings import settings
from app.main import app
from app.modules.otp.routes import get_otp_service

from conftest import DESTINATION

SEND_URL = "/api/v1/otp/send"
VERIFY_URL = "/api/v1/otp/verify"


def test_send_returns_success_message(client, sms):
    resp = client.post(SEND_URL, json={"destination": DESTINATION})

    assert resp.status_code == 200
    assert resp.json() == {"message": "OTP sent successfully"}
    assert sms.attempts[0][0] == DESTINATION


def test_send_accepts_dest_key(client, challenges):
    resp = client.post(SEND_URL, json={"dest": DESTINATION})

    assert resp.status_code == 200
    assert len(challenges.live_for(DESTINATION)) == 1


def test_send_without_destination_is_400(client):
    resp = client.post(SEND_URL, json={})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Phone number is required"}


def test_send_with_malformed_destination_is_400(client, challenges):
    resp = client.post(SEND_URL, json={"destination": "notaphone"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid phone number format"}
    assert challenges.rows == {}


def test_send_sms_failure_is_500(client, sms, challenges):
    sms.fail = True

    resp = client.post(SEND_URL, json={"destination": DESTINATION})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to send SMS. Please check your phone number."}
    assert challenges.rows == {}


def test_send_store_failure_is_500(client, challenges):
    challenges.fail_insert = True

    resp = client.post(SEND_URL, json={"destination": DESTINATION})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to generate OTP"}


def test_send_is_rate_limited_per_client(client):
    for _ in range(5):
        assert client.post(SEND_URL, json={"destination": DESTINATION}).status_code == 200

    resp = client.post(SEND_URL, json={"destination": DESTINATION})

    assert resp.status_code == 429
    assert "error" in resp.json()


def test_verify_existing_user_body(client, sms, profiles):
    profiles.profiles.append({"user_id": "user-9", "phone_number": DESTINATION})
    client.post(SEND_URL, json={"destination": DESTINATION})

    resp = client.post(VERIFY_URL, json={"destination": DESTINATION, "code": sms.last_code})

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "isNewUser": False,
        "message": "Phone verified. Please use your email to complete login.",
        "phone": DESTINATION,
    }


def test_verify_new_user_pending_body(client, sms):
    client.post(SEND_URL, json={"destination": DESTINATION})

    resp = client.post(VERIFY_URL, json={"destination": DESTINATION, "code": sms.last_code})

    assert resp.status_code == 200
    body = resp.json()
    assert body["isNewUser"] is True
    assert body["userCreated"] is False
    assert body["message"] == "Phone verified. Please complete your registration."


def test_verify_with_dest_otp_userdata_keys_creates_account(client, sms, accounts):
    client.post(SEND_URL, json={"dest": DESTINATION})

    resp = client.post(VERIFY_URL, json={
        "dest": DESTINATION,
        "otp": sms.last_code,
        "userData": {
            "email": "new@example.com",
            "password": "secret123",
            "fullName": "Asha Rao",
            "role": "patient",
            "age": 29,
            "gender": "other",
        },
    })

    assert resp.status_code == 200
    assert resp.json()["userCreated"] is True
    assert len(accounts.created) == 1


def test_verify_numeric_code_is_accepted(client, sms):
    client.post(SEND_URL, json={"destination": DESTINATION})

    resp = client.post(VERIFY_URL, json={"destination": DESTINATION, "code": int(sms.last_code)})

    assert resp.status_code == 200


def test_verify_missing_fields_is_400(client):
    resp = client.post(VERIFY_URL, json={"destination": DESTINATION})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Phone number and OTP are required"}


def test_verify_wrong_code_is_400(client):
    resp = client.post(VERIFY_URL, json={"destination": DESTINATION, "code": "123456"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid OTP code"}


def test_verify_expired_code_is_400(client, sms, clock):
    client.post(SEND_URL, json={"destination": DESTINATION})
    clock.advance(301)

    resp = client.post(VERIFY_URL, json={"destination": DESTINATION, "code": sms.last_code})

    assert resp.status_code == 400
    assert resp.json() == {"error": "OTP has expired. Please request a new one."}


def test_verify_duplicate_email_returns_provider_message(client, sms):
    client.post(SEND_URL, json={"destination": DESTINATION})

    resp = client.post(VERIFY_URL, json={
        "destination": DESTINATION,
        "code": sms.last_code,
        "provisioning": {"email": "taken@example.com", "password": "secret123", "fullName": "Asha Rao"},
    })

    assert resp.status_code == 400
    assert resp.json() == {"error": "A user with this email address has already been registered"}


def test_verify_unknown_role_is_400(client):
    resp = client.post(VERIFY_URL, json={
        "destination": DESTINATION,
        "code": "123456",
        "provisioning": {"email": "a@example.com", "password": "secret123", "fullName": "Asha", "role": "admin"},
    })

    assert resp.status_code == 400
    assert "error" in resp.json()


def test_preflight_is_permissive(client):
    resp = client.options(SEND_URL, headers={
        "Origin": "https://bodyclone.example",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
    })

    assert resp.status_code == 200
    assert "access-control-allow-origin" in resp.headers
    allowed = resp.headers["access-control-allow-headers"].lower()
    for header in ("authorization", "x-client-info", "apikey", "content-type"):
        assert header in allowed


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_verify_is_rate_limited_per_client(client):
    for _ in range(10):
        resp = client.post(VERIFY_URL, json={"destination": DESTINATION, "code": "123456"})
        assert resp.status_code == 400

    resp = client.post(VERIFY_URL, json={"destination": DESTINATION, "code": "123456"})

    assert resp.status_code == 429
    assert "error" in resp.json()


def test_default_rate_limit_applies_to_undecorated_routes(client):
    statuses = [client.get("/").status_code for _ in range(101)]

    assert statuses[:100] == [200] * 100
    assert statuses[100] == 429


def test_unexpected_failure_hides_internal_detail(monkeypatch):
    class BrokenService:
        def issue(self, destination):
            raise RuntimeError("connection to db.internal:5432 refused")

    monkeypatch.setattr(settings, "debug", False)
    app.dependency_overrides[get_otp_service] = lambda: BrokenService()
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            resp = test_client.post(SEND_URL, json={"destination": DESTINATION})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
