"""
Shared fakes and fixtures.

The fakes stand in for the Supabase tables, the identity provider and Twilio
with the same method names the services call.
"""

import re
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.errors import DependencyError
from app.core.rate_limit import limiter
from app.main import app
from app.modules.otp.routes import get_otp_service
from app.modules.otp.service import OtpService
from app.modules.otp.sms import SmsDispatchError

DESTINATION = "+919999999999"


class FakeClock:
    def __init__(self, now=None):
        self.now = now or datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class FakeChallengeRepository:
    def __init__(self):
        self.rows = {}
        self.fail_insert = False

    def latest_for_destination(self, destination):
        rows = self.live_for(destination)
        return max(rows, key=lambda r: r["created_at"]) if rows else None

    def replace(self, destination, code, created_at, expires_at):
        self.delete_for_destination(destination)
        if self.fail_insert:
            raise RuntimeError("insert failed")
        row = {
            "id": str(uuid.uuid4()),
            "phone_number": destination,
            "otp_code": code,
            "created_at": created_at.isoformat(),
            "expires_at": expires_at.isoformat(),
            "verified": False,
        }
        self.rows[row["id"]] = row
        return row

    def find(self, destination, code):
        for row in self.rows.values():
            if row["phone_number"] == destination and row["otp_code"] == code and not row["verified"]:
                return dict(row)
        return None

    def consume(self, challenge_id):
        return self.rows.pop(challenge_id, None) is not None

    def delete_for_destination(self, destination):
        for row_id in [i for i, r in self.rows.items() if r["phone_number"] == destination]:
            del self.rows[row_id]

    def live_for(self, destination):
        return [r for r in self.rows.values() if r["phone_number"] == destination]

    def seed(self, destination, code, created_at, ttl_minutes=5):
        row = {
            "id": str(uuid.uuid4()),
            "phone_number": destination,
            "otp_code": code,
            "created_at": created_at.isoformat(),
            "expires_at": (created_at + timedelta(minutes=ttl_minutes)).isoformat(),
            "verified": False,
        }
        self.rows[row["id"]] = row
        return row


class FakeProfileRepository:
    def __init__(self, profiles=None):
        self.profiles = profiles or []
        self.roles = {}

    def get_by_user_id(self, user_id):
        return next((dict(p) for p in self.profiles if p["user_id"] == user_id), None)

    def find_by_phone(self, phone_number):
        return next(({"user_id": p["user_id"]} for p in self.profiles if p.get("phone_number") == phone_number), None)

    def update(self, user_id, update_data):
        for profile in self.profiles:
            if profile["user_id"] == user_id:
                profile.update(update_data)
                return dict(profile)
        return None

    def attach_phone(self, user_id, phone_number):
        if self.update(user_id, {"phone_number": phone_number}) is None:
            # Mirrors the sign-up trigger having created the row
            self.profiles.append({"user_id": user_id, "phone_number": phone_number})

    def get_role(self, user_id):
        return self.roles.get(user_id)


class FakeSmsSender:
    def __init__(self):
        self.attempts = []
        self.fail = False

    def send(self, to, body):
        self.attempts.append((to, body))
        if self.fail:
            raise SmsDispatchError("The 'To' number is not a valid phone number.")
        return f"SM{len(self.attempts):032d}"

    @property
    def last_code(self):
        return re.search(r"\b(\d{6})\b", self.attempts[-1][1]).group(1)


class FakeAccounts:
    def __init__(self, registered_emails=None):
        self.registered_emails = set(registered_emails or [])
        self.created = []

    def create_confirmed_user(self, email, password, user_metadata):
        if email in self.registered_emails:
            raise DependencyError(
                "A user with this email address has already been registered",
                status_code=400,
                code="account-creation-failed",
            )
        self.registered_emails.add(email)
        user_id = f"user-{len(self.created) + 1}"
        self.created.append({"user_id": user_id, "email": email, "password": password, "user_metadata": user_metadata})
        return user_id


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def challenges():
    return FakeChallengeRepository()


@pytest.fixture
def profiles():
    return FakeProfileRepository()


@pytest.fixture
def sms():
    return FakeSmsSender()


@pytest.fixture
def accounts():
    return FakeAccounts(registered_emails={"taken@example.com"})


@pytest.fixture
def otp_service(challenges, profiles, sms, accounts, clock):
    return OtpService(
        challenges=challenges,
        profiles=profiles,
        sms=sms,
        accounts=accounts,
        ttl_minutes=5,
        resend_cooldown_seconds=0,
        clock=clock,
    )


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def client(otp_service):
    app.dependency_overrides[get_otp_service] = lambda: otp_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
