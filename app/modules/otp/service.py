"""
Phone one-time-passcode issuance and verification.

A destination has at most one live challenge. Issuing replaces it; a
successful verification, an expiry check or a failed SMS send deletes it.
Verification never creates a session: existing users are sent back to
email/password sign-in, new users either get an account created from the
provisioning bundle or are told to finish registration.
"""

from datetime import datetime, timedelta, timezone
from app.config.settings import settings
from app.core.errors import DependencyError, InternalError, StateError, ThrottledError, ValidationError
from app.modules.otp.repository import ChallengeRepository
from app.modules.otp.schemas import IssueOtpResponse, ProvisioningBundle, VerifyOtpResponse
from app.modules.otp.sms import SmsDispatchError, TwilioSmsSender
from app.modules.auth.service import AuthService
from app.modules.profiles.repository import ProfileRepository
from app.modules.profiles.schemas import PHONE_PATTERN
from typing import Callable, Optional
import logging
import re
import secrets

logger = logging.getLogger(__name__)

OTP_MESSAGE_TEMPLATE = "Your BodyClone verification code is: {code}. This code expires in {minutes} minutes."

MSG_OTP_SENT = "OTP sent successfully"
MSG_EXISTING_USER = "Phone verified. Please use your email to complete login."
MSG_USER_CREATED = "Account created successfully. Please sign in with your email."
MSG_PENDING_SIGNUP = "Phone verified. Please complete your registration."


def normalize_destination(destination: str) -> str:
    return re.sub(r"\s", "", destination)


def generate_code() -> str:
    return str(secrets.randbelow(900000) + 100000)


def parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpService:
    def __init__(
        self,
        challenges: ChallengeRepository,
        profiles: ProfileRepository,
        sms: TwilioSmsSender,
        accounts: AuthService,
        ttl_minutes: Optional[int] = None,
        resend_cooldown_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.challenges = challenges
        self.profiles = profiles
        self.sms = sms
        self.accounts = accounts
        self.ttl_minutes = ttl_minutes if ttl_minutes is not None else settings.otp_ttl_minutes
        self.resend_cooldown_seconds = (
            resend_cooldown_seconds if resend_cooldown_seconds is not None
            else settings.otp_resend_cooldown_seconds
        )
        self.clock = clock

    def issue(self, destination: Optional[str]) -> IssueOtpResponse:
        """Generate a code for the destination, store it and send it by SMS"""
        if not destination or not destination.strip():
            logger.error("Missing phone number")
            raise ValidationError("Phone number is required")

        dest = normalize_destination(destination)
        if not PHONE_PATTERN.match(dest):
            logger.error("Invalid phone number format: %s", destination)
            raise ValidationError("Invalid phone number format", code="invalid-input")

        now = self.clock()
        if self.resend_cooldown_seconds > 0:
            self._check_resend_cooldown(dest, now)

        code = generate_code()
        try:
            self.challenges.replace(dest, code, now, now + timedelta(minutes=self.ttl_minutes))
        except Exception as e:
            logger.error(f"Error storing OTP: {e}")
            raise InternalError("Failed to generate OTP") from e

        body = OTP_MESSAGE_TEMPLATE.format(code=code, minutes=self.ttl_minutes)
        try:
            sid = self.sms.send(dest, body)
        except SmsDispatchError as e:
            # An undelivered code must not stay live
            self._rollback(dest)
            raise DependencyError(
                "Failed to send SMS. Please check your phone number.", code="sms-failed"
            ) from e

        logger.info("SMS sent successfully via Twilio: %s", sid)
        return IssueOtpResponse(message=MSG_OTP_SENT)

    def verify(
        self,
        destination: Optional[str],
        code: Optional[str],
        provisioning: Optional[ProvisioningBundle] = None,
    ) -> VerifyOtpResponse:
        """Consume the challenge and report whether the phone belongs to an existing user"""
        if not destination or not code:
            logger.error("Missing phone number or OTP")
            raise ValidationError("Phone number and OTP are required")

        dest = normalize_destination(destination)
        code = code.strip()

        try:
            challenge = self.challenges.find(dest, code)
        except Exception as e:
            logger.error(f"Error fetching OTP: {e}")
            raise InternalError("Failed to verify OTP") from e

        # Wrong and already-used codes look the same to the caller
        if challenge is None:
            logger.info("Invalid OTP attempted for: %s", dest)
            raise StateError("Invalid OTP code")

        if parse_timestamp(challenge["expires_at"]) < self.clock():
            logger.info("Expired OTP attempted for: %s", dest)
            try:
                self.challenges.consume(challenge["id"])
            except Exception as e:
                logger.error(f"Error deleting expired OTP: {e}")
                raise InternalError("Failed to verify OTP") from e
            raise StateError("OTP has expired. Please request a new one.", code="expired-code")

        try:
            consumed = self.challenges.consume(challenge["id"])
        except Exception as e:
            logger.error(f"Error consuming OTP: {e}")
            raise InternalError("Failed to verify OTP") from e
        if not consumed:
            logger.info("OTP already consumed for: %s", dest)
            raise StateError("Invalid OTP code")

        logger.info("OTP verified successfully for: %s", dest)

        try:
            existing_profile = self.profiles.find_by_phone(dest)
        except Exception as e:
            logger.error(f"Error looking up profile by phone: {e}")
            raise InternalError("Internal server error") from e

        if existing_profile:
            logger.info("Existing user found for phone: %s", dest)
            return VerifyOtpResponse(is_new_user=False, message=MSG_EXISTING_USER, phone=dest)

        if provisioning is not None and provisioning.is_complete():
            self._provision(dest, provisioning)
            return VerifyOtpResponse(
                is_new_user=True, user_created=True, message=MSG_USER_CREATED, phone=dest
            )

        return VerifyOtpResponse(
            is_new_user=True, user_created=False, message=MSG_PENDING_SIGNUP, phone=dest
        )

    def _provision(self, dest: str, provisioning: ProvisioningBundle) -> str:
        logger.info("Creating new user with phone: %s", dest)
        user_metadata = {
            "full_name": provisioning.full_name,
            "role": provisioning.role.value,
            "age": provisioning.age,
            "gender": provisioning.gender.value if provisioning.gender else None,
            "phone_number": dest,
        }
        user_id = self.accounts.create_confirmed_user(
            provisioning.email, provisioning.password, user_metadata
        )
        try:
            self.profiles.attach_phone(user_id, dest)
        except Exception:
            # The account exists and its metadata carries the phone number
            logger.exception("Failed to attach phone number to profile of user %s", user_id)
        return user_id

    def _check_resend_cooldown(self, dest: str, now: datetime) -> None:
        try:
            latest = self.challenges.latest_for_destination(dest)
        except Exception as e:
            logger.error(f"Error reading OTP history: {e}")
            raise InternalError("Internal server error") from e
        if not latest or not latest.get("created_at"):
            return
        elapsed = (now - parse_timestamp(latest["created_at"])).total_seconds()
        if elapsed < self.resend_cooldown_seconds:
            logger.info("OTP resend throttled for: %s", dest)
            raise ThrottledError("Please wait before requesting a new code")

    def _rollback(self, dest: str) -> None:
        try:
            self.challenges.delete_for_destination(dest)
        except Exception:
            logger.exception("Failed to roll back OTP for: %s", dest)
