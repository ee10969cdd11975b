from fastapi import APIRouter, Depends, Request
from app.config.settings import settings
from app.core.rate_limit import limiter
from app.database.supabase_client import get_service_supabase
from app.modules.auth.service import AuthService
from app.modules.otp.repository import ChallengeRepository
from app.modules.otp.schemas import IssueOtpRequest, IssueOtpResponse, VerifyOtpRequest, VerifyOtpResponse
from app.modules.otp.service import OtpService
from app.modules.otp.sms import TwilioSmsSender
from app.modules.profiles.repository import ProfileRepository
from supabase import Client

router = APIRouter(prefix="/otp", tags=["otp"])


def get_otp_service(supabase: Client = Depends(get_service_supabase)) -> OtpService:
    return OtpService(
        challenges=ChallengeRepository(supabase),
        profiles=ProfileRepository(supabase),
        sms=TwilioSmsSender(),
        accounts=AuthService(supabase, supabase),
    )


# Plain def: handlers block on Supabase and Twilio, so they run in the threadpool
@router.post("/send", response_model=IssueOtpResponse)
@limiter.limit(settings.otp_send_rate_limit)
def send_otp(
    request: Request,
    body: IssueOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    """Send a 6-digit code to the phone number"""
    return service.issue(body.destination)


@router.post("/verify", response_model=VerifyOtpResponse, response_model_exclude_none=True)
@limiter.limit(settings.otp_verify_rate_limit)
def verify_otp(
    request: Request,
    body: VerifyOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    """Verify a code; optionally create the account when the phone is new"""
    return service.verify(body.destination, body.code, body.provisioning)
