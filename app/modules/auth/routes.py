from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    ForgotPasswordRequest, UpdatePasswordRequest, MessageResponse
)
from app.modules.auth.service import AuthService
from app.modules.profiles.repository import ProfileRepository
from app.core.dependencies import get_auth_service, get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user with email and password"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a password reset link to the email"""
    service.send_password_reset(request.email)
    return MessageResponse(message="Password reset email sent")


@router.post("/update-password", response_model=MessageResponse)
async def update_password(
    request: UpdatePasswordRequest,
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Set a new password for the authenticated user (reset link lands here)"""
    service.update_password(current_user["id"], request.password)
    return MessageResponse(message="Password updated successfully")


@router.get("/me")
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_service_supabase),
):
    """Get current authenticated user and their role (for frontend UI)."""
    role = ProfileRepository(supabase).get_role(current_user["id"])
    return {**current_user, "role": role}
