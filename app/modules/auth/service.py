import hashlib
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from app.config.settings import settings
from app.core.errors import DependencyError
from fastapi import HTTPException
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


class AuthService:
    def __init__(self, supabase: Client, admin: Optional[Client] = None):
        self.supabase = supabase
        # service_role client for auth.admin calls
        self.admin = admin or supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            user_metadata = {
                "full_name": register_data.full_name,
                "role": register_data.role.value,
                "age": register_data.age,
                "gender": register_data.gender.value,
            }
            if register_data.phone_number:
                user_metadata["phone_number"] = register_data.phone_number

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="Account created! Please check your email to verify your account."
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def create_confirmed_user(self, email: str, password: str, user_metadata: Dict[str, Any]) -> str:
        """Create a user whose email is already confirmed. Returns the new user id."""
        try:
            auth_response = self.admin.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": user_metadata,
            })
        except Exception as e:
            logger.error(f"Error creating user: {e}")
            message = getattr(e, "message", None) or str(e)
            raise DependencyError(message, status_code=400, code="account-creation-failed") from e

        if not auth_response.user:
            raise DependencyError("Failed to create user", status_code=400, code="account-creation-failed")
        logger.info("User created successfully: %s", auth_response.user.id)
        return auth_response.user.id

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def send_password_reset(self, email: str) -> None:
        try:
            self.supabase.auth.reset_password_for_email(
                email, {"redirect_to": settings.password_reset_redirect_url}
            )
        except Exception as e:
            logger.error(f"Error sending password reset email: {e}")
            raise HTTPException(status_code=500, detail="Failed to send password reset email.")

    def update_password(self, user_id: str, password: str) -> None:
        try:
            response = self.admin.auth.admin.update_user_by_id(user_id, {"password": password})
        except Exception as e:
            logger.error(f"Error updating password: {e}")
            raise HTTPException(status_code=500, detail="Failed to update password.")
        if not response.user:
            raise HTTPException(status_code=404, detail="User not found")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "phone": user.phone,
                "user_metadata": user.user_metadata or {},
                "created_at": user.created_at,
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")
