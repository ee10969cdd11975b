"""
Core dependencies for route protection and service wiring
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import AuthService
from supabase import Client

security = HTTPBearer()


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin: Client = Depends(get_service_supabase),
) -> AuthService:
    return AuthService(supabase, admin)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data
