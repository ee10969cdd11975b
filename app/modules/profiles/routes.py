from fastapi import APIRouter, Depends, File, UploadFile
from app.database.supabase_client import get_service_supabase
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, AvatarResponse
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_service_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(current_user["id"])


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Update name, age, gender, phone number or avatar URL"""
    return service.update_profile(current_user["id"], profile_data)


@router.post("/me/avatar", response_model=AvatarResponse)
async def upload_my_avatar(
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Upload an avatar image (max 5MB); replaces the previous one"""
    content = await file.read()
    return service.upload_avatar(current_user["id"], file.filename, content, file.content_type)


@router.delete("/me/avatar", response_model=AvatarResponse)
async def remove_my_avatar(
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    return service.remove_avatar(current_user["id"])
