from datetime import datetime, timezone
from supabase import Client
from fastapi import HTTPException
from app.config.settings import settings
from app.modules.profiles.repository import ProfileRepository
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, AvatarResponse
from typing import Optional
import logging
import time

logger = logging.getLogger(__name__)

AVATAR_EXTENSIONS = ["jpg", "png", "jpeg", "webp"]


class ProfileService:
    def __init__(self, supabase: Client, profiles: Optional[ProfileRepository] = None):
        self.supabase = supabase
        self.profiles = profiles or ProfileRepository(supabase)

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get the profile row for a user, with the role from user_roles"""
        try:
            profile = self.profiles.get_by_user_id(user_id)
            if not profile:
                raise HTTPException(status_code=404, detail="Profile not found")
            role = self.profiles.get_role(user_id)
            return ProfileResponse(**{**profile, "role": role})
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching profile: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update profile fields that were sent"""
        try:
            update_data = profile_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            profile = self.profiles.update(user_id, update_data)
            if not profile:
                raise HTTPException(status_code=404, detail="Profile not found")
            role = self.profiles.get_role(user_id)
            return ProfileResponse(**{**profile, "role": role})
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating profile: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def upload_avatar(self, user_id: str, filename: str, content: bytes, content_type: Optional[str]) -> AvatarResponse:
        """Store the avatar at {user_id}/avatar.{ext} and point the profile at it"""
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Please upload an image file.")
        if len(content) > settings.avatar_max_bytes:
            raise HTTPException(status_code=400, detail="Please upload an image smaller than 5MB.")

        ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "jpg"
        path = f"{user_id}/avatar.{ext}"
        try:
            bucket = self.supabase.storage.from_(settings.avatar_bucket)
            bucket.upload(path, content, {"content-type": content_type, "upsert": "true"})
            public_url = bucket.get_public_url(path)
            # Cache-busting so clients refetch after an overwrite
            avatar_url = f"{public_url}?t={int(time.time() * 1000)}"
            self.profiles.update(user_id, {
                "avatar_url": avatar_url,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            })
            logger.info("Avatar uploaded for user %s", user_id)
            return AvatarResponse(avatar_url=avatar_url, message="Avatar uploaded")
        except Exception as e:
            logger.error(f"Failed to upload avatar: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload avatar.")

    def remove_avatar(self, user_id: str) -> AvatarResponse:
        try:
            paths = [f"{user_id}/avatar.{ext}" for ext in AVATAR_EXTENSIONS]
            self.supabase.storage.from_(settings.avatar_bucket).remove(paths)
            self.profiles.update(user_id, {
                "avatar_url": None,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            })
            return AvatarResponse(avatar_url=None, message="Avatar removed")
        except Exception as e:
            logger.error(f"Failed to remove avatar: {e}")
            raise HTTPException(status_code=500, detail="Failed to remove avatar.")
