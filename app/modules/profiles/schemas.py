from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import re

PHONE_PATTERN = re.compile(r"^\+?[1-9][0-9]{9,14}$")


class Role(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=2)
    age: Optional[int] = Field(default=None, ge=1, le=150)
    gender: Optional[Gender] = None
    phone_number: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = re.sub(r"\s", "", value)
        if value and not PHONE_PATTERN.match(value):
            raise ValueError("Please enter a valid phone number (e.g., +919999999999)")
        return value or None


class ProfileResponse(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    phone_number: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[Role] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvatarResponse(BaseModel):
    avatar_url: Optional[str] = None
    message: str
