from pydantic import BaseModel, EmailStr, Field
from app.modules.profiles.schemas import Gender, Role
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=2)
    role: Role = Role.PATIENT
    age: int = Field(ge=1, le=150)
    gender: Gender = Gender.MALE
    phone_number: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class UpdatePasswordRequest(BaseModel):
    password: str = Field(min_length=6)


class MessageResponse(BaseModel):
    message: str
