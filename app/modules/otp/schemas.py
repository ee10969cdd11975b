from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from app.modules.profiles.schemas import Gender, Role
from typing import Optional


class IssueOtpRequest(BaseModel):
    destination: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("destination", "dest")
    )


class IssueOtpResponse(BaseModel):
    message: str


class ProvisioningBundle(BaseModel):
    """Profile fields used to create the account once the phone is verified."""
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    full_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("fullName", "full_name")
    )
    role: Role = Role.PATIENT
    age: Optional[int] = Field(default=None, ge=1, le=150)
    gender: Optional[Gender] = None

    def is_complete(self) -> bool:
        return bool(self.email and self.password and self.full_name)


class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    destination: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("destination", "dest")
    )
    code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("code", "otp")
    )
    provisioning: Optional[ProvisioningBundle] = Field(
        default=None, validation_alias=AliasChoices("provisioning", "userData")
    )


class VerifyOtpResponse(BaseModel):
    success: bool = True
    is_new_user: bool = Field(serialization_alias="isNewUser")
    user_created: Optional[bool] = Field(default=None, serialization_alias="userCreated")
    message: str
    phone: str
