from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for OTP tables and admin user creation

    # Twilio
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None

    # OTP
    otp_ttl_minutes: int = 5
    otp_resend_cooldown_seconds: int = 0  # 0 disables the server-side resend throttle
    otp_send_rate_limit: str = "5/minute"
    otp_verify_rate_limit: str = "10/minute"

    # Storage
    avatar_bucket: str = "avatars"
    avatar_max_bytes: int = 5 * 1024 * 1024

    # Auth
    password_reset_redirect_url: str = "http://localhost:5173/auth?mode=reset"

    # App
    app_name: str = "bodyclone-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "*"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
