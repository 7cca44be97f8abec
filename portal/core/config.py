from pydantic_settings import BaseSettings, SettingsConfigDict


BOOKING_SETTING_NAMES = (
    "ACUITY_USER_ID",
    "ACUITY_API_KEY",
    "ACUITY_APPOINTMENT_TYPE_ID",
    "ACUITY_CALENDAR_ID",
    "ACUITY_TIMEZONE",
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    PING_MESSAGE: str = "ping"
    CORS_ALLOW_ORIGINS: str = "*"

    ACUITY_BASE_URL: str = "https://acuityscheduling.com/api/v1"
    ACUITY_USER_ID: str | None = None
    ACUITY_API_KEY: str | None = None
    ACUITY_APPOINTMENT_TYPE_ID: str | None = None
    ACUITY_CALENDAR_ID: str | None = None
    ACUITY_TIMEZONE: str | None = None
    ACUITY_TIMEOUT_SECONDS: float = 10.0
    ACUITY_USE_MOCK: bool = False
    ACUITY_VALIDATE_ON_STARTUP: bool = False

    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_KEY: str | None = None

    # Timezone the booking client submits with every appointment.
    BOOKING_TIMEZONE: str = "America/Chicago"

    def missing_booking_settings(self) -> list[str]:
        return [name for name in BOOKING_SETTING_NAMES if not (getattr(self, name) or "").strip()]

    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]


settings = Settings()
