from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )

    app_env: str = "dev"
    database_url: str | None = None  # Unset = persistence unconfigured (sweep is a no-op)

    # Square (card payments)
    square_access_token: str | None = None
    square_location_id: str | None = None
    square_app_id: str | None = None  # Public app id handed to the web payment form
    square_api_base_url: str = "https://connect.squareup.com"
    square_api_version: str = "2024-01-18"

    # Resend (email)
    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com/emails"
    resend_from: str = "JetSki Miami <onboarding@resend.dev>"

    # Twilio (SMS)
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_from_number: str | None = None
    twilio_api_base_url: str = "https://api.twilio.com"

    admin_email: str = "goncharboats@gmail.com"
    waiver_signing_url: str = "https://jetskimiami.com/waiver"

    # Reminder sweep
    reminder_interval_seconds: int = 3600  # One sweep per hour
    reminder_timezone: str = "America/New_York"  # Calendar that defines "tomorrow"
    reminder_scheduler_enabled: bool = True  # Start the in-process timer on app startup

    # Feature flags
    feature_notifications_enabled: bool = True  # Confirmation fan-out after payment
    feature_reminders_enabled: bool = True  # Day-before reminder sweep

    cors_allow_origins: str = "*"  # Comma-separated list

    @property
    def email_enabled(self) -> bool:
        return bool(self.resend_api_key)

    @property
    def sms_enabled(self) -> bool:
        return bool(
            self.twilio_account_sid and self.twilio_auth_token and self.twilio_from_number
        )

    @property
    def square_enabled(self) -> bool:
        return bool(self.square_access_token and self.square_location_id)

    @property
    def database_enabled(self) -> bool:
        return bool(self.database_url)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build the settings object once per process."""
    return Settings()


# Settings will load from environment variables or .env file.
# Components receive this object explicitly instead of reading the environment.
settings = get_settings()
