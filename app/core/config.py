from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
import json


class Settings(BaseSettings):
    # Application Settings
    app_name: str = Field(default="Ask Your Vet Notifications", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    ENVIRONMENT: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Database Configuration
    DB_HOST: str = Field(default="localhost", alias="DB_HOST")
    DB_PORT: int = Field(default=5432, alias="DB_PORT")
    DB_NAME: str = Field(default="vet_appointments", alias="DB_NAME")
    DB_USER: str = Field(default="vet_user", alias="DB_USER")
    DB_PASSWORD: str = Field(default="vet_password", alias="DB_PASSWORD")
    database_url: str = Field(default="", alias="DATABASE_URL")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", alias="LOG_FORMAT")

    # Email Configuration
    email_enabled: bool = Field(default=False, alias="EMAIL_ENABLED")
    smtp_server: str = Field(default="smtp.gmail.com", alias="SMTP_SERVER")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str = Field(default="", alias="SMTP_USERNAME")
    smtp_password: str = Field(default="", alias="SMTP_PASSWORD")
    smtp_timeout: int = Field(default=10, alias="SMTP_TIMEOUT")
    email_from: str = Field(default="noreply@askyourvet.example", alias="EMAIL_FROM")

    # Twilio Configuration
    twilio_account_sid: Optional[str] = Field(default=None, alias="TWILIO_ACCOUNT_SID")
    twilio_auth_token: Optional[str] = Field(default=None, alias="TWILIO_AUTH_TOKEN")
    twilio_phone_number: Optional[str] = Field(default=None, alias="TWILIO_PHONE_NUMBER")
    twilio_custom_sender_id: Optional[str] = Field(default=None, alias="TWILIO_CUSTOM_SENDER_ID")
    twilio_custom_phone_number: Optional[str] = Field(default=None, alias="TWILIO_CUSTOM_PHONE_NUMBER")
    twilio_messaging_service_sid: Optional[str] = Field(default=None, alias="TWILIO_MESSAGING_SERVICE_SID")
    twilio_enabled: bool = Field(default=False, alias="TWILIO_ENABLED")
    twilio_sms_enabled: bool = Field(default=True, alias="TWILIO_SMS_ENABLED")
    sms_default_country_code: str = Field(default="1", alias="SMS_DEFAULT_COUNTRY_CODE")

    # CORS Configuration
    API_CORS_ORIGINS: Optional[str] = Field(default=None, alias="API_CORS_ORIGINS")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8080"])

    # Clinic / Frontend Configuration
    clinic_name: str = Field(default="Ask Your Vet", alias="CLINIC_NAME")
    clinic_timezone: str = Field(default="UTC", alias="CLINIC_TIMEZONE")
    frontend_url: str = Field(default="http://localhost:8080", alias="FRONTEND_URL")

    # Reminder Windows
    day_ahead_window_hours: int = Field(default=24, alias="DAY_AHEAD_WINDOW_HOURS")
    hour_ahead_window_minutes: int = Field(default=60, alias="HOUR_AHEAD_WINDOW_MINUTES")
    vaccination_lookahead_days: int = Field(default=7, alias="VACCINATION_LOOKAHEAD_DAYS")
    vaccination_reminder_retry_on_failure: bool = Field(default=True, alias="VACCINATION_REMINDER_RETRY_ON_FAILURE")
    default_appointment_duration_minutes: int = Field(default=30, alias="DEFAULT_APPOINTMENT_DURATION_MINUTES")

    # Scheduler trigger (hosted cron calling the reminder endpoints)
    scheduler_token: Optional[str] = Field(default=None, alias="SCHEDULER_TOKEN")

    # Development Settings
    seed_database: bool = Field(default=False, alias="SEED_DATABASE")

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Handle wildcard for all origins
            if v.strip() == "*":
                return ["*"]
            try:
                return json.loads(v)
            except ValueError:
                return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('clinic_timezone')
    @classmethod
    def validate_timezone(cls, v):
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def DATABASE_URL(self) -> str:
        if self.database_url.startswith(("postgresql://", "postgresql+psycopg2://", "sqlite://")):
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def database_echo(self) -> bool:
        return self.debug and self.is_development

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
