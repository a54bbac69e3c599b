from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration.

    Values are loaded from environment variables and optional .env file.
    Business rules (working hours, timeslot length, limits) live in the
    database settings row, not here.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    # App
    app_name: str = "Kart Booking API"
    environment: str = "dev"  # dev|staging|prod
    api_prefix: str = "/api"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Database
    database_url: str = "sqlite:///./kart_booking.db"

    # Security / JWT
    secret_key: str = "CHANGE_ME"  # change in prod
    access_token_exp_minutes: int = 60 * 24
    jwt_algorithm: str = "HS256"

    # Email (SMTP), used when the settings row has no transport configured
    smtp_host: str = "localhost"
    smtp_port: int = 1025
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = False
    email_from: str = "no-reply@example.com"

    # Wall-clock timezone of the track; timeslots are local "HH:MM"
    timezone: str = "Europe/Tallinn"

    # Serialize booking creation per date (lock row + re-validation in one transaction)
    booking_serialize_writes: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
