from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOGSTREAM_",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = "Logstream"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_v1_str: str = "/api/v1"

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # Outbound HTTP
    http_timeout: float = 30.0
    user_agent: str = "logstream/0.1"

    # Polling coordinator
    poll_interval_ms: int = 15000
    update_throttle_ms: int = 500
    poll_buffer_size: int = 1000

    # Activity tracker
    activity_sweep_ms: int = 1000
    activity_window_ms: int = 3000

    # Providers
    cloudwatch_lookback_minutes: int = 60
    cloudwatch_max_pages: int = 20
    gcp_mock_entries: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("poll_interval_ms", "update_throttle_ms", "activity_sweep_ms", "activity_window_ms")
    @classmethod
    def validate_positive_interval(cls, v):
        if v <= 0:
            raise ValueError("Intervals must be positive")
        return v


settings = Settings()
