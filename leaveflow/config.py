from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

WithdrawCreditPolicy = Literal["always", "skip_rejected", "pending_only"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "LeaveFlow"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://leaveflow:leaveflow@db:5432/leaveflow"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Auth
    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    session_cookie_name: str = "leaveflow_session"
    bcrypt_rounds: int = 12

    # Leave ledger
    default_leave_balance: int = 25
    withdraw_credit_policy: WithdrawCreditPolicy = "always"

    # Slack notifications; both unset means notifications are logged and skipped.
    slack_webhook_url: str | None = None
    slack_bot_token: str | None = None
    slack_channel: str = "#general"
    notification_timeout_seconds: float = 10.0


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
