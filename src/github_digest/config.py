"""Configuration management."""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_EVENTS_URL = "https://api.github.com/events"


@dataclass
class Config:
    # Supabase
    supabase_url: str
    supabase_key: str

    # SMTP
    mail_user: str
    mail_password: str
    mail_from: str
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465

    # GitHub
    github_token: str | None = None
    events_url: str = DEFAULT_EVENTS_URL
    events_per_page: int = 30

    # App
    backend_secret: str | None = None
    max_concurrent_sends: int = 5
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    port: int = 4000
    log_level: str = "INFO"
    environment: str = "development"


def _require(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise ConfigError(f"{name} must be set")
    return value


def _int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    mail_user = _require("MAIL_USER")
    origins = os.environ.get("CORS_ORIGINS", "*")

    return Config(
        supabase_url=_require("SUPABASE_URL").rstrip("/"),
        supabase_key=_require("SUPABASE_SERVICE_KEY"),
        mail_user=mail_user,
        mail_password=_require("MAIL_PASSWORD"),
        mail_from=os.environ.get("MAIL_FROM") or mail_user,
        smtp_host=os.environ.get("SMTP_HOST", "smtp.gmail.com"),
        smtp_port=_int("SMTP_PORT", 465),
        github_token=os.environ.get("GITHUB_TOKEN") or None,
        events_url=os.environ.get("GITHUB_EVENTS_URL", DEFAULT_EVENTS_URL),
        events_per_page=_int("GITHUB_EVENTS_PER_PAGE", 30),
        backend_secret=os.environ.get("BACKEND_SECRET") or None,
        max_concurrent_sends=max(1, _int("MAX_CONCURRENT_SENDS", 5)),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        port=_int("PORT", 4000),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        environment=os.environ.get("ENVIRONMENT", "development"),
    )
