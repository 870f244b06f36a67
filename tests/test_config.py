import pytest

from github_digest import config as config_module
from github_digest.config import load_config
from github_digest.errors import ConfigError

REQUIRED = {
    "SUPABASE_URL": "https://example.supabase.co/",
    "SUPABASE_SERVICE_KEY": "service-key",
    "MAIL_USER": "digest@example.com",
    "MAIL_PASSWORD": "app-password",
}

OPTIONAL = [
    "MAIL_FROM", "SMTP_HOST", "SMTP_PORT", "BACKEND_SECRET", "GITHUB_TOKEN",
    "GITHUB_EVENTS_URL", "GITHUB_EVENTS_PER_PAGE", "MAX_CONCURRENT_SENDS",
    "CORS_ORIGINS", "PORT", "LOG_LEVEL", "ENVIRONMENT",
]


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    for name in OPTIONAL:
        monkeypatch.delenv(name, raising=False)
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


def test_defaults(env):
    config = load_config()

    assert config.supabase_url == "https://example.supabase.co"
    assert config.mail_from == "digest@example.com"
    assert config.smtp_host == "smtp.gmail.com"
    assert config.smtp_port == 465
    assert config.backend_secret is None
    assert config.github_token is None
    assert config.events_url == "https://api.github.com/events"
    assert config.max_concurrent_sends == 5
    assert config.cors_origins == ["*"]
    assert config.port == 4000


def test_overrides(env):
    env.setenv("BACKEND_SECRET", "s3cret")
    env.setenv("GITHUB_TOKEN", "ghp_abc")
    env.setenv("MAIL_FROM", "noreply@example.com")
    env.setenv("PORT", "8080")
    env.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    env.setenv("MAX_CONCURRENT_SENDS", "0")

    config = load_config()

    assert config.backend_secret == "s3cret"
    assert config.github_token == "ghp_abc"
    assert config.mail_from == "noreply@example.com"
    assert config.port == 8080
    assert config.cors_origins == ["https://a.example", "https://b.example"]
    assert config.max_concurrent_sends == 1


@pytest.mark.parametrize("name", sorted(REQUIRED))
def test_missing_required(env, name):
    env.delenv(name)

    with pytest.raises(ConfigError, match=name):
        load_config()


def test_bad_integer(env):
    env.setenv("PORT", "eighty")

    with pytest.raises(ConfigError, match="PORT"):
        load_config()
