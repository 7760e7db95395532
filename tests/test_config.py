import pytest

from arranke_app.config import load_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("BACKEND", "SUPABASE_URL", "SUPABASE_KEY", "LOGIN_PROMPT_SECONDS", "LISTING_NAME", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_to_memory_backend():
    settings = load_settings()

    assert settings.backend == "memory"
    assert settings.login_prompt_seconds == 3.0


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("BACKEND", " Supabase ")
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "key")
    monkeypatch.setenv("LOGIN_PROMPT_SECONDS", "1.5")

    settings = load_settings()

    assert settings.backend == "supabase"
    assert settings.login_prompt_seconds == 1.5


def test_supabase_backend_requires_credentials(monkeypatch):
    monkeypatch.setenv("BACKEND", "supabase")

    with pytest.raises(ValueError):
        load_settings()


def test_unknown_backend_is_rejected(monkeypatch):
    monkeypatch.setenv("BACKEND", "postgres")

    with pytest.raises(ValueError):
        load_settings()
