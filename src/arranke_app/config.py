"""
Runtime configuration read from environment variables.

BACKEND               'memory' (default) or 'supabase'
SUPABASE_URL          project URL, required for the supabase backend
SUPABASE_KEY          anon or service key, required for the supabase backend
LOGIN_PROMPT_SECONDS  how long the sign-in prompt stays visible (default 3)
LISTING_NAME          listing the demo votes on (default 'arranke-demo')
LOG_LEVEL             loguru level for stderr (default INFO)
DEMO_EMAIL            supabase account the demo signs in with (optional)
DEMO_PASSWORD         password of that account (optional)
"""

import os

from pydantic import BaseModel

from arranke_toolkit.reactions.ledger import LOGIN_PROMPT_SECONDS

BACKENDS = ("memory", "supabase")


class Settings(BaseModel):
    backend: str = "memory"
    supabase_url: str | None = None
    supabase_key: str | None = None
    login_prompt_seconds: float = LOGIN_PROMPT_SECONDS
    listing_name: str = "arranke-demo"
    log_level: str = "INFO"
    demo_email: str | None = None
    demo_password: str | None = None


def load_settings() -> Settings:
    backend = os.environ.get("BACKEND", "memory").lower().strip()
    if backend not in BACKENDS:
        raise ValueError(f"Unsupported backend {backend!r}. Choose 'memory' or 'supabase'.")
    settings = Settings(
        backend=backend,
        supabase_url=os.environ.get("SUPABASE_URL"),
        supabase_key=os.environ.get("SUPABASE_KEY"),
        login_prompt_seconds=float(os.environ.get("LOGIN_PROMPT_SECONDS", LOGIN_PROMPT_SECONDS)),
        listing_name=os.environ.get("LISTING_NAME", "arranke-demo"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        demo_email=os.environ.get("DEMO_EMAIL"),
        demo_password=os.environ.get("DEMO_PASSWORD"),
    )
    if settings.backend == "supabase" and not (settings.supabase_url and settings.supabase_key):
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase backend")
    return settings
