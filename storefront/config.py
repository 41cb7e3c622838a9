"""Runtime configuration for the storefront (toggleable during tests/runtime)."""
import os
from typing import NamedTuple


class Settings(NamedTuple):
    app_secret: str
    frontend_url: str
    mail_from: str
    smtp_host: str
    smtp_port: int
    currency: str
    log_level: str


def load_settings() -> Settings:
    return Settings(
        app_secret=os.getenv("APP_SECRET", "dev-secret-change-me-in-production"),
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:7777"),
        mail_from=os.getenv("MAIL_FROM", "shop@example.com"),
        smtp_host=os.getenv("SMTP_HOST", "localhost"),
        smtp_port=int(os.getenv("SMTP_PORT", "25")),
        # Stripe-style ISO code; amounts are always integer minor units
        currency=os.getenv("PAYMENT_CURRENCY", "CAD"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


state = load_settings()


def set_settings(**overrides) -> Settings:
    global state
    state = state._replace(**overrides)
    return state


def get_settings() -> Settings:
    return state
