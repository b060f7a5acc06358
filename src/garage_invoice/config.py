from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: Optional[str] = None):
    return field(default_factory=lambda: os.environ.get(name, default))


def _env_float(name: str, default: float):
    def factory() -> float:
        try:
            return float(os.environ.get(name, default))
        except ValueError:
            return default

    return field(default_factory=factory)


def _env_bool(name: str, default: bool):
    def factory() -> bool:
        raw = os.environ.get(name)
        if raw is None:
            return default
        return raw.strip().lower() not in ("0", "false", "no", "off", "")

    return field(default_factory=factory)


@dataclass
class Settings:
    """Runtime settings, read from the environment (and ``.env``) on creation."""

    fetch_timeout_secs: float = _env_float("LISTING_FETCH_TIMEOUT_SECS", 30.0)
    user_agent: str = _env("HTTP_USER_AGENT", "garage-invoice/0.1")
    fetch_images: bool = _env_bool("INVOICE_FETCH_IMAGES", True)

    resend_api_key: Optional[str] = _env("RESEND_API_KEY")
    resend_from_email: str = _env("RESEND_FROM_EMAIL", "onboarding@resend.dev")

    # Issuer details printed on every invoice
    company_name: str = _env("INVOICE_COMPANY_NAME", "Garage Technologies, Inc.")
    company_website: str = _env("INVOICE_COMPANY_WEBSITE", "www.shopgarage.com")
    company_phone: str = _env("INVOICE_COMPANY_PHONE", "(201) 293-7164")
    company_email: str = _env("INVOICE_COMPANY_EMAIL", "support@shopgarage.com")
    support_email: str = _env("INVOICE_SUPPORT_EMAIL", "support@withgarage.com")

    log_level: str = _env("LOG_LEVEL", "INFO")


def get_settings() -> Settings:
    return Settings()
