from __future__ import annotations

import html
from typing import Any, Dict, Optional

import requests
import resend
from resend.exceptions import ResendError
from loguru import logger

from garage_invoice.config import Settings, get_settings
from garage_invoice.errors import ConfigurationError, DeliveryError, DeliveryInputError


DEFAULT_SUBJECT = "Invoice"
DEFAULT_MESSAGE = "Please find the invoice attached."
ATTACHMENT_NAME = "invoice.pdf"


class Mailer:
    """Send invoice PDFs through the Resend email API."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def build_params(
        self,
        to: str,
        pdf: bytes,
        subject: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        return {
            "from": self.settings.resend_from_email,
            "to": [to],
            "subject": subject or DEFAULT_SUBJECT,
            "html": f"<p>{html.escape(message or DEFAULT_MESSAGE)}</p>",
            "attachments": [{"filename": ATTACHMENT_NAME, "content": list(pdf)}],
        }

    def send_invoice(
        self,
        to: Optional[str],
        pdf: Optional[bytes],
        subject: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not self.settings.resend_api_key:
            raise ConfigurationError("Resend API key is not configured")
        if not to or not pdf:
            raise DeliveryInputError("Email and PDF file are required")

        resend.api_key = self.settings.resend_api_key
        params = self.build_params(to, pdf, subject=subject, message=message)
        try:
            result = resend.Emails.send(params)
        except (ResendError, requests.RequestException) as exc:
            logger.error("Resend error: {}", exc)
            raise DeliveryError(getattr(exc, "message", None) or str(exc) or "Failed to send email") from exc
        logger.info("Sent invoice to {} ({})", to, (result or {}).get("id"))
        return dict(result or {})
