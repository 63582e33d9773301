"""Outbound email.

The actual delivery happens in a small hosted function that forwards to the
mail provider. This module only builds the message and POSTs it there. A
failed delivery is reported as an ``EmailResult`` rather than raised, so the
caller decides what a failure means for its own operation.
"""

from __future__ import annotations

import html
import logging
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel

from ..core.config import AppSettings

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset Request"


class EmailMessage(BaseModel):
    recipient: str
    subject: str
    html_body: str
    reply_to: Optional[str] = None


class EmailResult(BaseModel):
    ok: bool
    error: Optional[str] = None


class Mailer(Protocol):
    def send(self, message: EmailMessage) -> EmailResult: ...


class LogMailer:
    """Development mailer: writes the message to the log and reports success."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> EmailResult:
        self.sent.append(message)
        logger.info(
            "email.logged",
            extra={"extra_data": {"recipient": message.recipient, "subject": message.subject}},
        )
        return EmailResult(ok=True)


class HttpMailer:
    def __init__(
        self,
        url: str,
        *,
        api_key: str = "",
        sender: str = "",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self.transport = transport

    def _payload(self, message: EmailMessage) -> dict[str, str]:
        payload = {"to": message.recipient, "subject": message.subject, "content": message.html_body}
        if message.reply_to:
            payload["replyTo"] = message.reply_to
        if self.sender:
            payload["from"] = self.sender
        return payload

    def send(self, message: EmailMessage) -> EmailResult:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.url, json=self._payload(message), headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("email.transport_error", extra={"extra_data": {"error": str(exc)}})
            return EmailResult(ok=False, error=f"Failed to send email: {exc}")
        if response.is_success:
            logger.info("email.sent", extra={"extra_data": {"recipient": message.recipient}})
            return EmailResult(ok=True)
        detail = _error_detail(response)
        logger.warning(
            "email.rejected",
            extra={"extra_data": {"status": response.status_code, "detail": detail}},
        )
        return EmailResult(ok=False, error=f"Failed to send email: {detail}")


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP {response.status_code}"


def password_reset_message(recipient: str, reset_link: str, *, expires_in_minutes: int = 60) -> EmailMessage:
    expiry = "1 hour" if expires_in_minutes == 60 else f"{expires_in_minutes} minutes"
    body = (
        "<h2>Password Reset Request</h2>"
        "<p>You recently requested to reset your password. Click the link below to reset it:</p>"
        f'<p><a href="{html.escape(reset_link, quote=True)}">Reset Password</a></p>'
        "<p>If you didn't request this, please ignore this email.</p>"
        f"<p>This link will expire in {expiry} for security purposes.</p>"
    )
    return EmailMessage(recipient=recipient, subject=RESET_SUBJECT, html_body=body)


def build_mailer(settings: AppSettings) -> Mailer:
    if not settings.EMAIL_API_URL:
        return LogMailer()
    return HttpMailer(
        settings.EMAIL_API_URL,
        api_key=settings.EMAIL_API_KEY,
        sender=settings.EMAIL_FROM,
        timeout=settings.EMAIL_TIMEOUT,
    )
