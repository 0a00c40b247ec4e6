"""Outbound email for group notifications.

Senders report delivery per message as a ``NotificationOutcome`` instead of
raising on a rejected message; transport errors (timeouts, refused
connections) still raise and are isolated by the caller.
"""

from __future__ import annotations

import html
import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

import httpx

from shelfy.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str
    text: str


@dataclass(frozen=True)
class NotificationOutcome:
    recipient: str
    ok: bool
    error: str | None = None


class NotificationSender(Protocol):
    def send(self, recipient: str, content: EmailContent) -> NotificationOutcome: ...

    def close(self) -> None: ...


class LogEmailSender:
    """Writes emails to the log. Used in local and test environments."""

    def send(self, recipient: str, content: EmailContent) -> NotificationOutcome:
        logger.info("email to=%s subject=%r\n%s", recipient, content.subject, content.text)
        return NotificationOutcome(recipient=recipient, ok=True)

    def close(self) -> None:
        pass


class ResendEmailSender:
    """Sends email through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        from_address: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self._from = from_address
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    def send(self, recipient: str, content: EmailContent) -> NotificationOutcome:
        response = self._client.post(
            "/emails",
            json={
                "from": self._from,
                "to": [recipient],
                "subject": content.subject,
                "html": content.html,
                "text": content.text,
            },
        )
        if response.is_success:
            return NotificationOutcome(recipient=recipient, ok=True)
        return NotificationOutcome(
            recipient=recipient,
            ok=False,
            error=f"HTTP {response.status_code}: {response.text[:200]}",
        )

    def close(self) -> None:
        self._client.close()


def get_notification_sender() -> NotificationSender:
    if settings.EMAIL_BACKEND == "resend":
        if not settings.RESEND_API_KEY:
            raise RuntimeError("EMAIL_BACKEND=resend requires RESEND_API_KEY")
        return ResendEmailSender(
            settings.RESEND_API_KEY,
            f"{settings.EMAIL_FROM_NAME} <{settings.RESEND_FROM_EMAIL}>",
            base_url=settings.RESEND_API_URL,
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    return LogEmailSender()


def group_management_url(group_id: uuid.UUID) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/groups/{group_id}/edit"


def build_join_request_email(
    *,
    admin_name: str | None,
    requester_name: str | None,
    group_name: str,
    group_id: uuid.UUID,
) -> EmailContent:
    admin_name = admin_name or "Admin"
    requester_name = requester_name or "Un utilisateur"
    url = group_management_url(group_id)

    subject = f"Nouvelle demande pour rejoindre {group_name}"
    text = (
        f"Bonjour {admin_name},\n\n"
        f"{requester_name} souhaite rejoindre le groupe « {group_name} ».\n"
        f"Acceptez ou refusez la demande ici : {url}\n"
    )
    body = (
        f"<p>Bonjour {html.escape(admin_name)},</p>"
        f"<p><strong>{html.escape(requester_name)}</strong> souhaite rejoindre le groupe "
        f"« {html.escape(group_name)} ».</p>"
        f'<p><a href="{html.escape(url, quote=True)}">Gérer les demandes</a></p>'
    )
    return EmailContent(subject=subject, html=body, text=text)
