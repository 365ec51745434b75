"""Email transports used for courtesy notifications."""

from __future__ import annotations

import asyncio
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING, Mapping, Protocol

if TYPE_CHECKING:
    from eventhub_api.core.settings import Settings


class EmailBackend(Protocol):
    async def send_email(
        self,
        recipient: str,
        subject: str,
        body_text: str,
        *,
        body_html: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        ...


def build_message(
    recipient: str,
    subject: str,
    body_text: str,
    *,
    sender: str | None = None,
    body_html: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> EmailMessage:
    """Multipart text/html message; ``headers`` are copied verbatim (e.g. ``X-Courtesy-Id``)."""

    message = EmailMessage()
    if sender:
        message["From"] = sender
    message["To"] = recipient
    message["Subject"] = subject
    for name, value in (headers or {}).items():
        message[name] = value
    message.set_content(body_text)
    if body_html:
        message.add_alternative(body_html, subtype="html")
    return message


class SMTPEmailBackend:
    """SMTP transport; the blocking exchange runs in a worker thread."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender_email: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender_email = sender_email
        self._credentials = (username, password) if username and password else None
        self._use_tls = use_tls
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SMTPEmailBackend | None":
        """Backend for the configured relay, or ``None`` when SMTP is not set up."""

        if not settings.smtp_host or not settings.smtp_sender_email:
            return None
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender_email=settings.smtp_sender_email,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )

    async def send_email(
        self,
        recipient: str,
        subject: str,
        body_text: str,
        *,
        body_html: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        message = build_message(
            recipient,
            subject,
            body_text,
            sender=self._sender_email,
            body_html=body_html,
            headers=headers,
        )
        await asyncio.to_thread(self._deliver, message)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._credentials:
                smtp.login(*self._credentials)
            smtp.send_message(message)


class InMemoryEmailBackend:
    """Keeps outbound messages in a list instead of delivering them."""

    def __init__(self) -> None:
        self.sent_messages: list[EmailMessage] = []

    async def send_email(
        self,
        recipient: str,
        subject: str,
        body_text: str,
        *,
        body_html: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.sent_messages.append(
            build_message(recipient, subject, body_text, body_html=body_html, headers=headers)
        )

    def outbox_for(self, recipient: str) -> list[EmailMessage]:
        return [message for message in self.sent_messages if message["To"] == recipient]


__all__ = ["EmailBackend", "InMemoryEmailBackend", "SMTPEmailBackend", "build_message"]
