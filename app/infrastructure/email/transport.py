"""
Mail delivery transports.
The email service only talks to MailTransport; SMTP specifics live here.
"""

import asyncio
import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.utils import make_msgid
from typing import List, Optional

from app.config import Settings
from .exceptions import ConfigurationError, TransportConfigError
from .message import DeliveryResult, OutboundMessage


logger = logging.getLogger(__name__)


class MailTransport(ABC):
    """Capability interface for delivering a composed message."""

    @abstractmethod
    async def send_mail(self, message: OutboundMessage) -> DeliveryResult:
        """
        Deliver a message.

        Per-recipient refusals are reported in ``DeliveryResult.rejected``
        rather than raised.
        """
        pass


class SmtpTransport(MailTransport):
    """Delivers messages through an SMTP server using smtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        secure: bool = False,
        username: Optional[str] = None,
        password: Optional[str] = None,
        default_from: Optional[str] = None,
        timeout: float = 30.0,
    ):
        missing = []
        if not host:
            missing.append("SMTP_HOST")
        if port is None:
            missing.append("SMTP_PORT")
        if missing:
            raise TransportConfigError(missing)

        self.host = host
        self.port = int(port)
        self.secure = secure
        self.username = username
        self.password = password
        self.default_from = default_from
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpTransport":
        """Build the transport from SMTP_* environment settings."""
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            secure=settings.smtp_secure,
            username=settings.smtp_user,
            password=settings.smtp_pass,
            default_from=settings.from_email,
            timeout=settings.smtp_timeout,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    async def send_mail(self, message: OutboundMessage) -> DeliveryResult:
        return await asyncio.to_thread(self._send_sync, message)

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(
                self.host,
                self.port,
                timeout=self.timeout,
                context=ssl.create_default_context(),
            )

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.ehlo()
        if server.has_extn("starttls"):
            server.starttls(context=ssl.create_default_context())
            server.ehlo()
        return server

    def _send_sync(self, message: OutboundMessage) -> DeliveryResult:
        sender = message.from_address or self.default_from
        recipients = message.recipients
        mime_message = message.to_mime()
        message_id = mime_message["Message-ID"]

        # Connect and send
        with self._connect() as server:
            if self.has_credentials:
                server.login(self.username, self.password)
            try:
                refused = server.send_message(mime_message, from_addr=sender, to_addrs=recipients)
            except smtplib.SMTPRecipientsRefused as e:
                refused = e.recipients

        rejected = [address for address in recipients if address in refused]
        accepted = [address for address in recipients if address not in refused]

        if rejected:
            logger.warning(f"SMTP server refused {len(rejected)} recipient(s) for {message_id}: {rejected}")

        return DeliveryResult(
            message_id=message_id,
            accepted=accepted,
            rejected=rejected,
            envelope={"from": sender, "to": recipients},
        )


class InMemoryTransport(MailTransport):
    """
    Keeps messages in memory instead of delivering them.
    Used in tests and local development when no SMTP server is available.
    """

    def __init__(self, reject: Optional[List[str]] = None):
        self.sent: List[OutboundMessage] = []
        self.reject = set(reject or [])

    async def send_mail(self, message: OutboundMessage) -> DeliveryResult:
        self.sent.append(message)
        recipients = message.recipients
        result = DeliveryResult(
            message_id=make_msgid(domain=message.sender_domain),
            accepted=[address for address in recipients if address not in self.reject],
            rejected=[address for address in recipients if address in self.reject],
            envelope={"from": message.from_address, "to": recipients},
        )
        logger.info(f"Email kept in memory: {message.subject} to {message.to}")
        return result


def create_transport_from_settings(settings: Settings) -> MailTransport:
    """
    Choose the transport configured by EMAIL_TRANSPORT.

    Raises:
        TransportConfigError: smtp transport without SMTP_HOST / SMTP_PORT
        ConfigurationError: unknown transport name
    """
    kind = settings.email_transport.lower()
    if kind == "smtp":
        return SmtpTransport.from_settings(settings)
    if kind == "memory":
        return InMemoryTransport()
    raise ConfigurationError(f"Unknown EMAIL_TRANSPORT '{settings.email_transport}'")
