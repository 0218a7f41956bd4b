"""
Outbound email message and delivery result types.
"""

from dataclasses import dataclass, field
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Dict, List, Optional, Union

Recipients = Union[str, List[str]]


def as_list(value: Optional[Recipients]) -> List[str]:
    """Normalise a single address or list of addresses to a list."""
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


@dataclass
class EmailAttachment:
    """Email attachment data."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class OutboundMessage:
    """Fully rendered message, ready for a transport."""
    to: Recipients
    from_address: str
    subject: str
    html: str
    text: str
    attachments: List[EmailAttachment] = field(default_factory=list)
    cc: Optional[Recipients] = None
    bcc: Optional[Recipients] = None
    reply_to: Optional[str] = None

    @property
    def recipients(self) -> List[str]:
        """All envelope recipients: to, cc and bcc."""
        return as_list(self.to) + as_list(self.cc) + as_list(self.bcc)

    def to_mime(self, message_id: Optional[str] = None) -> MIMEMultipart:
        """
        Build the MIME message.

        Text and HTML go into a multipart/alternative part wrapped in
        multipart/mixed together with the attachments. Bcc is never written
        to the headers.
        """
        mime_msg = MIMEMultipart("mixed")

        # Headers
        mime_msg["Subject"] = self.subject
        mime_msg["From"] = self.from_address
        mime_msg["To"] = ", ".join(as_list(self.to))
        if self.cc:
            mime_msg["Cc"] = ", ".join(as_list(self.cc))
        if self.reply_to:
            mime_msg["Reply-To"] = self.reply_to
        mime_msg["Message-ID"] = message_id or make_msgid(domain=self.sender_domain)

        # Content
        body = MIMEMultipart("alternative")
        body.attach(MIMEText(self.text, "plain", "utf-8"))
        body.attach(MIMEText(self.html, "html", "utf-8"))
        mime_msg.attach(body)

        # Attachments
        for attachment in self.attachments:
            maintype, _, subtype = attachment.content_type.partition("/")
            part = MIMEBase(maintype, subtype or "octet-stream")
            part.set_payload(attachment.content)
            encoders.encode_base64(part)
            part.add_header(
                "Content-Disposition",
                "attachment",
                filename=attachment.filename,
            )
            mime_msg.attach(part)

        return mime_msg

    @property
    def sender_domain(self) -> Optional[str]:
        _, _, domain = self.from_address.rpartition("@")
        return domain.strip(">") or None


@dataclass
class DeliveryResult:
    """Outcome reported by a transport."""
    message_id: str
    accepted: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    envelope: Dict[str, Union[str, List[str]]] = field(default_factory=dict)

    @property
    def fully_delivered(self) -> bool:
        return not self.rejected
