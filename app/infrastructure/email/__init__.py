"""
Email infrastructure.
Handles per-language templates, email definitions, SMTP delivery and the sending service.
"""

from .email_service import (
    EmailService,
    EmailServiceConfig,
    get_email_service,
    initialize_email_service,
    register_email,
    reset_email_service,
    send_email,
)
from .exceptions import (
    ConfigurationError,
    DuplicateDefinitionError,
    EmailServiceError,
    EmptyLanguageSetError,
    MissingSubjectError,
    TemplateDataError,
    TemplateNotFoundError,
    TransportConfigError,
    UnregisteredTemplateError,
)
from .languages import Lang, resolve_language
from .message import DeliveryResult, EmailAttachment, OutboundMessage
from .registry import EmailDefinition, EmailRegistry, SendHandle
from .template_loader import EmailTemplateLoader, strip_to_text
from .transport import InMemoryTransport, MailTransport, SmtpTransport

__all__ = [
    "EmailService",
    "EmailServiceConfig",
    "get_email_service",
    "initialize_email_service",
    "register_email",
    "reset_email_service",
    "send_email",
    "ConfigurationError",
    "DuplicateDefinitionError",
    "EmailServiceError",
    "EmptyLanguageSetError",
    "MissingSubjectError",
    "TemplateDataError",
    "TemplateNotFoundError",
    "TransportConfigError",
    "UnregisteredTemplateError",
    "Lang",
    "resolve_language",
    "DeliveryResult",
    "EmailAttachment",
    "OutboundMessage",
    "EmailDefinition",
    "EmailRegistry",
    "SendHandle",
    "EmailTemplateLoader",
    "strip_to_text",
    "InMemoryTransport",
    "MailTransport",
    "SmtpTransport",
]
