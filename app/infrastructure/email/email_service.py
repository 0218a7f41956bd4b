"""
Email service for sending templated transactional emails.
Resolves the language, renders the template, builds the message and hands it to a transport.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

from app.config import Settings, get_settings
from .exceptions import ConfigurationError, MissingSubjectError
from .languages import Lang, LangLike, merge_languages, resolve_language, to_lang
from .message import DeliveryResult, EmailAttachment, OutboundMessage, Recipients
from .registry import EmailDefinition, EmailRegistry, SendHandle
from .template_loader import EmailTemplateLoader, strip_to_text
from .transport import MailTransport, create_transport_from_settings


logger = logging.getLogger(__name__)

FALLBACK_FROM_ADDRESS = "no-reply@example.com"


@dataclass(frozen=True)
class EmailServiceConfig:
    """Caller-owned configuration for one EmailService instance."""
    templates_dir: Path
    transport: MailTransport
    default_lang: Lang = Lang.DE
    languages: Tuple[Lang, ...] = (Lang.DE, Lang.EN)
    default_from: Optional[str] = None
    template_extension: str = ".html"

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[MailTransport] = None,
    ) -> "EmailServiceConfig":
        """
        Build configuration from environment settings.

        An injected transport skips SMTP configuration entirely; otherwise
        the transport is created from SMTP_* variables and fails fast if they
        are incomplete.
        """
        settings = settings or get_settings()

        default_lang = to_lang(settings.email_default_lang)
        if default_lang is None:
            raise ConfigurationError(f"Unsupported EMAIL_DEFAULT_LANG '{settings.email_default_lang}'")

        return cls(
            templates_dir=Path(settings.email_templates_dir),
            transport=transport or create_transport_from_settings(settings),
            default_lang=default_lang,
            languages=tuple(merge_languages(settings.email_languages)),
            default_from=settings.from_email,
            template_extension=settings.email_template_extension,
        )


class EmailService:
    """Service for sending registered, multi-language emails."""

    def __init__(self, config: EmailServiceConfig):
        """Initialize email service with its configuration."""
        self.config = config
        self.transport = config.transport
        self.registry = EmailRegistry()
        self.template_loader = EmailTemplateLoader(
            config.templates_dir,
            extension=config.template_extension,
        )

    def register(self, definition: EmailDefinition) -> SendHandle:
        """
        Register an email definition and return a send handle bound to it.

        Raises:
            DuplicateDefinitionError: if the id is already registered
            EmptyLanguageSetError: if service and definition languages are both empty
        """
        self.registry.register(definition, self.config.languages)
        return SendHandle(self, definition.id)

    def languages_for(self, template_id: str) -> List[Lang]:
        """Effective languages of a registered email."""
        return list(self.registry.get(template_id).languages)

    async def send(
        self,
        template_id: str,
        to: Recipients,
        data: Any,
        lang: Optional[LangLike] = None,
        attachments: Optional[List[EmailAttachment]] = None,
        from_address: Optional[str] = None,
        cc: Optional[Recipients] = None,
        bcc: Optional[Recipients] = None,
        reply_to: Optional[str] = None,
    ) -> DeliveryResult:
        """
        Render and send a registered email.

        Args:
            template_id: Id the email was registered with
            to: Recipient address or list of addresses
            data: Template data, also passed to the subject factory
            lang: Requested language; unsupported languages fall back to the default
            attachments: Files to attach
            from_address: Overrides the configured sender

        Returns:
            The transport's delivery result, unchanged. Check ``rejected``
            for recipients the server refused.
        """
        entry = self.registry.get(template_id)
        chosen = resolve_language(lang, entry.languages, self.config.default_lang)

        html = await self.template_loader.render(template_id, chosen, data)
        subject = self._subject(entry.definition, data, chosen)

        message = OutboundMessage(
            to=to,
            from_address=from_address or self.config.default_from or FALLBACK_FROM_ADDRESS,
            subject=subject,
            html=html,
            text=strip_to_text(html),
            attachments=list(attachments or []),
            cc=cc,
            bcc=bcc,
            reply_to=reply_to,
        )

        result = await self.transport.send_mail(message)
        logger.info(f"Email '{template_id}' ({chosen.value}) sent to {to}: {subject}")
        return result

    def _subject(self, definition: EmailDefinition, data: Any, lang: Lang) -> str:
        subjects = definition.subjects_for(data, lang)
        subject = subjects.get(lang) or subjects.get(self.config.default_lang)
        if not subject:
            raise MissingSubjectError(definition.id, lang.value, self.config.default_lang.value)
        return subject


# Singleton instance
_email_service: Optional[EmailService] = None


def initialize_email_service(config: Optional[EmailServiceConfig] = None) -> EmailService:
    """
    Create the application-wide email service.

    The first call wins; later calls return the existing instance and ignore
    their config. Without a config, settings from the environment are used.
    """
    global _email_service
    if _email_service is None:
        _email_service = EmailService(config or EmailServiceConfig.from_settings())
        logger.info(
            f"Email service initialized (templates: {_email_service.config.templates_dir}, "
            f"default language: {_email_service.config.default_lang.value})"
        )
    return _email_service


def get_email_service() -> EmailService:
    """Get singleton email service instance, initializing it on first use."""
    return initialize_email_service()


def reset_email_service() -> None:
    """Forget the singleton instance."""
    global _email_service
    _email_service = None


def register_email(definition: EmailDefinition) -> SendHandle:
    """Register a definition with the application-wide email service."""
    return get_email_service().register(definition)


async def send_email(template_id: str, to: Recipients, data: Any, **kwargs: Any) -> DeliveryResult:
    """Send a registered email through the application-wide email service."""
    return await get_email_service().send(template_id=template_id, to=to, data=data, **kwargs)
