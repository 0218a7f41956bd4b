"""
Registry of email definitions.
Each email type (id, languages, subject lines) is registered once per registry.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .exceptions import DuplicateDefinitionError, EmptyLanguageSetError, UnregisteredTemplateError
from .languages import Lang, LangLike, merge_languages, to_lang
from .message import DeliveryResult, EmailAttachment, Recipients

if TYPE_CHECKING:
    from .email_service import EmailService


logger = logging.getLogger(__name__)


SubjectFactory = Callable[[Any, Lang], Mapping[LangLike, str]]


@dataclass(frozen=True)
class EmailDefinition:
    """Metadata for one logical email type."""
    id: str
    subject: SubjectFactory
    languages: Tuple[Lang, ...] = ()
    description: str = ""

    def subjects_for(self, data: Any, lang: Lang) -> Dict[Lang, str]:
        """Call the subject factory and normalise its keys to Lang."""
        subjects: Dict[Lang, str] = {}
        for key, value in self.subject(data, lang).items():
            normalised = to_lang(key)
            if normalised is not None:
                subjects[normalised] = value
        return subjects


@dataclass(frozen=True)
class RegisteredEmail:
    definition: EmailDefinition
    languages: Tuple[Lang, ...]


class EmailRegistry:
    """Maps email ids to their definitions and effective languages."""

    def __init__(self):
        self._entries: Dict[str, RegisteredEmail] = {}

    def register(
        self,
        definition: EmailDefinition,
        service_languages: Sequence[LangLike],
    ) -> RegisteredEmail:
        """
        Register a definition.

        Raises:
            DuplicateDefinitionError: if the id is already registered
            EmptyLanguageSetError: if no language remains after merging
        """
        if definition.id in self._entries:
            raise DuplicateDefinitionError(definition.id)

        languages = merge_languages(service_languages, definition.languages)
        if not languages:
            raise EmptyLanguageSetError(definition.id)

        entry = RegisteredEmail(definition=definition, languages=tuple(languages))
        self._entries[definition.id] = entry
        logger.debug(f"Registered email '{definition.id}' for languages {[l.value for l in languages]}")
        return entry

    def get(self, email_id: str) -> RegisteredEmail:
        entry = self._entries.get(email_id)
        if entry is None:
            raise UnregisteredTemplateError(email_id)
        return entry

    def __contains__(self, email_id: object) -> bool:
        return email_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def ids(self) -> List[str]:
        """List registered email ids in registration order."""
        return list(self._entries)


class SendHandle:
    """Send operation bound to one registered email id."""

    def __init__(self, service: "EmailService", email_id: str):
        self._service = service
        self.email_id = email_id

    async def send(
        self,
        to: Recipients,
        data: Any,
        lang: Optional[LangLike] = None,
        attachments: Optional[List[EmailAttachment]] = None,
        from_address: Optional[str] = None,
        cc: Optional[Recipients] = None,
        bcc: Optional[Recipients] = None,
        reply_to: Optional[str] = None,
    ) -> DeliveryResult:
        """Send this email; see EmailService.send."""
        return await self._service.send(
            template_id=self.email_id,
            to=to,
            data=data,
            lang=lang,
            attachments=attachments,
            from_address=from_address,
            cc=cc,
            bcc=bcc,
            reply_to=reply_to,
        )

    def __repr__(self) -> str:
        return f"SendHandle({self.email_id!r})"
