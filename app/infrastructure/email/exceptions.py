"""
Exceptions raised by the email infrastructure.
"""

from typing import Any, Iterable, Optional


class EmailServiceError(Exception):
    """Base exception for email errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ConfigurationError(EmailServiceError):
    """The service cannot be built from the given configuration."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class TransportConfigError(ConfigurationError):
    """SMTP host or port missing and no transport injected."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            f"Missing SMTP configuration ({', '.join(self.missing)}); "
            "set it in the environment or pass a transport explicitly"
        )


class DuplicateDefinitionError(EmailServiceError):
    """Exception raised when an email id is registered twice."""

    def __init__(self, email_id: str):
        super().__init__(f"Email '{email_id}' is already registered", "DUPLICATE_DEFINITION")
        self.email_id = email_id


class EmptyLanguageSetError(EmailServiceError):
    def __init__(self, email_id: str):
        super().__init__(f"Language set for email '{email_id}' is empty", "EMPTY_LANGUAGE_SET")
        self.email_id = email_id


class UnregisteredTemplateError(EmailServiceError):
    """Exception raised when sending an email id nobody registered."""

    def __init__(self, email_id: str):
        super().__init__(
            f"Template '{email_id}' is not registered; call register() first",
            "UNREGISTERED_TEMPLATE",
        )
        self.email_id = email_id


class TemplateNotFoundError(EmailServiceError):
    """Exception raised when the template file for a language is missing."""

    def __init__(self, email_id: str, lang: Any, path: Any):
        super().__init__(f"Template file not found: {path}", "TEMPLATE_NOT_FOUND")
        self.email_id = email_id
        self.lang = lang
        self.path = path


class TemplateDataError(EmailServiceError):
    """Exception raised when a template cannot be rendered with the given data."""

    def __init__(self, email_id: str, lang: Any, detail: str):
        super().__init__(
            f"Cannot render template '{email_id}' ({lang}): {detail}",
            "TEMPLATE_DATA_ERROR",
        )
        self.email_id = email_id
        self.lang = lang
        self.detail = detail


class MissingSubjectError(EmailServiceError):
    """Neither the chosen nor the default language has a subject line."""

    def __init__(self, email_id: str, lang: Any, default_lang: Any):
        super().__init__(
            f"No subject for email '{email_id}' in '{lang}' or default '{default_lang}'",
            "MISSING_SUBJECT",
        )
        self.email_id = email_id
        self.lang = lang
        self.default_lang = default_lang
