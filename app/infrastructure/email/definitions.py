"""
Transactional emails shipped with the application.
Templates live in templates/<id>/<lang>.html next to this module.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List

from .email_service import EmailService
from .languages import Lang
from .registry import EmailDefinition, SendHandle


@dataclass
class WelcomeEmailData:
    user_name: str
    signup_date_iso: str


@dataclass
class OrderConfirmationData:
    customer_name: str
    order_number: str
    total: Decimal
    currency: str = "EUR"


WELCOME_EMAIL = EmailDefinition(
    id="welcome-email",
    subject=lambda data, lang: {
        Lang.DE: f"Willkommen, {data.user_name}",
        Lang.EN: f"Welcome, {data.user_name}",
    },
    description="Sent after a new profile is created",
)

ORDER_CONFIRMATION_EMAIL = EmailDefinition(
    id="order-confirmation",
    subject=lambda data, lang: {
        Lang.DE: f"Bestellbestätigung {data.order_number}",
        Lang.EN: f"Order confirmation {data.order_number}",
    },
    languages=(Lang.DE, Lang.EN),
    description="Sent once an order has been placed",
)

DEFAULT_DEFINITIONS: List[EmailDefinition] = [WELCOME_EMAIL, ORDER_CONFIRMATION_EMAIL]


def register_default_emails(service: EmailService) -> dict[str, SendHandle]:
    """Register the built-in emails on a service; returns handles by id."""
    return {definition.id: service.register(definition) for definition in DEFAULT_DEFINITIONS}
