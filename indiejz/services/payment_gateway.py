"""Adaptador da Stripe Checkout: criar sessão hospedada e consultar o status de pagamento."""
import logging
from dataclasses import dataclass, field

import stripe

from indiejz.core.config import STRIPE_KEY_PREFIX, settings
from indiejz.core.errors import CheckoutCreationFailed, PaymentNotConfigured, ProviderError

log = logging.getLogger("indiejz.payment")


@dataclass
class CheckoutSession:
    id: str
    url: str | None = None
    payment_status: str = "unpaid"  # paid | unpaid | no_payment_required
    metadata: dict[str, str] = field(default_factory=dict)
    customer_email: str | None = None


@dataclass
class LineItem:
    name: str
    description: str
    unit_amount: int  # centavos
    currency: str = "brl"
    quantity: int = 1


def _as_dict(value) -> dict:
    if value is None:
        return {}
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return dict(value)


def _session_from_stripe(obj) -> CheckoutSession:
    metadata = _as_dict(getattr(obj, "metadata", None))
    details = _as_dict(getattr(obj, "customer_details", None))
    email = details.get("email") or getattr(obj, "customer_email", None)
    return CheckoutSession(
        id=obj.id,
        url=getattr(obj, "url", None),
        payment_status=getattr(obj, "payment_status", None) or "unpaid",
        metadata={k: "" if v is None else str(v) for k, v in metadata.items()},
        customer_email=email,
    )


class StripeGateway:
    def __init__(self, api_key: str | None = None, api_version: str | None = None):
        self.api_key = api_key if api_key is not None else settings.stripe_secret_key
        self.api_version = api_version or settings.stripe_api_version

    def _configure(self) -> None:
        if not self.api_key or not self.api_key.startswith(STRIPE_KEY_PREFIX):
            raise PaymentNotConfigured()
        stripe.api_key = self.api_key
        stripe.api_version = self.api_version

    def create_checkout_session(
        self,
        item: LineItem,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        customer_email: str | None = None,
    ) -> CheckoutSession:
        self._configure()
        params = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "quantity": item.quantity,
                    "price_data": {
                        "currency": item.currency,
                        "unit_amount": item.unit_amount,
                        "product_data": {"name": item.name, "description": item.description},
                    },
                }
            ],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email
        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            log.exception("Stripe checkout creation failed: %s", e)
            raise CheckoutCreationFailed(f"Não foi possível iniciar o pagamento: {getattr(e, 'user_message', None) or str(e)}")
        return _session_from_stripe(session)

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        self._configure()
        try:
            session = stripe.checkout.Session.retrieve(session_id)
        except stripe.StripeError as e:
            log.exception("Stripe session retrieve failed: session_id=%s %s", session_id, e)
            raise ProviderError(f"Falha ao consultar o pagamento: {getattr(e, 'user_message', None) or str(e)}")
        return _session_from_stripe(session)


def get_payment_gateway() -> StripeGateway:
    """Dependency do FastAPI; testes substituem via app.dependency_overrides.
    Sem chave configurada a falha (503) só acontece ao chamar a Stripe, para não bloquear download grátis."""
    return StripeGateway()
