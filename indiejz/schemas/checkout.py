from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON em camelCase (gameId, sessionId...) como o front envia; aceita snake_case também."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateCheckoutRequest(CamelModel):
    """Campos obrigatórios são checados no serviço (InvalidRequest 400), não pelo pydantic (422)."""

    game_id: int | None = None
    game_title: str | None = None
    price: Decimal | None = None
    original_price: Decimal | None = None
    coupon_code: str | None = None
    discount_amount: Decimal | None = None
    return_url: str | None = None


class CheckoutResponse(CamelModel):
    url: str
    session_id: str


class VerifyPaymentRequest(CamelModel):
    session_id: str | None = None
    game_id: int | None = None


class VerifyPaymentResponse(CamelModel):
    verified: bool
    file_url: str | None = None
    game_title: str | None = None
    message: str | None = None


class DownloadRequest(CamelModel):
    coupon_code: str | None = None
    return_url: str | None = None


class DownloadResponse(CamelModel):
    """Jogo grátis: file_url. Jogo pago: url da Stripe + session_id."""

    kind: str  # file | checkout
    file_url: str | None = None
    url: str | None = None
    session_id: str | None = None
