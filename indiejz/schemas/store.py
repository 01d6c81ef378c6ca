"""Respostas públicas do catálogo, do preview de cupom e do histórico de compras."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class GameResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    price: Decimal
    is_free: bool
    file_size: str | None = None
    genre: str | None = None
    thumbnail_url: str | None = None
    downloads: int = 0
    created_at: datetime | None = None


class CouponPreview(BaseModel):
    """Regra do cupom + preço já com desconto para o jogo informado."""

    code: str
    discount_percent: Decimal | None = None
    discount_amount: Decimal | None = None
    game_id: int | None = None
    discount: Decimal | None = None
    final_price: Decimal | None = None
    display: str | None = None


class PurchaseResponse(BaseModel):
    id: int
    game_id: int
    game_title: str | None = None
    thumbnail_url: str | None = None
    file_url: str | None = None
    price_paid: Decimal
    coupon_code: str | None = None
    discount_amount: Decimal | None = None
    created_at: datetime
