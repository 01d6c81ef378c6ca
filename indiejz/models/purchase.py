"""Compra registrada após pagamento verificado (apenas para compradores logados)."""
from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel


class Purchase(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    game_id: int = Field(foreign_key="game.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    price_paid: Decimal = Field(max_digits=10, decimal_places=2)  # valor efetivamente cobrado
    coupon_code: str | None = Field(default=None, max_length=64)
    discount_amount: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    # Uma compra por sessão de checkout: verificação repetida não duplica
    checkout_session_id: str = Field(unique=True, index=True, max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow)
