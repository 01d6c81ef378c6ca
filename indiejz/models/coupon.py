"""Cupom de desconto: percentual ou valor fixo, limite de usos, validade e jogo opcional."""
from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel


class Coupon(SQLModel, table=True):
    """Criado pelo admin; current_uses só aumenta quando um pagamento é verificado."""

    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True, max_length=64)  # sempre em maiúsculas, ex: SAVE10
    # Exatamente um dos dois: percentual (0, 100] ou valor fixo em reais (> 0)
    discount_percent: Decimal | None = Field(default=None, max_digits=5, decimal_places=2)
    discount_amount: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    max_uses: int | None = Field(default=None)  # null = ilimitado
    current_uses: int = Field(default=0)
    expires_at: datetime | None = Field(default=None)
    is_active: bool = True
    # Restringe o cupom a um jogo; null = vale para todos
    game_id: int | None = Field(default=None, foreign_key="game.id", index=True)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
