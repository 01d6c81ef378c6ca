"""Corpos das rotas do admin (jogos e cupons)."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator


class GameCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=10, decimal_places=2)
    is_free: bool = False
    file_url: str | None = None
    file_size: str | None = None
    genre: str | None = None
    thumbnail_url: str | None = None


class GameUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    is_free: bool | None = None
    file_url: str | None = None
    file_size: str | None = None
    genre: str | None = None
    thumbnail_url: str | None = None


def check_discount_rule(percent: Decimal | None, amount: Decimal | None) -> None:
    if (percent is None) == (amount is None):
        raise ValueError("Informe percentual ou valor fixo (exatamente um dos dois).")
    if percent is not None and not (Decimal(0) < percent <= Decimal(100)):
        raise ValueError("O percentual precisa estar entre 0 e 100.")
    if amount is not None and amount <= 0:
        raise ValueError("O valor fixo precisa ser maior que zero.")


class CouponCreate(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    discount_percent: Decimal | None = None
    discount_amount: Decimal | None = None
    max_uses: int | None = Field(default=None, gt=0)
    expires_at: datetime | None = None
    is_active: bool = True
    game_id: int | None = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("O código não pode ser vazio.")
        return v

    @model_validator(mode="after")
    def one_discount_kind(self):
        check_discount_rule(self.discount_percent, self.discount_amount)
        return self


class CouponUpdate(BaseModel):
    """Campos omitidos ficam como estão. Para trocar o tipo de desconto envie os dois (um deles null)."""

    code: str | None = Field(default=None, min_length=1, max_length=64)
    discount_percent: Decimal | None = None
    discount_amount: Decimal | None = None
    max_uses: int | None = Field(default=None, gt=0)
    expires_at: datetime | None = None
    is_active: bool | None = None
    game_id: int | None = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str | None) -> str | None:
        return v.strip().upper() if v is not None else None


class CouponResponse(BaseModel):
    id: int
    code: str
    discount_percent: Decimal | None = None
    discount_amount: Decimal | None = None
    max_uses: int | None = None
    current_uses: int
    expires_at: datetime | None = None
    is_active: bool
    game_id: int | None = None
    created_at: datetime | None = None
