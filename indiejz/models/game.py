"""Jogo do catálogo: preço em reais, gratuito ou pago, arquivo para download."""
from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel


class Game(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(index=True, max_length=200)
    description: str | None = None
    price: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    is_free: bool = False
    file_url: str | None = None  # URL pública no storage (binário do jogo)
    file_size: str | None = Field(default=None, max_length=32)  # ex: "120 MB"
    genre: str | None = Field(default=None, max_length=64)
    thumbnail_url: str | None = None
    downloads: int = Field(default=0)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
    updated_at: datetime | None = Field(default_factory=datetime.utcnow)
