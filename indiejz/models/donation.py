"""Doação da página de apoio; is_public decide se o nome aparece no mural."""
from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel


class Donation(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=120)
    email: str | None = None
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    message: str | None = Field(default=None, max_length=500)
    is_public: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
