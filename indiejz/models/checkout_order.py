from datetime import datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel


class CheckoutOrder(SQLModel, table=True):
    """Espelho local da sessão de checkout da Stripe; is_processed garante processamento único."""

    __tablename__ = "checkout_order"
    id: int | None = Field(default=None, primary_key=True)
    session_id: str = Field(unique=True, index=True, max_length=255)
    game_id: int = Field(index=True)
    user_id: int | None = Field(default=None, index=True)  # null = checkout anônimo
    coupon_code: str | None = Field(default=None, max_length=64)
    original_price: Decimal = Field(max_digits=10, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    price_paid: Decimal = Field(max_digits=10, decimal_places=2)
    currency: str = "brl"
    status: str = "pending"  # pending | completed
    is_processed: bool = False
    processed_at: datetime | None = None
    customer_email: str | None = None
    created_at: datetime | None = Field(default_factory=datetime.utcnow)
