"""Cálculo de preço com cupom. Tudo em Decimal e arredondado em centavos (ROUND_HALF_UP)."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class DiscountRule(Protocol):
    discount_percent: Decimal | None
    discount_amount: Decimal | None


def to_money(value) -> Decimal:
    """Converte int/str/float/Decimal em reais com 2 casas. float passa por str para não herdar erro binário."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def discount(base_price, coupon: DiscountRule | None) -> Decimal:
    base = to_money(base_price)
    if coupon is None or base <= ZERO:
        return ZERO
    if coupon.discount_percent:
        value = base * Decimal(coupon.discount_percent) / Decimal(100)
    elif coupon.discount_amount:
        value = Decimal(coupon.discount_amount)
    else:
        return ZERO
    return min(to_money(value), base)


def final_price(base_price, coupon: DiscountRule | None) -> Decimal:
    base = to_money(base_price)
    return max(ZERO, base - discount(base, coupon))


def price_for_game(game, coupon: DiscountRule | None = None) -> Decimal:
    """Jogo gratuito custa sempre zero e nunca recebe desconto."""
    if game.is_free:
        return ZERO
    return final_price(game.price, coupon)


def to_minor_units(amount) -> int:
    """Reais -> centavos (unit_amount da Stripe)."""
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def format_price(amount) -> str:
    return f"R$ {to_money(amount):.2f}"
