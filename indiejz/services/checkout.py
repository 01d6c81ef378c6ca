"""
Criação da sessão de checkout.

O preço é recalculado aqui a partir do jogo e do cupom; o valor enviado pelo
cliente só é aceito se bater. Os metadados da sessão (jogo, usuário, cupom,
preço original, desconto, valor pago) são a única fonte lida na verificação.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlmodel import Session

from indiejz.core.config import settings
from indiejz.core.errors import CouponError, GameNotFound, InvalidRequest
from indiejz.models import CheckoutOrder, Coupon, Game
from indiejz.schemas.checkout import CreateCheckoutRequest
from indiejz.services.coupon import normalize_code, validate_coupon
from indiejz.services.payment_gateway import LineItem, StripeGateway
from indiejz.services.pricing import ZERO, discount, final_price, format_price, to_minor_units, to_money
from indiejz.services.return_url import safe_return_url

log = logging.getLogger("indiejz.checkout")

# Placeholder que a Stripe troca pelo id real da sessão no redirect
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"
FULL_PRICE_HINT = "Remova o cupom para continuar pelo preço cheio."


@dataclass
class CheckoutResult:
    url: str
    session_id: str
    price_paid: Decimal
    discount_amount: Decimal


def _with_query(url: str, query: str) -> str:
    base, sep, fragment = url.partition("#")
    joiner = "&" if "?" in base else "?"
    return f"{base}{joiner}{query}" + (f"#{fragment}" if sep else "")


def build_return_urls(return_url: str | None, game_id: int) -> tuple[str, str]:
    """(success_url, cancel_url) com os parâmetros que o front trata ao voltar da Stripe."""
    base = safe_return_url(return_url)
    success_url = _with_query(base, f"success=true&game_id={game_id}&session_id={SESSION_ID_PLACEHOLDER}")
    cancel_url = _with_query(base, "canceled=true")
    return success_url, cancel_url


def checkout_coupon(db: Session, code: str | None, game_id: int) -> Coupon | None:
    """Cupom revalidado no checkout; o erro avisa que dá para seguir sem ele, pelo preço cheio."""
    if not code:
        return None
    try:
        return validate_coupon(db, code, game_id=game_id)
    except CouponError as e:
        log.info("Coupon rejected at checkout: code=%s game_id=%s error=%s", code, game_id, e.message)
        raise type(e)(f"{e.message} {FULL_PRICE_HINT}") from e


def create_checkout(
    db: Session,
    gateway: StripeGateway,
    body: CreateCheckoutRequest,
    user_id: int | None = None,
    customer_email: str | None = None,
) -> CheckoutResult:
    if body.game_id is None or not (body.game_title or "").strip() or body.price is None:
        raise InvalidRequest("Campos obrigatórios: gameId, gameTitle e price.")

    game = db.get(Game, body.game_id)
    if not game:
        raise GameNotFound()
    if game.is_free:
        raise InvalidRequest("Jogo gratuito não passa pelo checkout.")

    code = normalize_code(body.coupon_code) or None
    coupon = checkout_coupon(db, code, game.id)
    original_price = to_money(game.price)
    discount_value = discount(original_price, coupon)
    price = final_price(original_price, coupon)

    if to_money(body.price) != price:
        log.warning(
            "Checkout price mismatch: game_id=%s client=%s server=%s coupon=%s",
            game.id,
            body.price,
            price,
            code,
        )
        raise InvalidRequest("O preço informado não confere. Atualize a página e tente novamente.")
    if price <= ZERO:
        raise InvalidRequest("O valor final precisa ser maior que zero.")

    description = f"Download do jogo {game.title}"
    if code and discount_value > ZERO:
        description += f" (Cupom: {code} - {format_price(discount_value)} de desconto)"

    success_url, cancel_url = build_return_urls(body.return_url, game.id)
    metadata = {
        "game_id": str(game.id),
        "user_id": str(user_id) if user_id else "",
        "coupon_code": code or "",
        "original_price": str(original_price),
        "discount_amount": str(discount_value),
        "price_paid": str(price),
    }
    item = LineItem(
        name=game.title,
        description=description,
        unit_amount=to_minor_units(price),
        currency=settings.stripe_currency,
    )
    session = gateway.create_checkout_session(item, success_url, cancel_url, metadata, customer_email=customer_email)

    db.add(
        CheckoutOrder(
            session_id=session.id,
            game_id=game.id,
            user_id=user_id,
            coupon_code=code,
            original_price=original_price,
            discount_amount=discount_value,
            price_paid=price,
            currency=settings.stripe_currency,
        )
    )
    db.commit()
    log.info("Checkout session created: session_id=%s game_id=%s price=%s coupon=%s", session.id, game.id, price, code)
    return CheckoutResult(url=session.url or "", session_id=session.id, price_paid=price, discount_amount=discount_value)
