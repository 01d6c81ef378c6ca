"""
Verificação do pagamento depois do retorno da Stripe.

Passo autoritativo: só aqui a compra é registrada e os contadores (downloads do
jogo, usos do cupom) aumentam. Os dados de negócio vêm dos metadados da sessão,
nunca do corpo da requisição. O CheckoutOrder da sessão é "reivindicado" com um
UPDATE condicional; chamadas repetidas para a mesma sessão não gravam de novo.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from indiejz.core.errors import GameNotFound, InvalidRequest
from indiejz.models import CheckoutOrder, Game, NotificationJob, Purchase
from indiejz.services.coupon import increment_coupon_use
from indiejz.services.notifications import enqueue_sale_notifications
from indiejz.services.payment_gateway import CheckoutSession, StripeGateway
from indiejz.services.pricing import ZERO, to_money

log = logging.getLogger("indiejz.payment")

PAID = "paid"


@dataclass
class VerificationResult:
    verified: bool
    file_url: str | None = None
    game_title: str | None = None
    message: str | None = None
    # Jobs gravados nesta chamada; vazio se a sessão já tinha sido processada
    notifications: list[NotificationJob] = field(default_factory=list)


def _money_from_metadata(value: str | None) -> Decimal:
    try:
        return to_money(value) if value else ZERO
    except (InvalidOperation, ValueError):
        return ZERO


def _int_or_none(value: str | None) -> int | None:
    try:
        return int(value) if value else None
    except ValueError:
        return None


def _ensure_order(db: Session, session: CheckoutSession, game_id: int) -> None:
    """Sessões criadas fora deste serviço ainda não têm CheckoutOrder: cria a partir dos metadados."""
    existing = db.exec(select(CheckoutOrder).where(CheckoutOrder.session_id == session.id)).first()
    if existing:
        return
    meta = session.metadata
    price_paid = _money_from_metadata(meta.get("price_paid"))
    db.add(
        CheckoutOrder(
            session_id=session.id,
            game_id=game_id,
            user_id=_int_or_none(meta.get("user_id")),
            coupon_code=meta.get("coupon_code") or None,
            original_price=_money_from_metadata(meta.get("original_price")) or price_paid,
            discount_amount=_money_from_metadata(meta.get("discount_amount")),
            price_paid=price_paid,
        )
    )
    try:
        db.flush()
    except IntegrityError:
        # Outra verificação concorrente inseriu a mesma sessão primeiro
        db.rollback()


def _claim_order(db: Session, session_id: str, customer_email: str | None) -> bool:
    """True só para a primeira chamada que marca a sessão como processada."""
    stmt = (
        update(CheckoutOrder)
        .where(CheckoutOrder.session_id == session_id, CheckoutOrder.is_processed == False)  # noqa: E712
        .values(is_processed=True, status="completed", processed_at=datetime.utcnow(), customer_email=customer_email)
    )
    return db.connection().execute(stmt).rowcount == 1


def verify_payment(
    db: Session,
    gateway: StripeGateway,
    session_id: str | None,
    game_id: int | None,
) -> VerificationResult:
    if not session_id or game_id is None:
        raise InvalidRequest("Campos obrigatórios: sessionId e gameId.")

    log.info("Verifying payment: session_id=%s game_id=%s", session_id, game_id)
    session = gateway.retrieve_checkout_session(session_id)
    if session.payment_status != PAID:
        log.info("Payment not completed: session_id=%s status=%s", session_id, session.payment_status)
        return VerificationResult(verified=False, message="Pagamento não concluído.")

    meta = session.metadata
    meta_game_id = _int_or_none(meta.get("game_id"))
    if meta_game_id is not None and meta_game_id != game_id:
        log.warning("Game mismatch on verification: session_id=%s request=%s metadata=%s", session_id, game_id, meta_game_id)
        raise InvalidRequest("Sessão de pagamento não corresponde a este jogo.")

    game = db.get(Game, game_id)
    if not game:
        raise GameNotFound()

    user_id = _int_or_none(meta.get("user_id"))
    coupon_code = meta.get("coupon_code") or None
    price_paid = _money_from_metadata(meta.get("price_paid"))
    discount_amount = _money_from_metadata(meta.get("discount_amount"))

    try:
        _ensure_order(db, session, game.id)
        if not _claim_order(db, session.id, session.customer_email):
            db.rollback()
            log.info("Session already processed: session_id=%s", session.id)
            return VerificationResult(verified=True, file_url=game.file_url, game_title=game.title)

        db.connection().execute(
            update(Game).where(Game.id == game.id).values(downloads=Game.downloads + 1)
        )
        if user_id:
            db.add(
                Purchase(
                    game_id=game.id,
                    user_id=user_id,
                    price_paid=price_paid,
                    coupon_code=coupon_code,
                    discount_amount=discount_amount,
                    checkout_session_id=session.id,
                )
            )
        if coupon_code and not increment_coupon_use(db, coupon_code):
            log.warning("Coupon from metadata not found: %s", coupon_code)
        db.commit()
    except Exception:
        db.rollback()
        raise

    file_url, game_title = game.file_url, game.title
    log.info(
        "Payment verified: session_id=%s game=%s user_id=%s price_paid=%s coupon=%s",
        session.id,
        game_title,
        user_id,
        price_paid,
        coupon_code,
    )

    jobs: list[NotificationJob] = []
    try:
        jobs = enqueue_sale_notifications(
            db,
            game_title=game_title,
            price_paid=price_paid,
            customer_email=session.customer_email,
            coupon_code=coupon_code,
            discount_amount=discount_amount if coupon_code else None,
            file_url=file_url,
        )
    except Exception:
        db.rollback()
        log.exception("Could not enqueue sale notifications: session_id=%s", session.id)

    return VerificationResult(verified=True, file_url=file_url, game_title=game_title, notifications=jobs)
