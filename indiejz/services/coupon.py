"""Validação de cupom e contador de usos."""
from datetime import datetime

from sqlalchemy import update
from sqlmodel import Session, select

from indiejz.core.errors import CouponExhausted, CouponExpired, CouponNotApplicable, CouponNotFound
from indiejz.models import Coupon


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def validate_coupon(
    db: Session,
    code: str | None,
    game_id: int | None = None,
    now: datetime | None = None,
) -> Coupon:
    """
    Procura um cupom ativo pelo código e confere validade, limite de usos e jogo.
    Só leitura: o uso é contado na verificação do pagamento, não aqui.
    """
    code_upper = normalize_code(code)
    if not code_upper:
        raise CouponNotFound()
    stmt = select(Coupon).where(Coupon.code == code_upper, Coupon.is_active == True)  # noqa: E712
    coupon = db.exec(stmt).first()
    if not coupon:
        raise CouponNotFound()

    now = now or datetime.utcnow()
    if coupon.expires_at is not None and coupon.expires_at < now:
        raise CouponExpired()
    if coupon.max_uses is not None and (coupon.current_uses or 0) >= coupon.max_uses:
        raise CouponExhausted()
    if coupon.game_id is not None and game_id is not None and coupon.game_id != game_id:
        raise CouponNotApplicable()
    return coupon


def increment_coupon_use(db: Session, code: str) -> bool:
    """UPDATE atômico current_uses = current_uses + 1. Não faz commit; True se o cupom existia."""
    stmt = (
        update(Coupon)
        .where(Coupon.code == normalize_code(code))
        .values(current_uses=Coupon.current_uses + 1)
    )
    result = db.connection().execute(stmt)
    return result.rowcount > 0
