"""Cupons no admin: CRUD + ativar/desativar. Código sempre em maiúsculas e único."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from indiejz.core.database import get_db
from indiejz.core.errors import GameNotFound, InvalidRequest, NotFound
from indiejz.models import Coupon, Game
from indiejz.schemas import CouponCreate, CouponResponse, CouponUpdate
from indiejz.schemas.admin import check_discount_rule

router = APIRouter()
log = logging.getLogger("indiejz")


def _get_coupon(db: Session, coupon_id: int) -> Coupon:
    coupon = db.get(Coupon, coupon_id)
    if not coupon:
        raise NotFound("Cupom não encontrado.")
    return coupon


def _ensure_unique_code(db: Session, code: str, exclude_id: int | None = None) -> None:
    stmt = select(Coupon).where(Coupon.code == code)
    if exclude_id is not None:
        stmt = stmt.where(Coupon.id != exclude_id)
    if db.exec(stmt).first():
        raise HTTPException(status_code=409, detail="Este código já existe.")


def _ensure_game(db: Session, game_id: int | None) -> None:
    if game_id is not None and not db.get(Game, game_id):
        raise GameNotFound()


@router.get("", response_model=list[CouponResponse])
def coupons_list(db: Session = Depends(get_db), active: bool | None = None):
    stmt = select(Coupon).order_by(Coupon.id.desc())
    if active is not None:
        stmt = stmt.where(Coupon.is_active == active)
    return [CouponResponse.model_validate(c, from_attributes=True) for c in db.exec(stmt).all()]


@router.post("", response_model=CouponResponse, status_code=201)
def coupon_create(body: CouponCreate, db: Session = Depends(get_db)):
    _ensure_unique_code(db, body.code)
    _ensure_game(db, body.game_id)
    coupon = Coupon(**body.model_dump())
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    log.info("Admin created coupon: code=%s", coupon.code)
    return CouponResponse.model_validate(coupon, from_attributes=True)


@router.get("/{coupon_id}", response_model=CouponResponse)
def coupon_detail(coupon_id: int, db: Session = Depends(get_db)):
    return CouponResponse.model_validate(_get_coupon(db, coupon_id), from_attributes=True)


@router.patch("/{coupon_id}", response_model=CouponResponse)
def coupon_update(coupon_id: int, body: CouponUpdate, db: Session = Depends(get_db)):
    coupon = _get_coupon(db, coupon_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("is_active", False) is None:
        changes.pop("is_active")
    if "code" in changes:
        if not changes["code"]:
            raise InvalidRequest("O código não pode ser vazio.")
        _ensure_unique_code(db, changes["code"], exclude_id=coupon.id)
    if "game_id" in changes:
        _ensure_game(db, changes["game_id"])
    if "discount_percent" in changes or "discount_amount" in changes:
        try:
            check_discount_rule(
                changes.get("discount_percent", coupon.discount_percent),
                changes.get("discount_amount", coupon.discount_amount),
            )
        except ValueError as e:
            raise InvalidRequest(str(e))
    for key, value in changes.items():
        setattr(coupon, key, value)
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return CouponResponse.model_validate(coupon, from_attributes=True)


@router.post("/{coupon_id}/toggle", response_model=CouponResponse)
def coupon_toggle(coupon_id: int, db: Session = Depends(get_db)):
    coupon = _get_coupon(db, coupon_id)
    coupon.is_active = not coupon.is_active
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    log.info("Admin toggled coupon: code=%s active=%s", coupon.code, coupon.is_active)
    return CouponResponse.model_validate(coupon, from_attributes=True)


@router.delete("/{coupon_id}")
def coupon_delete(coupon_id: int, db: Session = Depends(get_db)):
    coupon = _get_coupon(db, coupon_id)
    db.delete(coupon)
    db.commit()
    return {"ok": True}
