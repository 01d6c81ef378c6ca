"""Catálogo no admin: CRUD de jogos (JSON)."""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from indiejz.core.database import get_db
from indiejz.core.errors import GameNotFound
from indiejz.models import Coupon, Game, Purchase
from indiejz.schemas import GameCreate, GameUpdate
from indiejz.services.pricing import ZERO

router = APIRouter()
log = logging.getLogger("indiejz")


@router.get("", response_model=list[Game])
def games_list(db: Session = Depends(get_db)):
    return db.exec(select(Game).order_by(Game.id.desc())).all()


@router.post("", response_model=Game, status_code=201)
def game_create(body: GameCreate, db: Session = Depends(get_db)):
    game = Game(**body.model_dump())
    if game.is_free:
        game.price = ZERO
    db.add(game)
    db.commit()
    db.refresh(game)
    log.info("Admin created game: id=%s title=%s", game.id, game.title)
    return game


@router.get("/{game_id}", response_model=Game)
def game_detail(game_id: int, db: Session = Depends(get_db)):
    game = db.get(Game, game_id)
    if not game:
        raise GameNotFound()
    return game


@router.patch("/{game_id}", response_model=Game)
def game_update(game_id: int, body: GameUpdate, db: Session = Depends(get_db)):
    game = db.get(Game, game_id)
    if not game:
        raise GameNotFound()
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(game, key, value)
    if game.is_free:
        game.price = ZERO
    game.updated_at = datetime.utcnow()
    db.add(game)
    db.commit()
    db.refresh(game)
    return game


@router.delete("/{game_id}")
def game_delete(game_id: int, db: Session = Depends(get_db)):
    game = db.get(Game, game_id)
    if not game:
        raise GameNotFound()
    if db.exec(select(Purchase.id).where(Purchase.game_id == game_id)).first() is not None:
        raise HTTPException(status_code=409, detail="Jogo com vendas registradas não pode ser excluído.")
    if db.exec(select(Coupon.id).where(Coupon.game_id == game_id)).first() is not None:
        raise HTTPException(status_code=409, detail="Remova ou altere os cupons deste jogo antes de excluir.")
    db.delete(game)
    db.commit()
    log.info("Admin deleted game: id=%s", game_id)
    return {"ok": True}
