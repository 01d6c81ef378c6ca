"""Catálogo, validação de cupom e botão de download."""
from fastapi import APIRouter, Depends, Query, Request
from sqlmodel import Session, select

from indiejz.api.deps import get_optional_user
from indiejz.core.database import get_db
from indiejz.core.errors import GameNotFound
from indiejz.core.rate_limit import checkout_limit, coupon_limit, limiter
from indiejz.models import Game, User
from indiejz.schemas import CouponPreview, DownloadRequest, DownloadResponse, GameResponse
from indiejz.services.coupon import validate_coupon
from indiejz.services.downloads import request_download
from indiejz.services.payment_gateway import StripeGateway, get_payment_gateway
from indiejz.services.pricing import ZERO, discount, format_price, price_for_game

router = APIRouter(tags=["store"])


@router.get("/games", response_model=list[GameResponse])
def list_games(db: Session = Depends(get_db), genre: str | None = None):
    stmt = select(Game).order_by(Game.created_at.desc(), Game.id.desc())
    if genre:
        stmt = stmt.where(Game.genre == genre)
    return db.exec(stmt).all()


@router.get("/games/{game_id}", response_model=GameResponse)
def get_game(game_id: int, db: Session = Depends(get_db)):
    game = db.get(Game, game_id)
    if not game:
        raise GameNotFound()
    return game


@router.get("/coupons/validate", response_model=CouponPreview)
@limiter.limit(coupon_limit)
def validate_coupon_code(
    request: Request,
    code: str = Query(""),
    game_id: int | None = None,
    db: Session = Depends(get_db),
):
    """Só confere o cupom; o uso é contado depois do pagamento."""
    coupon = validate_coupon(db, code, game_id=game_id)
    preview = CouponPreview(
        code=coupon.code,
        discount_percent=coupon.discount_percent,
        discount_amount=coupon.discount_amount,
        game_id=coupon.game_id,
    )
    if game_id is not None:
        game = db.get(Game, game_id)
        if not game:
            raise GameNotFound()
        final = price_for_game(game, coupon)
        preview.discount = ZERO if game.is_free else discount(game.price, coupon)
        preview.final_price = final
        preview.display = format_price(final)
    return preview


@router.post("/games/{game_id}/download", response_model=DownloadResponse)
@limiter.limit(checkout_limit)
def download_game(
    request: Request,
    game_id: int,
    body: DownloadRequest | None = None,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
    user: User | None = Depends(get_optional_user),
):
    """Grátis: devolve o arquivo. Pago: devolve a URL do checkout da Stripe."""
    body = body or DownloadRequest()
    outcome = request_download(
        db,
        gateway,
        game_id,
        coupon_code=body.coupon_code,
        return_url=body.return_url,
        user_id=user.id if user else None,
        customer_email=user.email if user else None,
    )
    return DownloadResponse(
        kind=outcome.kind,
        file_url=outcome.file_url,
        url=outcome.url,
        session_id=outcome.session_id,
    )
