"""Botão de download: jogo grátis abre o arquivo direto; jogo pago vai para o checkout."""
import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlmodel import Session

from indiejz.core.errors import FileUnavailable, GameNotFound
from indiejz.models import Game
from indiejz.schemas.checkout import CreateCheckoutRequest
from indiejz.services.checkout import checkout_coupon, create_checkout
from indiejz.services.coupon import normalize_code
from indiejz.services.payment_gateway import StripeGateway
from indiejz.services.pricing import final_price

log = logging.getLogger("indiejz.checkout")


@dataclass
class DownloadOutcome:
    kind: str  # file | checkout
    file_url: str | None = None
    url: str | None = None
    session_id: str | None = None


def free_download(db: Session, game: Game) -> DownloadOutcome:
    if not game.file_url:
        raise FileUnavailable()
    db.connection().execute(update(Game).where(Game.id == game.id).values(downloads=Game.downloads + 1))
    db.commit()
    return DownloadOutcome(kind="file", file_url=game.file_url)


def request_download(
    db: Session,
    gateway: StripeGateway,
    game_id: int,
    coupon_code: str | None = None,
    return_url: str | None = None,
    user_id: int | None = None,
    customer_email: str | None = None,
) -> DownloadOutcome:
    game = db.get(Game, game_id)
    if not game:
        raise GameNotFound()
    if game.is_free:
        return free_download(db, game)

    code = normalize_code(coupon_code) or None
    coupon = checkout_coupon(db, code, game.id)
    body = CreateCheckoutRequest(
        game_id=game.id,
        game_title=game.title,
        price=final_price(game.price, coupon),
        original_price=game.price,
        coupon_code=code,
        return_url=return_url,
    )
    result = create_checkout(db, gateway, body, user_id=user_id, customer_email=customer_email)
    return DownloadOutcome(kind="checkout", url=result.url, session_id=result.session_id)
