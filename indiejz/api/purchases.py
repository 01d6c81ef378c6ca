from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from indiejz.api.deps import get_current_user_id
from indiejz.core.database import get_db
from indiejz.models import Game, Purchase
from indiejz.schemas import PurchaseResponse

router = APIRouter(prefix="/purchases", tags=["purchases"])


@router.get("/me", response_model=list[PurchaseResponse])
def my_purchases(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Jogos comprados pelo usuário logado, do mais recente ao mais antigo."""
    stmt = (
        select(Purchase, Game)
        .join(Game, Game.id == Purchase.game_id, isouter=True)
        .where(Purchase.user_id == user_id)
        .order_by(Purchase.created_at.desc(), Purchase.id.desc())
    )
    return [
        PurchaseResponse(
            id=p.id or 0,
            game_id=p.game_id,
            game_title=g.title if g else None,
            thumbnail_url=g.thumbnail_url if g else None,
            file_url=g.file_url if g else None,
            price_paid=p.price_paid,
            coupon_code=p.coupon_code,
            discount_amount=p.discount_amount,
            created_at=p.created_at,
        )
        for p, g in db.exec(stmt).all()
    ]
