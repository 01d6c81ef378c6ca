"""Página de apoio: doações e mural de apoiadores."""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlmodel import Session, func, select

from indiejz.core.database import get_db
from indiejz.models import Donation
from indiejz.schemas import DonationCreate, DonationResponse, LeaderboardEntry
from indiejz.services.notifications import enqueue_donation_thanks, run_notification_queue
from indiejz.services.pricing import to_money

router = APIRouter(prefix="/support", tags=["support"])
log = logging.getLogger("indiejz")


@router.post("/donations", response_model=DonationResponse, status_code=201)
def create_donation(
    body: DonationCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    donation = Donation(
        name=body.name,
        email=str(body.email) if body.email else None,
        amount=to_money(body.amount),
        message=(body.message or "").strip() or None,
        is_public=body.is_public,
    )
    db.add(donation)
    db.commit()
    db.refresh(donation)
    log.info("Donation recorded: id=%s amount=%s public=%s", donation.id, donation.amount, donation.is_public)

    if donation.email:
        try:
            enqueue_donation_thanks(db, donation.name, donation.email, donation.amount)
            background_tasks.add_task(run_notification_queue)
        except Exception:
            db.rollback()
            log.exception("Could not enqueue donation thank-you: donation_id=%s", donation.id)

    return DonationResponse(
        id=donation.id or 0,
        name=donation.name,
        amount=to_money(donation.amount),
        is_public=donation.is_public,
    )


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
def leaderboard(db: Session = Depends(get_db), limit: int = Query(10, ge=1, le=50)):
    """Apoiadores públicos somados por nome, maior total primeiro."""
    total = func.sum(Donation.amount).label("total")
    stmt = (
        select(Donation.name, total, func.count(Donation.id))
        .where(Donation.is_public == True)  # noqa: E712
        .group_by(Donation.name)
        .order_by(total.desc(), Donation.name)
        .limit(limit)
    )
    return [
        LeaderboardEntry(name=name, total=to_money(amount), donations=count)
        for name, amount, count in db.exec(stmt).all()
    ]
