"""Fila de e-mails (notification_jobs): consulta e envio manual."""
from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from indiejz.core.database import get_db
from indiejz.models import NotificationJob
from indiejz.services.notifications import dispatch_pending

router = APIRouter()

STATUSES = ("pending", "sent", "failed")


@router.get("")
def notifications_list(db: Session = Depends(get_db), status_filter: str | None = None, limit: int = 100):
    stmt = select(NotificationJob).order_by(NotificationJob.id.desc()).limit(min(max(limit, 1), 500))
    if status_filter in STATUSES:
        stmt = stmt.where(NotificationJob.status == status_filter)
    return [
        {
            "id": j.id,
            "kind": j.kind,
            "to_email": j.to_email,
            "subject": j.subject,
            "status": j.status,
            "attempts": j.attempts,
            "next_attempt_at": j.next_attempt_at.isoformat() if j.next_attempt_at else None,
            "last_error": (j.last_error or "")[:200] or None,
            "created_at": j.created_at.isoformat() if j.created_at else None,
            "sent_at": j.sent_at.isoformat() if j.sent_at else None,
        }
        for j in db.exec(stmt).all()
    ]


@router.post("/dispatch")
def notifications_dispatch(db: Session = Depends(get_db)):
    """Envia agora os jobs pendentes que já passaram do next_attempt_at."""
    return {"sent": dispatch_pending(db)}
