"""Fila de e-mails: pending → sent | failed, com nova tentativa em next_attempt_at."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class NotificationJob(SQLModel, table=True):
    __tablename__ = "notification_jobs"
    id: int | None = Field(default=None, primary_key=True)
    kind: str = Field(index=True)  # sale_admin | sale_receipt | donation_thanks
    to_email: str
    subject: str
    html_body: str
    status: str = Field(default="pending", index=True)  # pending | sent | failed
    attempts: int = 0
    next_attempt_at: datetime = Field(default_factory=datetime.utcnow)
    last_error: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    sent_at: datetime | None = None
