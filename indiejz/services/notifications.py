"""
Notificações por e-mail com fila persistente (notification_jobs).

A verificação de pagamento e a doação só gravam o job; o envio acontece depois,
em background, com novas tentativas e espera crescente. Falha de envio nunca
chega ao comprador.
"""
import html
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from sqlmodel import Session, select

from indiejz.core.config import settings
from indiejz.core.database import engine
from indiejz.models import NotificationJob
from indiejz.services import email_sender
from indiejz.services.pricing import format_price

log = logging.getLogger("indiejz.notifications")

KIND_SALE_ADMIN = "sale_admin"
KIND_SALE_RECEIPT = "sale_receipt"
KIND_DONATION_THANKS = "donation_thanks"

_BRAND = "IndieJZ CyberLab"


def _layout(title: str, inner_html: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title}</title>
</head>
<body style="margin:0;padding:0;background-color:#0a0a0a;font-family:'Segoe UI',Tahoma,Arial,sans-serif;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color:#0a0a0a;">
    <tr>
      <td align="center" style="padding:32px 16px;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:600px;background:#1a1a2e;border-radius:12px;overflow:hidden;">
          <tr>
            <td style="padding:28px 24px;color:#ffffff;">
{inner_html}
            </td>
          </tr>
          <tr>
            <td style="padding:16px 24px;border-top:1px solid #16213e;font-size:12px;color:#71717a;text-align:center;">
              {_BRAND} &middot; {datetime.utcnow().strftime("%d/%m/%Y %H:%M")} UTC
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def build_sale_admin_email(
    game_title: str,
    price_paid: Decimal,
    customer_email: str | None,
    coupon_code: str | None = None,
    discount_amount: Decimal | None = None,
) -> tuple[str, str]:
    """Alerta de venda para o admin. (subject, html_body)."""
    title = html.escape(game_title)
    subject = f"Nova venda: {game_title}"
    coupon_line = ""
    if coupon_code:
        coupon_line = (
            f'<p style="color:#ff6b6b;margin:10px 0;">Cupom usado: {html.escape(coupon_code)} '
            f"(-{format_price(discount_amount or 0)})</p>"
        )
    inner = f"""              <h1 style="color:#00ff88;margin:0 0 20px;">Nova venda realizada!</h1>
              <div style="background-color:#16213e;padding:20px;border-radius:10px;">
                <h2 style="color:#ffffff;margin-top:0;">{title}</h2>
                <p style="color:#b0b0b0;margin:10px 0;">Cliente: {html.escape(customer_email or "desconhecido")}</p>
                {coupon_line}
                <p style="color:#00ff88;font-size:24px;font-weight:bold;margin:20px 0;">{format_price(price_paid)}</p>
              </div>"""
    return subject, _layout(subject, inner)


def build_sale_receipt_email(
    game_title: str,
    price_paid: Decimal,
    file_url: str | None,
    coupon_code: str | None = None,
    discount_amount: Decimal | None = None,
) -> tuple[str, str]:
    """Recibo do comprador, com link de download quando houver arquivo."""
    title = html.escape(game_title)
    subject = f"Seu recibo: {game_title}"
    discount_line = ""
    if coupon_code:
        discount_line = (
            f'<p style="color:#b0b0b0;margin:6px 0;">Desconto ({html.escape(coupon_code)}): '
            f"-{format_price(discount_amount or 0)}</p>"
        )
    download = ""
    if file_url:
        download = (
            '<p style="margin:24px 0;text-align:center;">'
            f'<a href="{html.escape(file_url, quote=True)}" style="display:inline-block;padding:14px 28px;'
            'background:#00ff88;color:#0a0a0a;text-decoration:none;font-weight:600;border-radius:10px;">'
            "Baixar o jogo</a></p>"
        )
    inner = f"""              <h1 style="color:#00ff88;margin:0 0 20px;">Obrigado pela compra!</h1>
              <p style="color:#b0b0b0;margin:6px 0;">Jogo: <strong style="color:#ffffff;">{title}</strong></p>
              {discount_line}
              <p style="color:#b0b0b0;margin:6px 0;">Total pago: <strong style="color:#00ff88;">{format_price(price_paid)}</strong></p>
              {download}"""
    return subject, _layout(subject, inner)


def build_donation_thanks_email(name: str, amount: Decimal) -> tuple[str, str]:
    subject = "Obrigado pela sua doação!"
    inner = f"""              <h1 style="color:#22c55e;margin:0 0 20px;text-align:center;">Obrigado, {html.escape(name)}!</h1>
              <p style="color:#a1a1aa;line-height:1.6;">Sua generosidade nos ajuda a continuar criando jogos para a comunidade.</p>
              <p style="font-size:36px;font-weight:bold;color:#22c55e;text-align:center;margin:20px 0;">{format_price(amount)}</p>
              <p style="color:#a1a1aa;line-height:1.6;text-align:center;">Seu nome foi adicionado ao nosso <strong>Mural de Apoiadores</strong>!</p>"""
    return subject, _layout(subject, inner)


def _enqueue(db: Session, kind: str, to_email: str, subject: str, html_body: str) -> NotificationJob:
    job = NotificationJob(kind=kind, to_email=to_email, subject=subject, html_body=html_body)
    db.add(job)
    return job


def enqueue_sale_notifications(
    db: Session,
    game_title: str,
    price_paid: Decimal,
    customer_email: str | None,
    coupon_code: str | None = None,
    discount_amount: Decimal | None = None,
    file_url: str | None = None,
) -> list[NotificationJob]:
    """Alerta para o admin e recibo para o comprador. Faz commit."""
    jobs = []
    admin_email = (settings.admin_email or "").strip()
    if admin_email:
        subject, body = build_sale_admin_email(game_title, price_paid, customer_email, coupon_code, discount_amount)
        jobs.append(_enqueue(db, KIND_SALE_ADMIN, admin_email, subject, body))
    else:
        log.warning("ADMIN_EMAIL not configured; sale alert for %s skipped", game_title)
    if customer_email:
        subject, body = build_sale_receipt_email(game_title, price_paid, file_url, coupon_code, discount_amount)
        jobs.append(_enqueue(db, KIND_SALE_RECEIPT, customer_email, subject, body))
    db.commit()
    return jobs


def enqueue_donation_thanks(db: Session, name: str, email: str, amount: Decimal) -> NotificationJob:
    subject, body = build_donation_thanks_email(name, amount)
    job = _enqueue(db, KIND_DONATION_THANKS, email, subject, body)
    db.commit()
    return job


def _backoff(attempts: int) -> timedelta:
    base = max(1, int(settings.notification_backoff_seconds or 60))
    return timedelta(seconds=base * (2 ** max(0, attempts - 1)))


def dispatch_pending(db: Session, now: datetime | None = None, limit: int = 50) -> int:
    """Envia os jobs pendentes e vencidos. Retorna quantos foram enviados."""
    now = now or datetime.utcnow()
    max_attempts = max(1, int(settings.notification_max_attempts or 1))
    stmt = (
        select(NotificationJob)
        .where(NotificationJob.status == "pending")
        .where(NotificationJob.next_attempt_at <= now)
        .order_by(NotificationJob.id)
        .limit(limit)
    )
    sent = 0
    for job in db.exec(stmt).all():
        job.attempts = (job.attempts or 0) + 1
        try:
            ok = email_sender.send_email(job.to_email, job.subject, job.html_body)
            error = None if ok else "email provider did not accept the message"
        except Exception as e:
            ok = False
            error = str(e)[:500]
        if ok:
            job.status = "sent"
            job.sent_at = now
            job.last_error = None
            sent += 1
        else:
            job.last_error = error
            if job.attempts >= max_attempts:
                job.status = "failed"
                log.error("Notification %s (%s) failed permanently: %s", job.id, job.kind, error)
            else:
                job.next_attempt_at = now + _backoff(job.attempts)
                log.warning(
                    "Notification %s (%s) attempt %s failed, retry at %s",
                    job.id,
                    job.kind,
                    job.attempts,
                    job.next_attempt_at.isoformat(),
                )
        db.add(job)
        db.commit()
    return sent


def run_notification_queue() -> None:
    """Tarefa em background: sessão própria, erros só vão para o log."""
    try:
        with Session(engine) as db:
            sent = dispatch_pending(db)
        if sent:
            log.info("Notification queue: %s email(s) sent", sent)
    except Exception:
        log.exception("Notification queue run failed")
