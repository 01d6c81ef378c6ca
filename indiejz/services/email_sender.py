"""Envio de e-mail via SMTP: alerta de venda, recibo do comprador, agradecimento de doação."""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from indiejz.core.config import settings

log = logging.getLogger("indiejz.email")


def is_mail_configured() -> bool:
    """Configurações SMTP preenchidas?"""
    host = getattr(settings, "smtp_host", None) or ""
    return bool(host.strip())


def send_email(to: str, subject: str, html_body: str) -> bool:
    """Envia um único e-mail HTML. True se o servidor aceitou."""
    if not is_mail_configured():
        log.warning("SMTP not configured; email not sent to %s", to)
        return False
    host = (settings.smtp_host or "").strip()
    port = int(getattr(settings, "smtp_port", 587) or 587)
    user = (getattr(settings, "smtp_user", None) or "").strip()
    password = (getattr(settings, "smtp_password", None) or "").strip()
    from_addr = (getattr(settings, "smtp_from", None) or "noreply@indiejz.dev").strip()
    from_name = (getattr(settings, "smtp_from_name", None) or "IndieJZ CyberLab").strip()
    use_tls = getattr(settings, "smtp_use_tls", True)
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{from_name} <{from_addr}>" if from_name else from_addr
    msg["To"] = to
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(host, port, timeout=15) as smtp:
            if use_tls:
                smtp.starttls()
            if user and password:
                smtp.login(user, password)
            smtp.sendmail(from_addr, [to], msg.as_string())
        log.info("Email sent to %s subject=%s", to, subject[:50])
        return True
    except Exception as e:
        log.exception("Failed to send email to %s: %s", to, e)
        return False
