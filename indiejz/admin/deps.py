"""Admin auth: X-Admin-Secret (header) ou ?admin_secret= (query), comparação em tempo constante."""
import hmac

from fastapi import Header, HTTPException, Query

from indiejz.core.config import settings


def _secret_matches(provided: str | None, expected: str | None) -> bool:
    return hmac.compare_digest((provided or "").encode("utf-8"), (expected or "").encode("utf-8"))


def require_admin(
    x_admin_secret: str | None = Header(None, alias="X-Admin-Secret"),
    admin_secret: str | None = Query(None, description="Senha do admin"),
) -> None:
    expected = (settings.admin_secret or "").strip()
    if not expected:
        raise HTTPException(status_code=503, detail="Painel admin não configurado (ADMIN_SECRET ausente).")
    if not _secret_matches(x_admin_secret or admin_secret, expected):
        raise HTTPException(status_code=403, detail="Não autorizado.")
