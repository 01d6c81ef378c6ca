"""Rate limit por IP (SlowAPI), com suporte a proxy (X-Forwarded-For)."""
from fastapi import Request

from slowapi import Limiter

from .config import settings


def _get_client_ip(request: Request) -> str:
    """IP real do cliente atrás de proxy (Render, Nginx)."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(key_func=_get_client_ip)


# Limites lidos a cada requisição, para que mudanças em settings valham sem reiniciar
def coupon_limit() -> str:
    return f"{settings.rate_limit_coupon_per_minute}/minute"


def checkout_limit() -> str:
    return f"{settings.rate_limit_checkout_per_minute}/minute"


def auth_limit() -> str:
    return f"{settings.rate_limit_per_minute}/minute"


def register_limit() -> str:
    return f"{settings.rate_limit_register_per_minute}/minute;100/hour"
