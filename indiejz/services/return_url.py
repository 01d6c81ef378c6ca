"""Parâmetros que a Stripe devolve na URL de retorno (success/canceled) e a limpeza deles."""
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from indiejz.core.config import settings

RETURN_PARAMS = ("success", "canceled", "game_id", "session_id")

ACTION_VERIFY = "verify"
ACTION_CANCELED = "canceled"
ACTION_NONE = "none"


@dataclass
class ReturnAction:
    kind: str
    game_id: int | None = None
    session_id: str | None = None


def parse_return_params(params) -> ReturnAction:
    """params: mapping da query (request.query_params ou dict)."""
    if (params.get("success") or "").lower() == "true":
        session_id = (params.get("session_id") or "").strip()
        try:
            game_id = int(params.get("game_id") or "")
        except ValueError:
            game_id = None
        if session_id and game_id is not None:
            return ReturnAction(ACTION_VERIFY, game_id=game_id, session_id=session_id)
        return ReturnAction(ACTION_NONE)
    if (params.get("canceled") or "").lower() == "true":
        return ReturnAction(ACTION_CANCELED)
    return ReturnAction(ACTION_NONE)


def strip_return_params(url: str) -> str:
    """Remove success/canceled/game_id/session_id e mantém o resto da query e o fragmento."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in RETURN_PARAMS]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def _origin(url: str) -> tuple[str, str]:
    parts = urlsplit(url.strip())
    return parts.scheme.lower(), parts.netloc.lower()


def allowed_return_origins() -> set[tuple[str, str]]:
    """Origem do FRONTEND_URL mais as origins do CORS (quando não é "*")."""
    origins = {_origin(settings.frontend_url)}
    for o in (settings.cors_origins or "").split(","):
        o = o.strip()
        if o and o != "*":
            origins.add(_origin(o))
    return origins


def safe_return_url(url: str | None) -> str:
    """URL de retorno só em site conhecido; qualquer outra volta para FRONTEND_URL."""
    url = (url or "").strip()
    if not url:
        return settings.frontend_url
    scheme, netloc = _origin(url)
    if scheme in ("http", "https") and netloc and (scheme, netloc) in allowed_return_origins():
        return url
    return settings.frontend_url


def with_fragment(url: str, fragment: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, fragment))
