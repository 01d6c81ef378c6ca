import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Uvicorn pode rodar de qualquer pasta: o .env é sempre o da raiz do projeto
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlmodel import Session

from indiejz.admin import admin_router
from indiejz.api import auth_router, checkout_router, purchases_router, store_router, support_router
from indiejz.core.config import is_stripe_configured, settings
from indiejz.core.database import engine, init_db
from indiejz.core.errors import StoreError
from indiejz.core.rate_limit import limiter
from indiejz.logging import setup_logging
from indiejz.models import ErrorLog

setup_logging(level=logging.INFO)
log = logging.getLogger("indiejz")


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info("Stripe configured: %s", "yes" if is_stripe_configured() else "NO (STRIPE_SECRET_KEY=sk_... no .env)")
    if not settings.admin_email:
        log.warning("ADMIN_EMAIL not set: sale alerts will not be sent")
    yield


app = FastAPI(
    title="IndieJZ Store API",
    description="Loja de jogos indie: catálogo, cupons, checkout Stripe e doações",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: path=%s detail=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Muitas requisições. Aguarde um minuto e tente de novo.")


def _validation_error_message(exc: RequestValidationError) -> str:
    errs = exc.errors()
    if not errs:
        return "Requisição inválida."
    first = errs[0]
    loc = list(first.get("loc") or [])
    field = str(loc[-1]) if loc else None
    if first.get("type") == "missing":
        if field == "body":
            return "Corpo da requisição ausente."
        return f"Campo obrigatório: {field}." if field else "Campo obrigatório ausente."
    msg = first.get("msg") or "Requisição inválida."
    # Mensagens dos validators vêm como "Value error, <texto>"
    return msg.removeprefix("Value error, ")


def _jsonable_errors(errs) -> list[dict]:
    # ctx pode trazer a exceção original (ValueError), que não é serializável
    return [{k: v for k, v in e.items() if k in ("type", "loc", "msg")} for e in errs]


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.info("Request validation error (422): path=%s method=%s detail=%s", request.url.path, request.method, errs)
    rid = getattr(request.state, "request_id", None)
    body = {"error": _validation_error_message(exc), "status_code": 422, "detail": _jsonable_errors(errs)}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(StoreError)
def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        log.warning("Store error %s: path=%s %s", exc.status_code, request.url.path, exc.message)
    return _error_response(request, exc.status_code, exc.message)


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc)
    try:
        with Session(engine) as db:
            db.add(ErrorLog(
                endpoint=request.url.path,
                method=request.method,
                error_message=str(exc)[:2000],
                stack_trace=traceback.format_exc()[:10000],
            ))
            db.commit()
    except Exception as e:
        log.warning("ErrorLog write failed: %s", e)
    return _error_response(request, 500, "Erro inesperado no servidor.")


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(store_router)
app.include_router(checkout_router)
app.include_router(purchases_router)
app.include_router(support_router)
app.include_router(admin_router)


@app.get("/health")
def health():
    database = "ok"
    try:
        with Session(engine) as db:
            db.connection().execute(text("SELECT 1"))
    except Exception as e:
        log.warning("Health check database error: %s", e)
        database = "error"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "stripe_configured": is_stripe_configured(),
    }
