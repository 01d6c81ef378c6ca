"""
Checkout hospedado da Stripe: criação da sessão, verificação e retorno.

O front chama /checkout/verify ao voltar com ?success=true; /checkout/return faz
o mesmo do lado do servidor (útil como success_url direto) e redireciona.
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from indiejz.api.deps import get_optional_user
from indiejz.core.database import get_db
from indiejz.core.errors import StoreError
from indiejz.core.rate_limit import checkout_limit, limiter
from indiejz.models import User
from indiejz.schemas import CheckoutResponse, CreateCheckoutRequest, VerifyPaymentRequest, VerifyPaymentResponse
from indiejz.services.checkout import create_checkout
from indiejz.services.notifications import run_notification_queue
from indiejz.services.payment_gateway import StripeGateway, get_payment_gateway
from indiejz.services.return_url import (
    ACTION_CANCELED,
    ACTION_VERIFY,
    parse_return_params,
    safe_return_url,
    strip_return_params,
    with_fragment,
)
from indiejz.services.verification import verify_payment

router = APIRouter(prefix="/checkout", tags=["checkout"])
log = logging.getLogger("indiejz.checkout")

FRAGMENT_CANCELED = "compra-cancelada"
FRAGMENT_PENDING = "compra-pendente"
FRAGMENT_ERROR = "compra-erro"
FRAGMENT_CONFIRMED = "compra-confirmada"


@router.post("/sessions", response_model=CheckoutResponse)
@limiter.limit(checkout_limit)
def create_session(
    request: Request,
    body: CreateCheckoutRequest,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
    user: User | None = Depends(get_optional_user),
):
    result = create_checkout(
        db,
        gateway,
        body,
        user_id=user.id if user else None,
        customer_email=user.email if user else None,
    )
    return CheckoutResponse(url=result.url, session_id=result.session_id)


@router.post("/verify", response_model=VerifyPaymentResponse)
@limiter.limit(checkout_limit)
def verify(
    request: Request,
    body: VerifyPaymentRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    result = verify_payment(db, gateway, body.session_id, body.game_id)
    if result.notifications:
        background_tasks.add_task(run_notification_queue)
    return VerifyPaymentResponse(
        verified=result.verified,
        file_url=result.file_url,
        game_title=result.game_title,
        message=result.message,
    )


@router.get("/return")
@limiter.limit(checkout_limit)
def checkout_return(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    """
    Volta da Stripe: verifica uma única vez e redireciona (303) sem os parâmetros
    success/canceled/game_id/session_id, para que recarregar a página não verifique de novo.
    Query extra opcional: return_url (página de destino no próprio site; qualquer outra
    origem cai no FRONTEND_URL).
    """
    params = request.query_params
    base = strip_return_params(safe_return_url(params.get("return_url")))
    action = parse_return_params(params)

    if action.kind == ACTION_CANCELED:
        return RedirectResponse(with_fragment(base, FRAGMENT_CANCELED), status_code=303)
    if action.kind != ACTION_VERIFY:
        return RedirectResponse(base, status_code=303)

    try:
        result = verify_payment(db, gateway, action.session_id, action.game_id)
    except StoreError as e:
        log.warning("Return verification failed: session_id=%s error=%s", action.session_id, e.message)
        return RedirectResponse(with_fragment(base, FRAGMENT_ERROR), status_code=303)

    if result.notifications:
        background_tasks.add_task(run_notification_queue)
    if not result.verified:
        return RedirectResponse(with_fragment(base, FRAGMENT_PENDING), status_code=303)
    if result.file_url:
        return RedirectResponse(result.file_url, status_code=303)
    return RedirectResponse(with_fragment(base, FRAGMENT_CONFIRMED), status_code=303)
