"""StripeGateway com stripe.checkout.Session trocado: parâmetros enviados, leitura da sessão e erros da Stripe."""
from decimal import Decimal

import pytest
import stripe
from fastapi.testclient import TestClient
from sqlmodel import select

from indiejz.main import app
from indiejz.models import CheckoutOrder
from indiejz.services.checkout import SESSION_ID_PLACEHOLDER
from indiejz.services.payment_gateway import StripeGateway, get_payment_gateway


def stripe_session(**values):
    data = {"id": "cs_test_a1", "url": None, "payment_status": "unpaid", "metadata": {}}
    data.update(values)
    return stripe.checkout.Session.construct_from(data, "sk_test_dummy")


@pytest.fixture
def stripe_gateway(client, monkeypatch):
    """Gateway real da aplicação; só as chamadas de rede da Stripe são trocadas em cada teste."""
    monkeypatch.setattr(stripe, "api_key", None)
    monkeypatch.setattr(stripe, "api_version", None)
    real = StripeGateway(api_key="sk_test_dummy")
    app.dependency_overrides[get_payment_gateway] = lambda: real
    return real


def test_create_sends_price_metadata_and_return_urls(client: TestClient, db, stripe_gateway, make_game, make_coupon, monkeypatch):
    game = make_game()
    make_coupon(code="SAVE10")
    calls = []

    def fake_create(**params):
        calls.append(params)
        return stripe_session(
            id="cs_test_a1",
            url="https://checkout.stripe.com/c/pay/cs_test_a1",
            metadata=params["metadata"],
        )

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    r = client.post(
        "/checkout/sessions",
        json={
            "gameId": game.id,
            "gameTitle": game.title,
            "price": "18.00",
            "couponCode": "SAVE10",
            "returnUrl": "https://indiejz.dev/jogos",
        },
    )
    assert r.status_code == 200, r.text
    assert r.json() == {"url": "https://checkout.stripe.com/c/pay/cs_test_a1", "sessionId": "cs_test_a1"}
    assert stripe.api_key == "sk_test_dummy"
    assert stripe.api_version == "2023-10-16"

    assert len(calls) == 1
    params = calls[0]
    assert params["mode"] == "payment"
    assert params["payment_method_types"] == ["card"]
    assert "customer_email" not in params
    [line] = params["line_items"]
    assert line["quantity"] == 1
    assert line["price_data"]["unit_amount"] == 1800
    assert line["price_data"]["currency"] == "brl"
    assert line["price_data"]["product_data"]["name"] == "Neon Runner"
    assert "SAVE10" in line["price_data"]["product_data"]["description"]
    assert params["metadata"] == {
        "game_id": str(game.id),
        "user_id": "",
        "coupon_code": "SAVE10",
        "original_price": "20.00",
        "discount_amount": "2.00",
        "price_paid": "18.00",
    }
    assert params["success_url"] == (
        f"https://indiejz.dev/jogos?success=true&game_id={game.id}&session_id={SESSION_ID_PLACEHOLDER}"
    )
    assert params["cancel_url"] == "https://indiejz.dev/jogos?canceled=true"

    order = db.exec(select(CheckoutOrder).where(CheckoutOrder.session_id == "cs_test_a1")).one()
    assert order.price_paid == Decimal("18.00")


def test_logged_in_buyer_email_goes_to_stripe(client: TestClient, stripe_gateway, make_game, auth_headers, monkeypatch):
    game = make_game()
    calls = []

    def fake_create(**params):
        calls.append(params)
        return stripe_session(url="https://checkout.stripe.com/c/pay/cs_test_a1", metadata=params["metadata"])

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    r = client.post(
        "/checkout/sessions",
        json={"gameId": game.id, "gameTitle": game.title, "price": "20.00"},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert calls[0]["customer_email"] == "buyer@example.com"
    assert calls[0]["line_items"][0]["price_data"]["unit_amount"] == 2000


def test_stripe_error_on_create_is_502_with_message(client: TestClient, db, stripe_gateway, make_game, monkeypatch):
    game = make_game()

    def fake_create(**params):
        raise stripe.InvalidRequestError("Invalid currency: xyz", "currency")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    r = client.post("/checkout/sessions", json={"gameId": game.id, "gameTitle": game.title, "price": "20.00"})
    assert r.status_code == 502
    assert r.json()["error"] == "Não foi possível iniciar o pagamento: Invalid currency: xyz"
    assert db.exec(select(CheckoutOrder)).all() == []


def test_retrieve_reads_status_email_and_metadata(stripe_gateway, monkeypatch):
    requested = []

    def fake_retrieve(session_id, **kwargs):
        requested.append(session_id)
        return stripe_session(
            id=session_id,
            payment_status="paid",
            customer_details={"email": "buyer@example.com", "name": "Buyer"},
            metadata={"game_id": "3", "coupon_code": "SAVE10", "price_paid": "18.00"},
        )

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)
    session = stripe_gateway.retrieve_checkout_session("cs_test_paid")
    assert requested == ["cs_test_paid"]
    assert session.id == "cs_test_paid"
    assert session.payment_status == "paid"
    assert session.customer_email == "buyer@example.com"
    assert session.metadata == {"game_id": "3", "coupon_code": "SAVE10", "price_paid": "18.00"}
    assert session.url is None


def test_verify_through_stripe_records_sale(client: TestClient, db, stripe_gateway, make_game, monkeypatch):
    game = make_game()

    def fake_retrieve(session_id, **kwargs):
        return stripe_session(
            id=session_id,
            payment_status="paid",
            customer_details={"email": "buyer@example.com"},
            metadata={
                "game_id": str(game.id),
                "user_id": "",
                "coupon_code": "",
                "original_price": "20.00",
                "discount_amount": "0.00",
                "price_paid": "20.00",
            },
        )

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)
    r = client.post("/checkout/verify", json={"sessionId": "cs_test_paid", "gameId": game.id})
    assert r.status_code == 200, r.text
    assert r.json()["verified"] is True
    assert r.json()["fileUrl"] == game.file_url

    order = db.exec(select(CheckoutOrder).where(CheckoutOrder.session_id == "cs_test_paid")).one()
    assert order.is_processed is True
    assert order.customer_email == "buyer@example.com"


def test_stripe_error_on_retrieve_is_502_with_message(client: TestClient, stripe_gateway, make_game, monkeypatch):
    game = make_game()

    def fake_retrieve(session_id, **kwargs):
        raise stripe.InvalidRequestError(f"No such checkout.session: {session_id}", "id")

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)
    r = client.post("/checkout/verify", json={"sessionId": "cs_nope", "gameId": game.id})
    assert r.status_code == 502
    assert r.json()["error"] == "Falha ao consultar o pagamento: No such checkout.session: cs_nope"
