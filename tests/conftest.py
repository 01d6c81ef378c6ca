"""Pytest fixtures: test client, in-memory SQLite, Stripe falsa e e-mail capturado."""
import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

# Ambiente de teste (precisa estar definido antes de importar a aplicação)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("ADMIN_SECRET", "test-admin-secret")
os.environ.setdefault("ADMIN_EMAIL", "admin@indiejz.dev")
os.environ.setdefault("FRONTEND_URL", "https://indiejz.dev/jogos")
# Limites altos para que só o teste de rate limit chegue no 429
os.environ.setdefault("RATE_LIMIT_REGISTER_PER_MINUTE", "100")
os.environ.setdefault("RATE_LIMIT_COUPON_PER_MINUTE", "1000")
os.environ.setdefault("RATE_LIMIT_CHECKOUT_PER_MINUTE", "1000")

from sqlmodel import Session, SQLModel  # noqa: E402

from indiejz.core.database import engine  # noqa: E402
from indiejz.core.errors import CheckoutCreationFailed, ProviderError  # noqa: E402
from indiejz.core.rate_limit import limiter  # noqa: E402
from indiejz.main import app  # noqa: E402
from indiejz.models import Coupon, Game  # noqa: E402
from indiejz.services import email_sender  # noqa: E402
from indiejz.services.payment_gateway import CheckoutSession, get_payment_gateway  # noqa: E402

ADMIN_HEADERS = {"X-Admin-Secret": os.environ["ADMIN_SECRET"]}


class FakeGateway:
    """Mesma interface do StripeGateway, sem rede. pay() simula o comprador concluindo o pagamento."""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}
        self.created: list[dict] = []
        self.retrieved: list[str] = []
        self.fail_create: str | None = None

    def create_checkout_session(self, item, success_url, cancel_url, metadata, customer_email=None):
        if self.fail_create:
            raise CheckoutCreationFailed(f"Não foi possível iniciar o pagamento: {self.fail_create}")
        session_id = f"cs_test_{len(self.sessions) + 1}"
        session = CheckoutSession(
            id=session_id,
            url=f"https://checkout.stripe.test/pay/{session_id}",
            payment_status="unpaid",
            metadata=dict(metadata),
            customer_email=customer_email,
        )
        self.sessions[session_id] = session
        self.created.append(
            {
                "item": item,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": dict(metadata),
                "customer_email": customer_email,
            }
        )
        return session

    def retrieve_checkout_session(self, session_id):
        self.retrieved.append(session_id)
        if session_id not in self.sessions:
            raise ProviderError(f"Falha ao consultar o pagamento: No such checkout.session: {session_id}")
        return self.sessions[session_id]

    def pay(self, session_id, email="buyer@example.com"):
        session = self.sessions[session_id]
        session.payment_status = "paid"
        session.customer_email = email
        return session

    def add_session(self, session_id, metadata, paid=True, email=None):
        session = CheckoutSession(
            id=session_id,
            url=None,
            payment_status="paid" if paid else "unpaid",
            metadata=dict(metadata),
            customer_email=email,
        )
        self.sessions[session_id] = session
        return session


@pytest.fixture(autouse=True)
def _fresh_db():
    """Tabelas recriadas e contadores do rate limit zerados a cada teste."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    limiter.reset()
    yield


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Substitui o envio SMTP; cada item é (to, subject, html_body)."""
    outbox = []

    def fake_send(to, subject, html_body):
        outbox.append((to, subject, html_body))
        return True

    monkeypatch.setattr(email_sender, "send_email", fake_send)
    return outbox


@pytest.fixture
def gateway():
    fake = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture(scope="function")
def client(gateway):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_game(db):
    def _make(**overrides):
        data = {
            "title": "Neon Runner",
            "description": "Corrida cyberpunk em pixel art",
            "price": Decimal("20.00"),
            "is_free": False,
            "file_url": "https://cdn.indiejz.dev/games/neon-runner.zip",
            "genre": "acao",
        }
        data.update(overrides)
        game = Game(**data)
        db.add(game)
        db.commit()
        db.refresh(game)
        return game

    return _make


@pytest.fixture
def make_coupon(db):
    def _make(**overrides):
        data = {"code": "SAVE10", "discount_percent": Decimal("10")}
        data.update(overrides)
        coupon = Coupon(**data)
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon

    return _make


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def auth_headers(client: TestClient):
    """Cadastro + login; Authorization header do usuário buyer@example.com."""
    client.post(
        "/auth/register",
        json={"email": "buyer@example.com", "password": "test123456", "full_name": "Buyer"},
    )
    r = client.post("/auth/login", json={"email": "buyer@example.com", "password": "test123456"})
    assert r.status_code == 200, f"Login failed: {r.status_code} {r.text}"
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
