"""Página de apoio: doações e mural de apoiadores."""
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlmodel import select

from indiejz.models import Donation, NotificationJob


def donate(client, name, amount, **extra):
    body = {"name": name, "amount": amount}
    body.update(extra)
    return client.post("/support/donations", json=body)


def test_donation_sends_thank_you(client: TestClient, db, sent_emails):
    r = donate(client, "Ana", "25.00", email="ana@example.com", message="Bora!")
    assert r.status_code == 201
    j = r.json()
    assert j["name"] == "Ana"
    assert j["amount"] == "25.00"

    donation = db.exec(select(Donation)).one()
    assert donation.amount == Decimal("25.00")
    assert donation.message == "Bora!"
    job = db.exec(select(NotificationJob)).one()
    assert job.kind == "donation_thanks"
    assert job.status == "sent"
    assert [to for to, _, _ in sent_emails] == ["ana@example.com"]


def test_donation_without_email_sends_nothing(client: TestClient, db, sent_emails):
    assert donate(client, "Anônimo", "5.00").status_code == 201
    assert db.exec(select(NotificationJob)).all() == []
    assert sent_emails == []


def test_invalid_donation(client: TestClient):
    assert donate(client, "Ana", "0").status_code == 422
    assert donate(client, "   ", "10.00").status_code == 422
    assert donate(client, "Ana", "10.00", email="not-an-email").status_code == 422


def test_leaderboard_aggregates_public_donors(client: TestClient):
    donate(client, "Ana", "10.00")
    donate(client, "Ana", "15.50")
    donate(client, "Bruno", "20.00")
    donate(client, "Carla", "100.00", is_public=False)
    donate(client, "Davi", "1.00")

    r = client.get("/support/leaderboard")
    assert r.status_code == 200
    assert r.json() == [
        {"name": "Ana", "total": "25.50", "donations": 2},
        {"name": "Bruno", "total": "20.00", "donations": 1},
        {"name": "Davi", "total": "1.00", "donations": 1},
    ]

    r = client.get("/support/leaderboard", params={"limit": 1})
    assert [e["name"] for e in r.json()] == ["Ana"]
