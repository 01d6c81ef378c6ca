"""Validação de cupom: serviço e GET /coupons/validate."""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from indiejz.core.errors import CouponExhausted, CouponExpired, CouponNotApplicable, CouponNotFound
from indiejz.services.coupon import increment_coupon_use, validate_coupon


def test_valid_coupon_is_returned_unchanged(db, make_coupon):
    make_coupon(code="SAVE10", max_uses=5, current_uses=2)
    coupon = validate_coupon(db, "SAVE10")
    assert coupon.code == "SAVE10"
    db.refresh(coupon)
    assert coupon.current_uses == 2


def test_code_is_trimmed_and_uppercased(db, make_coupon):
    make_coupon(code="SAVE10")
    assert validate_coupon(db, "  save10 ").code == "SAVE10"


@pytest.mark.parametrize("code", ["NOPE", "", None])
def test_unknown_or_empty_code(db, make_coupon, code):
    make_coupon(code="SAVE10")
    with pytest.raises(CouponNotFound):
        validate_coupon(db, code)


def test_inactive_coupon_is_not_found(db, make_coupon):
    make_coupon(code="OFF", is_active=False)
    with pytest.raises(CouponNotFound):
        validate_coupon(db, "OFF")


def test_expired_coupon(db, make_coupon):
    now = datetime(2026, 5, 1, 12, 0)
    make_coupon(code="OLD", expires_at=now - timedelta(minutes=1))
    with pytest.raises(CouponExpired):
        validate_coupon(db, "OLD", now=now)


def test_future_expiry_and_no_expiry_are_valid(db, make_coupon):
    now = datetime(2026, 5, 1, 12, 0)
    make_coupon(code="SOON", expires_at=now + timedelta(days=1))
    make_coupon(code="FOREVER", expires_at=None)
    assert validate_coupon(db, "SOON", now=now).code == "SOON"
    assert validate_coupon(db, "FOREVER", now=now).code == "FOREVER"


def test_exhausted_when_uses_reach_max(db, make_coupon):
    make_coupon(code="LIMIT", max_uses=3, current_uses=3)
    with pytest.raises(CouponExhausted):
        validate_coupon(db, "LIMIT")


def test_unlimited_coupon_never_exhausts(db, make_coupon):
    make_coupon(code="OPEN", max_uses=None, current_uses=999)
    assert validate_coupon(db, "OPEN").code == "OPEN"


def test_coupon_restricted_to_other_game(db, make_game, make_coupon):
    game = make_game()
    other = make_game(title="Pixel Quest")
    make_coupon(code="NEON", game_id=game.id)
    assert validate_coupon(db, "NEON", game_id=game.id).code == "NEON"
    assert validate_coupon(db, "NEON").code == "NEON"
    with pytest.raises(CouponNotApplicable):
        validate_coupon(db, "NEON", game_id=other.id)


def test_increment_coupon_use(db, make_coupon):
    coupon = make_coupon(code="SAVE10")
    assert increment_coupon_use(db, "save10") is True
    db.commit()
    db.refresh(coupon)
    assert coupon.current_uses == 1
    assert increment_coupon_use(db, "MISSING") is False


def test_validate_endpoint_previews_price(client: TestClient, make_game, make_coupon):
    game = make_game()
    make_coupon(code="SAVE10")
    r = client.get("/coupons/validate", params={"code": "save10", "game_id": game.id})
    assert r.status_code == 200
    j = r.json()
    assert j["code"] == "SAVE10"
    assert j["discount"] == "2.00"
    assert j["final_price"] == "18.00"
    assert j["display"] == "R$ 18.00"


def test_validate_endpoint_without_game_returns_rule_only(client: TestClient, make_coupon):
    make_coupon(code="SAVE10")
    r = client.get("/coupons/validate", params={"code": "SAVE10"})
    assert r.status_code == 200
    j = r.json()
    assert j["final_price"] is None
    assert j["display"] is None


def test_validate_endpoint_invalid_code(client: TestClient):
    r = client.get("/coupons/validate", params={"code": "NOPE"})
    assert r.status_code == 404
    j = r.json()
    assert j["error"] == "Cupom inválido."
    assert j["status_code"] == 404
    assert "request_id" in j


def test_validate_endpoint_expired(client: TestClient, make_coupon):
    make_coupon(code="OLD", expires_at=datetime.utcnow() - timedelta(days=1))
    r = client.get("/coupons/validate", params={"code": "OLD"})
    assert r.status_code == 422
    assert r.json()["error"] == "Este cupom expirou."


def test_validate_does_not_count_a_use(client: TestClient, db, make_game, make_coupon):
    game = make_game()
    coupon = make_coupon(code="SAVE10", max_uses=1)
    for _ in range(3):
        assert client.get("/coupons/validate", params={"code": "SAVE10", "game_id": game.id}).status_code == 200
    db.refresh(coupon)
    assert coupon.current_uses == 0
