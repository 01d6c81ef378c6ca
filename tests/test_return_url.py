"""Retorno da Stripe: parâmetros lidos uma vez, limpos da URL e redirecionamento."""
from fastapi.testclient import TestClient

from indiejz.core.config import settings
from indiejz.services.return_url import (
    ACTION_CANCELED,
    ACTION_NONE,
    ACTION_VERIFY,
    parse_return_params,
    safe_return_url,
    strip_return_params,
    with_fragment,
)


def test_parse_success_params():
    action = parse_return_params({"success": "true", "game_id": "3", "session_id": "cs_test_1"})
    assert action.kind == ACTION_VERIFY
    assert action.game_id == 3
    assert action.session_id == "cs_test_1"


def test_parse_success_without_ids_does_nothing():
    assert parse_return_params({"success": "true", "game_id": "x"}).kind == ACTION_NONE
    assert parse_return_params({"success": "true", "session_id": "cs_1"}).kind == ACTION_NONE


def test_parse_canceled_and_plain():
    assert parse_return_params({"canceled": "true"}).kind == ACTION_CANCELED
    assert parse_return_params({}).kind == ACTION_NONE


def test_strip_keeps_other_params_and_fragment():
    url = "https://indiejz.dev/jogos?ref=ig&success=true&game_id=1&session_id=cs_1#topo"
    assert strip_return_params(url) == "https://indiejz.dev/jogos?ref=ig#topo"
    assert strip_return_params("https://indiejz.dev/jogos?canceled=true") == "https://indiejz.dev/jogos"


def test_with_fragment_replaces_fragment():
    assert with_fragment("https://indiejz.dev/jogos?ref=ig#topo", "compra-erro") == "https://indiejz.dev/jogos?ref=ig#compra-erro"


def return_params(game, session_id, **extra):
    params = {"success": "true", "game_id": str(game.id), "session_id": session_id}
    params.update(extra)
    return params


def test_return_verifies_once_and_redirects_to_file(client: TestClient, db, gateway, make_game):
    game = make_game()
    session = gateway.add_session("cs_ret", {"game_id": str(game.id), "price_paid": "20.00"}, email="buyer@example.com")

    r = client.get("/checkout/return", params=return_params(game, session.id), follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == game.file_url
    assert gateway.retrieved == ["cs_ret"]

    # Recarregar a página não registra de novo
    r = client.get("/checkout/return", params=return_params(game, session.id), follow_redirects=False)
    assert r.status_code == 303
    db.refresh(game)
    assert game.downloads == 1


def test_return_canceled(client: TestClient, gateway):
    r = client.get(
        "/checkout/return",
        params={"canceled": "true", "return_url": "https://indiejz.dev/jogos?ref=ig&canceled=true"},
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert r.headers["location"] == "https://indiejz.dev/jogos?ref=ig#compra-cancelada"
    assert gateway.retrieved == []


def test_return_unpaid_goes_to_pending(client: TestClient, gateway, make_game):
    game = make_game()
    gateway.add_session("cs_wait", {"game_id": str(game.id)}, paid=False)
    r = client.get("/checkout/return", params=return_params(game, "cs_wait"), follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "https://indiejz.dev/jogos#compra-pendente"


def test_return_error_goes_to_error_fragment(client: TestClient, gateway, make_game):
    game = make_game()
    r = client.get("/checkout/return", params=return_params(game, "cs_missing"), follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "https://indiejz.dev/jogos#compra-erro"


def test_return_without_params_just_redirects(client: TestClient, gateway):
    r = client.get("/checkout/return", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "https://indiejz.dev/jogos"
    assert gateway.retrieved == []


def test_safe_return_url_only_accepts_known_origins(monkeypatch):
    assert safe_return_url("https://indiejz.dev/loja?ref=ig") == "https://indiejz.dev/loja?ref=ig"
    assert safe_return_url("https://evil.example/phish") == "https://indiejz.dev/jogos"
    assert safe_return_url("http://indiejz.dev/jogos") == "https://indiejz.dev/jogos"
    assert safe_return_url("//evil.example/phish") == "https://indiejz.dev/jogos"
    assert safe_return_url("javascript:alert(1)") == "https://indiejz.dev/jogos"
    assert safe_return_url(None) == "https://indiejz.dev/jogos"

    monkeypatch.setattr(settings, "cors_origins", "https://loja.indiejz.dev, *")
    assert safe_return_url("https://loja.indiejz.dev/jogos") == "https://loja.indiejz.dev/jogos"
    assert safe_return_url("https://evil.example/phish") == "https://indiejz.dev/jogos"


def test_return_never_redirects_to_other_sites(client: TestClient, gateway, make_game):
    r = client.get(
        "/checkout/return",
        params={"canceled": "true", "return_url": "https://evil.example/phish"},
        follow_redirects=False,
    )
    assert r.status_code == 303
    assert r.headers["location"] == "https://indiejz.dev/jogos#compra-cancelada"

    r = client.get("/checkout/return", params={"return_url": "https://evil.example/phish"}, follow_redirects=False)
    assert r.headers["location"] == "https://indiejz.dev/jogos"

    game = make_game()
    r = client.get(
        "/checkout/return",
        params=return_params(game, "cs_missing", return_url="https://evil.example/phish"),
        follow_redirects=False,
    )
    assert r.headers["location"] == "https://indiejz.dev/jogos#compra-erro"
