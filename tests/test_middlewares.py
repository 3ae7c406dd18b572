import logging

import pytest
from flask import Flask, abort, g, jsonify

from leaderboard.auth import generate_jwt
from leaderboard.middlewares import (
    RateLimiter,
    add_cors_headers,
    authenticate_token,
    cors_preflight,
    error_handler,
    log_request,
    start_timer,
)


def _whoami():
    return jsonify({"user_id": g.user_id})


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "secret")
    flask_app = Flask(__name__)
    flask_app.before_request(start_timer)
    flask_app.before_request(cors_preflight)
    flask_app.after_request(log_request)
    flask_app.after_request(add_cors_headers)
    flask_app.register_error_handler(Exception, error_handler)

    @flask_app.get("/ping")
    def ping():
        return jsonify({"pong": True})

    @flask_app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    @flask_app.get("/me")
    @authenticate_token
    def me():
        return jsonify({"user_id": g.user_id})

    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def test_missing_authorization_header(app):
    with app.test_request_context("/me"):
        response = app.make_response(authenticate_token(_whoami)())
    assert response.status_code == 401
    assert response.get_json() == {"error": "No authentication info found"}


def test_wrong_authorization_scheme(app):
    with app.test_request_context("/me", headers={"Authorization": "Token token"}):
        response = app.make_response(authenticate_token(_whoami)())
    assert response.status_code == 401
    assert response.get_json() == {
        "error": "Invalid Authorization format. Expected 'Bearer <token>'"
    }


def test_too_many_parts_in_header(app):
    with app.test_request_context("/me", headers={"Authorization": "Bearer token token"}):
        response = app.make_response(authenticate_token(_whoami)())
    assert response.status_code == 401
    assert "Invalid Authorization format" in response.get_json()["error"]


def test_unverifiable_token(app):
    with app.test_request_context("/me", headers={"Authorization": "Bearer token"}):
        response = app.make_response(authenticate_token(_whoami)())
    assert response.status_code == 401
    assert response.get_json()["error"].startswith("Invalid token:")


def test_token_signed_with_other_key(client):
    token = generate_jwt(42, "placeholder")
    response = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.parametrize("scheme", ["Bearer", "bearer", "BEARER"])
def test_valid_token_sets_user_id(client, scheme):
    token = generate_jwt(42)
    response = client.get("/me", headers={"Authorization": f"{scheme} {token}"})
    assert response.status_code == 200
    assert response.get_json() == {"user_id": 42}


def test_cors_headers_on_simple_request(app):
    with app.test_request_context("/ping", headers={"Origin": "http://localhost"}):
        response = add_cors_headers(app.make_response(jsonify({"pong": True})))
    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Expose-Headers"] == "Link"


def test_no_cors_headers_without_origin(app):
    with app.test_request_context("/ping"):
        response = add_cors_headers(app.make_response(jsonify({"pong": True})))
    assert "Access-Control-Allow-Origin" not in response.headers
    assert "Origin" in response.headers.get("Vary", "")


def test_preflight(app):
    with app.test_request_context(
        "/ping",
        method="OPTIONS",
        headers={"Origin": "http://localhost", "Access-Control-Request-Method": "POST"},
    ):
        response = add_cors_headers(app.make_response(cors_preflight()))
    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET,POST,PUT,DELETE,OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "*"
    assert response.headers["Access-Control-Max-Age"] == "300"


def test_unhandled_error_becomes_500(app, client):
    response = client.get("/boom")
    with app.test_request_context("/boom"):
        expected = error_handler(RuntimeError("boom"))
    assert response.status_code == expected.status_code == 500
    assert response.get_json() == expected.get_json() == {"error": "boom"}


def test_unknown_route_is_404(app, client):
    response = client.get("/missing")
    with app.test_request_context("/missing"):
        with pytest.raises(Exception) as info:
            abort(404)
        expected = error_handler(info.value)
    assert response.status_code == expected.status_code == 404
    assert response.get_json() == expected.get_json() == {"error": "Cannot GET /missing"}


def test_error_handler_direct(app):
    with app.test_request_context("/x"):
        response = error_handler(ValueError("bad input"))
    assert response.status_code == 500
    assert response.get_json() == {"error": "bad input"}


def test_request_is_logged(app, caplog):
    caplog.set_level(logging.INFO, logger="leaderboard.middlewares")
    with app.test_request_context("/ping"):
        start_timer()
        response = log_request(app.make_response(jsonify({"pong": True})))
    assert response.status_code == 200
    assert response.get_json() == {"pong": True}
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("[GET] /ping ") for message in messages)


def test_rate_limiter_window():
    now = [0.0]
    limiter = RateLimiter(clock=lambda: now[0])
    results = [limiter.allow("10.0.0.1") for _ in range(21)]
    assert results[:20] == [True] * 20
    assert results[20] is False
    assert limiter.allow("10.0.0.2") is True
    now[0] = 61.0
    assert limiter.allow("10.0.0.1") is True


def test_rate_limiter_hook(app):
    limiter = RateLimiter(max_requests=2)
    app.before_request(limiter.check)
    client = app.test_client()
    codes = [client.get("/ping").status_code for _ in range(3)]
    assert codes[:2] == [200, 200]
    blocked = client.get("/ping")
    assert blocked.status_code == 429
    assert blocked.get_json() == {"error": "Too many requests"}
    assert int(blocked.headers["Retry-After"]) >= 0