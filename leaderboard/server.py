"""The leaderboard HTTP application and its command-line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sqlite3
from typing import Any

from dotenv import load_dotenv
from flask import Flask

from .api import ApiConfig, handler_err, handler_readiness
from .middlewares import (
    add_cors_headers,
    authenticate_token,
    cors_preflight,
    error_handler,
    log_request,
    start_timer,
)
from .queries import Queries

logger = logging.getLogger(__name__)


def create_app(queries: Any) -> Flask:
    """Build the application with its middleware and the ``/v1`` routes."""
    app = Flask(__name__)
    api_cfg = ApiConfig(db=queries)

    app.before_request(start_timer)
    app.before_request(cors_preflight)
    app.after_request(log_request)
    app.after_request(add_cors_headers)
    app.register_error_handler(Exception, error_handler)

    routes = [
        ("/v1/healthz", "healthz", handler_readiness, "GET"),
        ("/v1/err", "err", handler_err, "GET"),
        ("/v1/register", "register", api_cfg.handler_register, "POST"),
        ("/v1/login", "login", api_cfg.handler_login, "POST"),
        ("/v1/users/<username>", "get_user",
         authenticate_token(api_cfg.handler_get_user_by_username), "GET"),
        ("/v1/matches", "create_match",
         authenticate_token(api_cfg.handler_create_match), "POST"),
        ("/v1/matches/<match_id>/scores", "push_scores",
         authenticate_token(api_cfg.handler_push_match_scores), "POST"),
    ]
    for rule, endpoint, view, method in routes:
        app.add_url_rule(rule, endpoint=endpoint, view_func=view, methods=[method])
    return app


def _connect(url: str) -> sqlite3.Connection:
    """Open ``sqlite:///path`` or an in-memory ``sqlite://`` database."""
    if url in ("sqlite://", ":memory:"):
        path = ":memory:"
    elif url.startswith("sqlite:///"):
        path = url[len("sqlite:///"):]
    else:
        raise ValueError(f"unsupported database URL {url!r}")
    return sqlite3.connect(path, check_same_thread=False)


def main(argv: list[str] | None = None) -> None:
    """Start the server on ``PORT`` with the database at ``DB_URL``."""
    argparse.ArgumentParser(prog="leaderboard").parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    load_dotenv(".env")

    port_string = os.environ.get("PORT", "")
    if not port_string:
        raise SystemExit("PORT not found in the environment")
    db_string = os.environ.get("DB_URL", "")
    if not db_string:
        raise SystemExit("DB_URL not found in the environment")

    try:
        connection = _connect(db_string)
    except (ValueError, sqlite3.Error):
        raise SystemExit("Can't connect to database") from None
    try:
        port = int(port_string)
    except ValueError:
        raise SystemExit(f"invalid PORT {port_string!r}") from None

    app = create_app(Queries(connection, paramstyle="qmark"))
    logger.info("Server starting on port %s", port_string)
    try:
        app.run(host="0.0.0.0", port=port)
    except OSError as exc:
        raise SystemExit(str(exc)) from exc