"""HTTP handlers of the leaderboard API."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from flask import Response, jsonify, request

from .auth import check_password_hash, generate_jwt, hash_password
from .models import (
    CreateMatchInput,
    LoginInput,
    RegisterInput,
    ScoresInput,
    database_created_match_to_match,
    database_user_to_user,
    database_user_to_user_fetched_by_username,
)
from .queries import NoRowsError

logger = logging.getLogger(__name__)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_DECIMAL = re.compile(r"[+-]?[0-9]+")


def respond_with_json(code: int, payload: Any) -> Response:
    """Build a JSON response with the given status code."""
    response = jsonify(payload)
    response.status_code = code
    return response


def respond_with_error(code: int, msg: str) -> Response:
    """Build a JSON error response; server errors are logged."""
    if code > 499:
        logger.error("Responding with 5XX error: %s", msg)
    return respond_with_json(code, {"error": msg})


def handler_readiness() -> Response:
    """Report that the service is up."""
    return respond_with_json(200, {})


def handler_err() -> Response:
    """Always answer with a client error."""
    return respond_with_error(400, "Something went wrong")


def _read_json_body() -> Any:
    return json.loads(request.get_data())


def _parse_int32(text: str) -> int:
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"parsing {text!r}: invalid syntax")
    value = int(text)
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"parsing {text!r}: value out of range")
    return value


def _wrap_int32(value: int) -> int:
    return (value - _INT32_MIN) % 2**32 + _INT32_MIN


@dataclass
class ApiConfig:
    """Handlers bound to a query object and the key that signs tokens.

    Without a key the ``JWT_SECRET`` environment variable is used.
    """

    db: Any
    jwt_key: str | bytes | None = None

    def _auth_response(self, user: Any) -> Response:
        try:
            token = generate_jwt(int(user.id), self.jwt_key)
        except Exception as exc:
            return respond_with_error(500, f"Token generation failed: {exc}")
        return respond_with_json(
            200,
            {"user_details": database_user_to_user(user).to_dict(), "token": token},
        )

    def handler_register(self) -> Response:
        """Create a user and return its details with a fresh token."""
        try:
            data = RegisterInput.from_dict(_read_json_body())
        except ValueError as exc:
            return respond_with_error(400, f"Error parsing register JSON: {exc}")

        try:
            hashed = hash_password(data.password)
        except Exception as exc:
            return respond_with_error(500, f"Password hashing failed: {exc}")

        try:
            user = self.db.create_user(data.username, data.email, hashed)
        except Exception as exc:
            return respond_with_error(409, f"User creation failed: {exc}")

        return self._auth_response(user)

    def handler_login(self) -> Response:
        """Check credentials given by username or e-mail and return a token."""
        try:
            data = LoginInput.from_dict(_read_json_body())
        except ValueError as exc:
            return respond_with_error(400, f"Error parsing register JSON: {exc}")

        try:
            user = self.db.get_user_by_username(data.identifier)
        except Exception:
            try:
                user = self.db.get_user_by_email(data.identifier)
            except Exception as exc:
                return respond_with_error(401, f"Invalid credentials: {exc}")

        if not check_password_hash(data.password, user.password_hash):
            return respond_with_error(
                401, "Invalid credentials: password does not match the stored hash"
            )

        return self._auth_response(user)

    def handler_get_user_by_username(self, username: str) -> Response:
        """Return the public details of the user called ``username``."""
        try:
            user = self.db.get_user_by_username(username)
        except Exception as exc:
            if isinstance(exc, NoRowsError) or "no rows in result" in str(exc):
                return respond_with_error(404, f"User not found with username: {username}")
            return respond_with_error(
                500, f"Failed to get user of username {username}: {exc}"
            )
        return respond_with_json(
            200, {"user_details": database_user_to_user_fetched_by_username(user).to_dict()}
        )

    def handler_create_match(self) -> Response:
        """Create a match and return its id."""
        try:
            data = CreateMatchInput.from_dict(_read_json_body())
        except ValueError as exc:
            return respond_with_error(400, f"Error parsing JSON: {exc}")

        try:
            match = self.db.create_match(data.match_type)
        except Exception as exc:
            return respond_with_error(409, f"Match creation failed: {exc}")

        return respond_with_json(
            200, {"match_details": database_created_match_to_match(match).to_dict()}
        )

    def handler_push_match_scores(self, match_id: str) -> Response:
        """Add up the pushed scores per user and store them on the match.

        Answers 200 when every user was stored, 207 when some failed and
        500 when all of them failed.
        """
        try:
            match_number = _parse_int32(str(match_id))
        except ValueError as exc:
            return respond_with_error(400, f"Error converting string to int32: {exc}")

        try:
            data = ScoresInput.from_dict(_read_json_body())
        except ValueError as exc:
            return respond_with_error(400, f"Error parsing JSON: {exc}")

        if data.scores:
            totals: dict[int, int] = {}
            for entry in data.scores:
                totals[entry.user_id] = totals.get(entry.user_id, 0) + entry.score

            errors: list[str] = []
            for user_id, total in totals.items():
                user_key = _wrap_int32(user_id)
                score = _wrap_int32(total)
                try:
                    present = self.db.match_user_exists(user_key, match_number)
                except Exception as exc:
                    errors.append(
                        f"Failed to check user {user_id} of match {match_number}: {exc}"
                    )
                    continue

                if present:
                    try:
                        self.db.update_user_score_on_match(match_number, user_key, score)
                    except Exception as exc:
                        errors.append(
                            f"Match User updation failed of user_id {user_id}: {exc}"
                        )
                else:
                    try:
                        self.db.add_user_to_match(match_number, user_key, score)
                    except Exception as exc:
                        errors.append(
                            f"Match User creation failed of user_id {user_id}: {exc}"
                        )

            if errors:
                code = 500 if len(errors) == len(totals) else 207
                return respond_with_json(code, {"errors": errors})

        return respond_with_json(200, {"success": True})