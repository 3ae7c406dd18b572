"""Typed queries against the leaderboard database."""

from __future__ import annotations

import re
from collections.abc import Sequence
from contextlib import closing
from datetime import datetime
from typing import Any

from .records import Match, User

_PLACEHOLDER = re.compile(r"\$(\d+)")
_PARAMSTYLES = ("qmark", "format", "numeric", "named", "pyformat")

_CREATE_USER = """
INSERT INTO users (username, email, password_hash)
VALUES ($1, $2, $3)
RETURNING id, username, email, password_hash, created_at, updated_at
"""

_GET_USER_BY_EMAIL = """
SELECT id, username, email, password_hash, created_at, updated_at FROM users WHERE email = $1
"""

_GET_USER_BY_ID = """
SELECT id, username, email, password_hash, created_at, updated_at FROM users WHERE id = $1
"""

_GET_USER_BY_USERNAME = """
SELECT id, username, email, password_hash, created_at, updated_at FROM users WHERE username = $1
"""

_CREATE_MATCH = """
INSERT INTO matches (match_type) VALUES ($1)
RETURNING id, match_type, match_date, created_at, updated_at
"""

_GET_MATCH_BY_ID = """
SELECT id, match_type, match_date, created_at, updated_at FROM matches WHERE id = $1
"""

_ADD_USER_TO_MATCH = """
INSERT INTO match_users (match_id, user_id, score)
VALUES ($1, $2, $3)
"""

_MATCH_USER_EXISTS = """
SELECT EXISTS (
    SELECT 1 FROM match_users WHERE user_id = $1 AND match_id = $2
)
"""

_UPDATE_USER_SCORE_ON_MATCH = """
UPDATE match_users
SET score = $1
WHERE user_id = $2 AND match_id = $3
"""

_ADD_WINNER_OF_MATCH = """
INSERT INTO match_winners (match_id, user_id)
VALUES ($1, $2)
"""

_GET_MATCH_WINNERS = """
SELECT user_id FROM match_winners WHERE match_id = $1
"""


class NoRowsError(LookupError):
    """A query that must return one row returned none."""

    def __init__(self, message: str = "sql: no rows in result set") -> None:
        super().__init__(message)


def _to_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"cannot read a timestamp from {value!r}")


def _row_to_user(row: Sequence[Any]) -> User:
    user_id, username, email, password_hash, created_at, updated_at = row
    return User(
        id=int(user_id),
        username=username,
        email=email,
        password_hash=password_hash,
        created_at=_to_datetime(created_at),
        updated_at=_to_datetime(updated_at),
    )


def _row_to_match(row: Sequence[Any]) -> Match:
    match_id, match_type, match_date, created_at, updated_at = row
    return Match(
        id=int(match_id),
        match_type=match_type,
        match_date=_to_datetime(match_date),
        created_at=_to_datetime(created_at),
        updated_at=_to_datetime(updated_at),
    )


class Queries:
    """Runs the leaderboard's statements over a DB-API 2.0 connection.

    Statements are written with ``$n`` placeholders and rendered in the
    driver's ``paramstyle``. With ``autocommit`` each statement is committed
    on success, as a standalone statement would be.
    """

    def __init__(self, connection: Any, *, paramstyle: str = "qmark", autocommit: bool = True) -> None:
        if paramstyle not in _PARAMSTYLES:
            raise ValueError(f"unsupported paramstyle {paramstyle!r}")
        self._conn = connection
        self._paramstyle = paramstyle
        self._autocommit = autocommit

    def _prepare(self, sql: str, args: Sequence[Any]) -> tuple[str, Any]:
        style = self._paramstyle
        if style in ("named", "pyformat"):
            marker = ":p\\1" if style == "named" else "%(p\\1)s"
            params = {f"p{index}": value for index, value in enumerate(args, start=1)}
            return _PLACEHOLDER.sub(marker, sql), params
        order = [int(number) for number in _PLACEHOLDER.findall(sql)]
        if style == "numeric":
            return _PLACEHOLDER.sub(":\\1", sql), tuple(args)
        marker = "?" if style == "qmark" else "%s"
        return _PLACEHOLDER.sub(marker, sql), tuple(args[number - 1] for number in order)

    def _finish(self) -> None:
        if self._autocommit:
            self._conn.commit()

    def _query_row(self, sql: str, *args: Any) -> Sequence[Any]:
        statement, params = self._prepare(sql, args)
        with closing(self._conn.cursor()) as cursor:
            cursor.execute(statement, params)
            row = cursor.fetchone()
        self._finish()
        if row is None:
            raise NoRowsError()
        return row

    def _query_all(self, sql: str, *args: Any) -> list[Sequence[Any]]:
        statement, params = self._prepare(sql, args)
        with closing(self._conn.cursor()) as cursor:
            cursor.execute(statement, params)
            rows = cursor.fetchall()
        self._finish()
        return list(rows)

    def _exec(self, sql: str, *args: Any) -> None:
        statement, params = self._prepare(sql, args)
        with closing(self._conn.cursor()) as cursor:
            cursor.execute(statement, params)
        self._finish()

    def create_user(self, username: str, email: str, password_hash: str) -> User:
        """Insert a user and return the stored row."""
        return _row_to_user(self._query_row(_CREATE_USER, username, email, password_hash))

    def get_user_by_email(self, email: str) -> User:
        """Return the user with ``email``; raise NoRowsError if there is none."""
        return _row_to_user(self._query_row(_GET_USER_BY_EMAIL, email))

    def get_user_by_id(self, user_id: int) -> User:
        """Return the user with ``user_id``; raise NoRowsError if there is none."""
        return _row_to_user(self._query_row(_GET_USER_BY_ID, user_id))

    def get_user_by_username(self, username: str) -> User:
        """Return the user with ``username``; raise NoRowsError if there is none."""
        return _row_to_user(self._query_row(_GET_USER_BY_USERNAME, username))

    def create_match(self, match_type: str) -> Match:
        """Insert a match and return the stored row."""
        return _row_to_match(self._query_row(_CREATE_MATCH, match_type))

    def get_match_by_id(self, match_id: int) -> Match:
        """Return the match with ``match_id``; raise NoRowsError if there is none."""
        return _row_to_match(self._query_row(_GET_MATCH_BY_ID, match_id))

    def add_user_to_match(self, match_id: int, user_id: int, score: int) -> None:
        """Record ``user_id``'s score in ``match_id``."""
        self._exec(_ADD_USER_TO_MATCH, match_id, user_id, score)

    def match_user_exists(self, user_id: int, match_id: int) -> bool:
        """Return whether ``user_id`` already has a score in ``match_id``."""
        return bool(self._query_row(_MATCH_USER_EXISTS, user_id, match_id)[0])

    def update_user_score_on_match(self, match_id: int, user_id: int, score: int) -> None:
        """Replace ``user_id``'s score in ``match_id``."""
        self._exec(_UPDATE_USER_SCORE_ON_MATCH, score, user_id, match_id)

    def add_winner_of_match(self, match_id: int, user_id: int) -> None:
        """Record ``user_id`` as a winner of ``match_id``."""
        self._exec(_ADD_WINNER_OF_MATCH, match_id, user_id)

    def get_match_winners(self, match_id: int) -> list[int]:
        """Return the ids of the winners of ``match_id``."""
        return [int(row[0]) for row in self._query_all(_GET_MATCH_WINNERS, match_id)]