"""Request and response shapes of the HTTP API, and conversions from rows."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .records import Match as DatabaseMatch
from .records import User as DatabaseUser

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _mapping(data: Any) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _field(data: Mapping, name: str, kind: type) -> Any:
    value = data.get(name)
    if value is None:
        return kind()
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValueError(f"field {name!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


def _format_time(moment: datetime) -> str:
    """RFC 3339 with trimmed fractional seconds."""
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset / timedelta(minutes=1))
    hours, mins = divmod(abs(minutes), 60)
    return f"{text}{'+' if minutes >= 0 else '-'}{hours:02d}:{mins:02d}"


@dataclass
class UserScore:
    user_id: int = 0
    score: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> UserScore:
        data = _mapping(data)
        return cls(_field(data, "user_id", int), _field(data, "score", int))


@dataclass
class RegisterInput:
    username: str = ""
    email: str = ""
    password: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> RegisterInput:
        data = _mapping(data)
        return cls(*(_field(data, n, str) for n in ("username", "email", "password")))


@dataclass
class LoginInput:
    """The identifier is a username or an e-mail address."""

    identifier: str = ""
    password: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> LoginInput:
        data = _mapping(data)
        return cls(_field(data, "identifier", str), _field(data, "password", str))


@dataclass
class User:
    id: int
    created_at: datetime
    updated_at: datetime
    username: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "username": self.username,
            "email": self.email,
        }


@dataclass
class UserNameInput:
    username: str = ""


@dataclass
class UserNameOutput:
    id: int
    username: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username, "email": self.email}


@dataclass
class CreateMatchInput:
    match_type: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> CreateMatchInput:
        return cls(_field(_mapping(data), "match_type", str))


@dataclass
class CreateMatchOutput:
    match_id: int

    def to_dict(self) -> dict[str, Any]:
        return {"match_id": self.match_id}


@dataclass
class ScoresInput:
    scores: list[UserScore] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ScoresInput:
        raw = _field(_mapping(data), "scores", list)
        return cls([UserScore.from_dict(item) for item in raw])


def database_user_to_user(db_user: DatabaseUser) -> User:
    """Missing timestamps become the zero time."""
    return User(
        id=db_user.id,
        created_at=db_user.created_at or ZERO_TIME,
        updated_at=db_user.updated_at or ZERO_TIME,
        username=db_user.username,
        email=db_user.email,
    )


def database_user_to_user_fetched_by_username(db_user: DatabaseUser) -> UserNameOutput:
    return UserNameOutput(id=db_user.id, username=db_user.username, email=db_user.email)


def database_created_match_to_match(db_match: DatabaseMatch) -> CreateMatchOutput:
    return CreateMatchOutput(match_id=db_match.id)