"""Rows as stored in the leaderboard database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Match:
    id: int
    match_type: str
    match_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class MatchUser:
    match_id: int
    user_id: int
    score: int


@dataclass(frozen=True)
class MatchWinner:
    match_id: int
    user_id: int


@dataclass(frozen=True)
class User:
    id: int
    username: str
    email: str
    password_hash: str
    created_at: datetime | None = None
    updated_at: datetime | None = None