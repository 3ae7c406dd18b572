"""Leaderboard HTTP service: users, matches and scores behind token auth, with small containers."""

__version__ = "0.1.0"