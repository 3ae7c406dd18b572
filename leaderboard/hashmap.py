"""A small keyed store."""

from __future__ import annotations

from collections.abc import ItemsView
from typing import Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class HashMap(Generic[K, V]):
    def __init__(self) -> None:
        self._data: dict[K, V] = {}

    def set(self, key: K, value: V) -> None:
        self._data[key] = value

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._data.get(key, default)

    def delete(self, key: K) -> None:
        self._data.pop(key, None)

    def items(self) -> ItemsView[K, V]:
        return self._data.items()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)