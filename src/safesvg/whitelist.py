"""Whitelist policy store.

A `Whitelist` is a case-insensitive set of permitted names. Mutation is
copy-on-write: every change publishes a fresh frozenset, so a validation
pass that grabbed `snapshot()` keeps a consistent view even if another
thread edits the whitelist mid-pass.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator


def _normalize(names: Iterable[str]) -> set[str]:
    return {str(name).lower() for name in names}


class Whitelist:
    __slots__ = ("_lock", "_names")

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._names: frozenset[str] = frozenset(_normalize(names))

    def add(self, *names: str) -> None:
        if not names:
            return
        with self._lock:
            self._names = self._names | _normalize(names)

    def remove(self, *names: str) -> None:
        # Removing an absent name is a no-op.
        if not names:
            return
        with self._lock:
            self._names = self._names - _normalize(names)

    def snapshot(self) -> frozenset[str]:
        return self._names

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"Whitelist({len(self._names)} names)"
