"""Per-instance registry of value validators.

Keys are element names (content validators) or normalized attribute keys
(value validators). A registered validator is anything with a
``validate(value)`` method; plain callables are wrapped on the way in.
A validator signals rejection by raising; its return value is ignored.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ValueValidator(Protocol):
    def validate(self, value: str) -> None: ...


class CallableValidator:
    """Adapt a ``func(value)`` callable to the `ValueValidator` protocol."""

    __slots__ = ("func",)

    def __init__(self, func: Callable[[str], Any]) -> None:
        self.func = func

    def validate(self, value: str) -> None:
        self.func(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CallableValidator):
            return NotImplemented
        return self.func == other.func

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", None) or repr(self.func)
        return f"CallableValidator({name})"


def as_validator(validator: ValueValidator | Callable[[str], Any]) -> ValueValidator:
    if isinstance(validator, ValueValidator):
        return validator
    if callable(validator):
        return CallableValidator(validator)
    raise TypeError(f"validator must be callable or define validate(), got {type(validator).__name__}")


class ValidatorRegistry:
    """Mapping of lower-cased key to validator, copy-on-write like `Whitelist`."""

    __slots__ = ("_entries", "_lock")

    def __init__(self, entries: Mapping[str, ValueValidator | Callable[[str], Any]] | None = None) -> None:
        self._lock = threading.Lock()
        normalized: dict[str, ValueValidator] = {}
        for key, validator in (entries or {}).items():
            normalized[str(key).lower()] = as_validator(validator)
        self._entries: Mapping[str, ValueValidator] = MappingProxyType(normalized)

    def set(self, key: str, validator: ValueValidator | Callable[[str], Any]) -> None:
        wrapped = as_validator(validator)
        with self._lock:
            entries = dict(self._entries)
            entries[str(key).lower()] = wrapped
            self._entries = MappingProxyType(entries)

    def remove(self, key: str) -> None:
        key = str(key).lower()
        with self._lock:
            if key not in self._entries:
                return
            entries = dict(self._entries)
            del entries[key]
            self._entries = MappingProxyType(entries)

    def get(self, key: str) -> ValueValidator | None:
        return self._entries.get(key.lower())

    def snapshot(self) -> Mapping[str, ValueValidator]:
        return self._entries

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ValidatorRegistry({sorted(self._entries)!r})"
