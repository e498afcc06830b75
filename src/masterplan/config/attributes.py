"""Latching attribute storage used by the configuration cascade."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Tuple

from masterplan.errors import MissingConfiguration


@dataclass
class Deferred:
    """A zero-argument computation evaluated the first time it is read."""

    compute: Callable[[], Any]
    label: str = ""

    def __call__(self) -> Any:
        return self.compute()

    def __repr__(self) -> str:
        return f"Deferred({self.label or getattr(self.compute, '__name__', 'callable')})"


class AttributeBag:
    """Named settings where the first non-None value wins.

    Masterplans closest to the working directory are evaluated first, so
    latching the first value gives them precedence over farther ones.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}

    def set(self, name: str, value: Any) -> bool:
        """Store ``value`` unless ``name`` already holds one; return whether it was stored."""

        if self._values.get(name) is not None:
            return False
        if callable(value) and not isinstance(value, Deferred):
            value = Deferred(value)
        self._values[name] = value
        return True

    def get(self, name: str) -> Any:
        if self._values.get(name) is None:
            raise MissingConfiguration(name)
        value = self._values[name]
        if isinstance(value, Deferred):
            value = value()
            self._values[name] = value
        return value

    def is_set(self, name: str) -> bool:
        return self._values.get(name) is not None

    def is_deferred(self, name: str) -> bool:
        return isinstance(self._values.get(name), Deferred)

    def raw_items(self) -> Iterator[Tuple[str, Any]]:
        return iter(list(self._values.items()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_set(name)
