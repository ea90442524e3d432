"""Record wrapper and tagged path lookups.

A Record is the decoded JSON document for one render pass. Paths are walked
key by key through nested mappings (and integer indexes through sequences).
Anything that cannot be followed resolves to an *absent* :class:`Lookup`
instead of raising, and a value of the wrong shape resolves to a *mistyped*
one. Formatters consume both the same way.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

from viewbind.domain.types import Presence, ValueKind

PathKey: TypeAlias = str | int
Path: TypeAlias = tuple[PathKey, ...]

_MISSING = object()
_INDEX = re.compile(r"-?[0-9]+")


def parse_path(path: str | Sequence[PathKey]) -> Path:
    """Normalise a dotted string or key sequence into a path tuple.

    Examples:
        >>> parse_path("contract.tariff")
        ('contract', 'tariff')
        >>> parse_path(["charges", 0, "label"])
        ('charges', 0, 'label')
        >>> parse_path("")
        ()
    """
    if isinstance(path, str):
        return tuple(part for part in path.split(".") if part)
    return tuple(path)


def format_path(path: Path) -> str:
    """Render a path tuple back to dotted form (``"$"`` for the root)."""
    return ".".join(str(key) for key in path) or "$"


def is_sequence(value: Any) -> bool:
    """True for list-like values; strings and bytes do not count."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_number(value: Any) -> bool:
    """True for ints and floats; booleans are deliberately excluded."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def matches_kind(value: Any, kind: ValueKind) -> bool:
    """Check whether *value* has the shape *kind* describes."""
    match kind:
        case ValueKind.ANY:
            return True
        case ValueKind.NUMBER:
            return is_number(value)
        case ValueKind.TEXT:
            return isinstance(value, str)
        case ValueKind.BOOLEAN:
            return isinstance(value, bool)
        case ValueKind.SEQUENCE:
            return is_sequence(value)
        case ValueKind.MAPPING:
            return isinstance(value, Mapping)
    return False


def _step(current: Any, key: PathKey) -> Any:
    if isinstance(current, Mapping):
        return current.get(str(key) if isinstance(key, int) else key, _MISSING)
    if is_sequence(current):
        if isinstance(key, str):
            if not _INDEX.fullmatch(key):
                return _MISSING
            key = int(key)
        if -len(current) <= key < len(current):
            return current[key]
    return _MISSING


def resolve_path(data: Any, path: Path) -> Any:
    """Walk *path* through *data*; returns the module sentinel when unresolvable."""
    current = data
    for key in path:
        current = _step(current, key)
        if current is _MISSING:
            return _MISSING
    return current


@dataclass(frozen=True)
class Lookup:
    """Tagged result of resolving one path.

    Attributes:
        path: The path that was resolved.
        presence: ``present``, ``absent`` or ``mistyped``.
        value: The resolved value (``None`` when absent; the offending value
            when mistyped).
        expected: The value kind the caller asked for.
    """

    path: Path
    presence: Presence
    value: Any = None
    expected: ValueKind = ValueKind.ANY

    @property
    def present(self) -> bool:
        return self.presence is Presence.PRESENT

    @property
    def mistyped(self) -> bool:
        return self.presence is Presence.MISTYPED

    @classmethod
    def of(cls, value: Any, path: Path = (), expected: ValueKind = ValueKind.ANY) -> Lookup:
        """Tag an already-resolved value (``None`` counts as absent)."""
        if value is None or value is _MISSING:
            return cls(path=path, presence=Presence.ABSENT, expected=expected)
        if not matches_kind(value, expected):
            return cls(path=path, presence=Presence.MISTYPED, value=value, expected=expected)
        return cls(path=path, presence=Presence.PRESENT, value=value, expected=expected)

    def expect(self, kind: ValueKind) -> Lookup:
        """Re-tag this lookup against a different expected kind."""
        if self.presence is Presence.ABSENT:
            return Lookup(path=self.path, presence=Presence.ABSENT, expected=kind)
        return Lookup.of(self.value, self.path, kind)

    def describe(self) -> str:
        """Human-readable diagnostic, e.g. ``expected number, got str at price``."""
        where = format_path(self.path)
        if self.presence is Presence.ABSENT:
            return f"missing {self.expected} at {where}"
        if self.presence is Presence.MISTYPED:
            return f"expected {self.expected}, got {type(self.value).__name__} at {where}"
        return f"{self.expected} at {where}"


class Record:
    """Read-only view over one decoded document (or one row element)."""

    __slots__ = ("_data",)

    def __init__(self, data: Any) -> None:
        if isinstance(data, Mapping):
            data = MappingProxyType(dict(data))
        self._data = data

    def __repr__(self) -> str:
        return f"Record({self._data!r})"

    @property
    def data(self) -> Any:
        return self._data

    def lookup(self, path: str | Sequence[PathKey], kind: ValueKind = ValueKind.ANY) -> Lookup:
        """Resolve *path* and tag the result against *kind*."""
        parsed = parse_path(path)
        return Lookup.of(resolve_path(self._data, parsed), parsed, kind)

    def get(self, path: str | Sequence[PathKey], default: Any = None) -> Any:
        """Untagged convenience accessor."""
        value = resolve_path(self._data, parse_path(path))
        return default if value is _MISSING or value is None else value

    # Typed accessors

    def number(self, path: str | Sequence[PathKey]) -> Lookup:
        return self.lookup(path, ValueKind.NUMBER)

    def text(self, path: str | Sequence[PathKey]) -> Lookup:
        return self.lookup(path, ValueKind.TEXT)

    def boolean(self, path: str | Sequence[PathKey]) -> Lookup:
        return self.lookup(path, ValueKind.BOOLEAN)

    def sequence(self, path: str | Sequence[PathKey]) -> Lookup:
        return self.lookup(path, ValueKind.SEQUENCE)

    def mapping(self, path: str | Sequence[PathKey]) -> Lookup:
        return self.lookup(path, ValueKind.MAPPING)
