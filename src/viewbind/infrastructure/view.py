"""Slot protocols and the in-memory view.

The view layer owns its slots; the binder only looks them up by logical name
through a :class:`SlotResolver` and writes to them. :class:`MemoryView` is a
complete resolver backed by plain Python objects, used by the CLI to print a
render and by tests to assert on exactly what was written.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from viewbind.domain.specs import ViewSpec


class TextSlot(Protocol):
    """Single text node; writes replace its content and are never parsed as markup."""

    def set_text(self, text: str) -> None: ...


class ContainerSlot(Protocol):
    """Element accepting generated (already escaped) child markup."""

    def clear(self) -> None: ...

    def append_html(self, markup: str) -> None: ...

    def prepend_html(self, markup: str) -> None: ...


class SlotResolver(Protocol):
    """Maps logical slot names to sinks; returns None for slots the page lacks."""

    def text_slot(self, name: str) -> TextSlot | None: ...

    def container_slot(self, name: str) -> ContainerSlot | None: ...


@dataclass
class MemoryTextSlot:
    text: str = ""
    writes: int = 0

    def set_text(self, text: str) -> None:
        self.text = text
        self.writes += 1


@dataclass
class MemoryContainer:
    children: list[str] = field(default_factory=list)
    writes: int = 0

    def clear(self) -> None:
        self.children.clear()
        self.writes += 1

    def append_html(self, markup: str) -> None:
        self.children.append(markup)
        self.writes += 1

    def prepend_html(self, markup: str) -> None:
        self.children.insert(0, markup)
        self.writes += 1


class MemoryView:
    """SlotResolver over in-memory text slots and containers."""

    def __init__(
        self,
        text_slots: Iterable[str] = (),
        containers: Iterable[str] = (),
    ) -> None:
        self.texts: dict[str, MemoryTextSlot] = {name: MemoryTextSlot() for name in text_slots}
        self.containers: dict[str, MemoryContainer] = {
            name: MemoryContainer() for name in containers
        }

    @classmethod
    def for_view(cls, spec: ViewSpec) -> MemoryView:
        """Create every slot *spec* binds, plus its status and error slots."""
        return cls(
            text_slots=[f.slot for f in spec.fields] + [spec.status_slot],
            containers=[r.slot for r in spec.repeated] + [spec.error_slot],
        )

    def text_slot(self, name: str) -> MemoryTextSlot | None:
        return self.texts.get(name)

    def container_slot(self, name: str) -> MemoryContainer | None:
        return self.containers.get(name)

    def text(self, name: str) -> str:
        return self.texts[name].text

    def children(self, name: str) -> list[str]:
        return list(self.containers[name].children)

    @property
    def touched(self) -> set[str]:
        """Names of slots that received at least one write."""
        written = {name for name, slot in self.texts.items() if slot.writes}
        written |= {name for name, slot in self.containers.items() if slot.writes}
        return written

    def snapshot(self) -> dict[str, Any]:
        """Plain-data dump of every slot, in creation order."""
        out: dict[str, Any] = {name: slot.text for name, slot in self.texts.items()}
        out.update({name: list(slot.children) for name, slot in self.containers.items()})
        return out
