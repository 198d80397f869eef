"""Element descriptors - structural metadata per element type.

A descriptor tells the engines how an element type behaves: whether it is
a container, which children it accepts and how many, whether its siblings
carry a priority, and which properties it starts with.

Descriptors are read from a TOML library::

    [elements.switch]
    title = "Switch"
    container = true
    allowed_children = { case = "one-or-many", default = "one" }

    [elements.case]
    title = "Case"
    container = true
    ordered = true
    priority_property = "priority"

    [[elements.case.properties]]
    name = "condition"
    default = ""

The registry is a read-only capability passed explicitly to every engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

from chaincatalog.config import parse_toml
from chaincatalog.exceptions import ValidationError

BUNDLED_LIBRARY = Path(__file__).parent.parent / "library" / "elements.toml"

# Property regenerated to the element's own new id when a chain is copied
ELEMENT_ID_PROPERTY = "elementId"


@dataclass(frozen=True)
class ChildOccurrence:
    """Bounds on how many children of one type a container may hold.

    ``max`` of None means unbounded.
    """

    min: int = 0
    max: int | None = None

    NAMED = {
        "one": (1, 1),
        "zero-or-one": (0, 1),
        "zero-or-many": (0, None),
        "one-or-many": (1, None),
        "two-or-many": (2, None),
    }

    @classmethod
    def parse(cls, value: Any) -> ChildOccurrence:
        """Build from a named occurrence or a ``{min, max}`` table."""
        if isinstance(value, str):
            if value not in cls.NAMED:
                raise ValueError(f"Unknown occurrence '{value}'")
            low, high = cls.NAMED[value]
            return cls(min=low, max=high)
        if isinstance(value, dict):
            return cls(min=int(value.get("min", 0)), max=value.get("max"))
        raise ValueError(f"Invalid occurrence: {value!r}")

    def allows_another(self, current_count: int) -> bool:
        """True if one more child fits under the upper bound."""
        return self.max is None or current_count < self.max

    def allows_removal(self, current_count: int) -> bool:
        """True if one child may be removed without going below the lower bound."""
        return current_count > self.min


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    default: Any = None
    reset_on_copy: bool = False


@dataclass(frozen=True)
class ElementDescriptor:
    """Structural description of one element type.

    Attributes:
        name: The type key.
        title: Default display name of new elements.
        container: Whether elements of this type hold children.
        ordered: Whether siblings of this type carry a priority.
        priority_property: Property holding the priority when ordered.
        input_enabled: Whether the element accepts incoming flow.
        allowed_children: Child type -> occurrence bounds. Empty means any
            child type is accepted without count limits.
        properties: Declared properties.
    """

    name: str
    title: str
    container: bool = False
    ordered: bool = False
    priority_property: str | None = None
    input_enabled: bool = True
    allowed_children: dict[str, ChildOccurrence] = field(default_factory=dict)
    properties: tuple[PropertyDescriptor, ...] = ()
    deprecated: bool = False

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> ElementDescriptor:
        """Create a descriptor from a library table."""
        ordered = bool(data.get("ordered", False))
        priority_property = data.get("priority_property")
        if ordered and not priority_property:
            raise ValueError(f"Ordered element '{name}' needs a priority_property")
        return cls(
            name=name,
            title=data.get("title", name),
            container=bool(data.get("container", False)),
            ordered=ordered,
            priority_property=priority_property,
            input_enabled=bool(data.get("input_enabled", True)),
            allowed_children={
                child: ChildOccurrence.parse(occurrence)
                for child, occurrence in data.get("allowed_children", {}).items()
            },
            properties=tuple(
                PropertyDescriptor(
                    name=prop["name"],
                    default=prop.get("default"),
                    reset_on_copy=bool(prop.get("reset_on_copy", False)),
                )
                for prop in data.get("properties", [])
            ),
            deprecated=bool(data.get("deprecated", False)),
        )

    @property
    def accepts_any_child(self) -> bool:
        """True for containers with an unbounded allowed-children set."""
        return self.container and not self.allowed_children

    def default_properties(self) -> dict[str, Any]:
        """Property values for a new element (declared defaults only)."""
        return {p.name: p.default for p in self.properties if p.default is not None}

    def reset_on_copy_properties(self) -> list[PropertyDescriptor]:
        return [p for p in self.properties if p.reset_on_copy]

    def mandatory_children(self) -> list[tuple[str, int]]:
        """Child types that must exist, with the number of instances."""
        return [
            (child_type, occurrence.min)
            for child_type, occurrence in self.allowed_children.items()
            if occurrence.min > 0
        ]


class DescriptorRegistry:
    """Read-only lookup of element descriptors by type."""

    def __init__(self, descriptors: Iterable[ElementDescriptor] = ()) -> None:
        self._descriptors: dict[str, ElementDescriptor] = {d.name: d for d in descriptors}

    @classmethod
    def from_toml(cls, content: str) -> DescriptorRegistry:
        """Build a registry from library TOML text."""
        data = parse_toml(content)
        return cls(
            ElementDescriptor.from_dict(name, table)
            for name, table in data.get("elements", {}).items()
        )

    @classmethod
    def load(cls, path: Path | None = None) -> DescriptorRegistry:
        """Load a library file, or the bundled library when ``path`` is None."""
        library = path or BUNDLED_LIBRARY
        return cls.from_toml(library.read_text(encoding="utf-8"))

    def get(self, element_type: str | None) -> ElementDescriptor:
        """Get the descriptor for a type.

        Raises:
            ValidationError: If the type is empty or unknown.
        """
        descriptor = self.find(element_type)
        if descriptor is None:
            raise ValidationError(f"Element of type '{element_type}' not found in library")
        return descriptor

    def find(self, element_type: str | None) -> ElementDescriptor | None:
        """Get the descriptor for a type, or None."""
        if not element_type:
            return None
        return self._descriptors.get(element_type)

    def __contains__(self, element_type: object) -> bool:
        return element_type in self._descriptors

    def __iter__(self) -> Iterator[ElementDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)


__all__ = [
    "BUNDLED_LIBRARY",
    "ELEMENT_ID_PROPERTY",
    "ChildOccurrence",
    "DescriptorRegistry",
    "ElementDescriptor",
    "PropertyDescriptor",
]
