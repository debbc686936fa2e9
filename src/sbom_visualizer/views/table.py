"""
Table view: sorting and row formatting for filtered components.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from ..models import Component
from .severity import severity_label

SORT_KEYS: Dict[str, Callable[[Component], Any]] = {
    "name": lambda c: c.name.lower(),
    "version": lambda c: c.version.lower(),
    "type": lambda c: c.type.lower(),
    "is_direct": lambda c: 1 if c.is_direct else 0,
    "vulnerabilities": lambda c: len(c.vulnerabilities),
}


@dataclass(frozen=True)
class SortState:
    field: str = "name"
    direction: str = "asc"


def sort_components(components: Sequence[Component], field: str = "name", direction: str = "asc") -> List[Component]:
    """
    Sort components for the table.

    Args:
        components: Components to sort (not modified)
        field: One of name, version, type, is_direct, vulnerabilities
        direction: "asc" or "desc"

    Returns:
        New sorted list; equal keys keep their input order
    """
    if field not in SORT_KEYS:
        raise ValueError(f"Invalid sort field: {field!r}")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Invalid sort direction: {direction!r}")

    return sorted(components, key=SORT_KEYS[field], reverse=(direction == "desc"))


def toggle_sort(state: SortState, field: str) -> SortState:
    """Clicking the current column flips direction; a new column sorts ascending."""
    if field not in SORT_KEYS:
        raise ValueError(f"Invalid sort field: {field!r}")
    if state.field == field:
        return SortState(field, "desc" if state.direction == "asc" else "asc")
    return SortState(field, "asc")


def table_rows(components: Sequence[Component]) -> List[Dict[str, Any]]:
    """Flatten components into display rows."""
    return [
        {
            "name": comp.name,
            "version": comp.version,
            "type": comp.type,
            "dependency": "Direct" if comp.is_direct else "Transitive",
            "license": comp.license,
            "dependencies": comp.dependency_count,
            "vulnerabilities": comp.vulnerability_count,
            "severity": severity_label(comp),
        }
        for comp in components
    ]
