"""
Filter predicate over the merged model, shared by the table, graph and tree views.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..models import Component, ParsedSBOM, Severity


class DependencyTypeFilter(Enum):
    ALL = "all"
    DIRECT = "direct"
    TRANSITIVE = "transitive"


SEVERITY_FILTERS = {"all", "critical", "high", "medium", "low"}


@dataclass(frozen=True)
class FilterState:
    """
    Filter settings from the filter form.

    Attributes:
        search: Case-insensitive substring matched against name or version
        dependency_type: "all", "direct" or "transitive"
        severity: "all" or one of critical/high/medium/low
        cve_id: Case-insensitive substring matched against vulnerability ids
    """

    search: str = ""
    dependency_type: str = "all"
    severity: str = "all"
    cve_id: str = ""

    def __post_init__(self):
        try:
            DependencyTypeFilter(self.dependency_type)
        except ValueError:
            raise ValueError(f"Invalid dependency type filter: {self.dependency_type!r}")
        if self.severity not in SEVERITY_FILTERS:
            raise ValueError(f"Invalid severity filter: {self.severity!r}")

    @property
    def is_empty(self) -> bool:
        return self == FilterState()


def _matches_text(component: Component, needle: str) -> bool:
    needle = needle.lower()
    return needle in component.name.lower() or needle in component.version.lower()


def matches(component: Component, filters: FilterState, extra_search: Optional[str] = None) -> bool:
    """
    Check a component against the filter settings.

    Args:
        component: Component to test
        filters: Filter settings
        extra_search: Second free-text term (the table's own search box)

    Returns:
        True if the component passes every active filter
    """
    if filters.search and not _matches_text(component, filters.search):
        return False

    if extra_search and not _matches_text(component, extra_search):
        return False

    if filters.dependency_type == DependencyTypeFilter.DIRECT.value and not component.is_direct:
        return False
    if filters.dependency_type == DependencyTypeFilter.TRANSITIVE.value and component.is_direct:
        return False

    if filters.severity != "all":
        wanted = Severity(filters.severity)
        if not any(v.severity == wanted for v in component.vulnerabilities):
            return False

    if filters.cve_id:
        needle = filters.cve_id.lower()
        if not any(needle in v.id.lower() for v in component.vulnerabilities):
            return False

    return True


def filter_components(
    model: ParsedSBOM,
    filters: Optional[FilterState] = None,
    extra_search: Optional[str] = None
) -> List[Component]:
    """
    Select the components of a model that pass the filters.

    The model is not modified; order follows the model's component order.
    """
    filters = filters or FilterState()
    return [comp for comp in model.iter_components() if matches(comp, filters, extra_search)]
