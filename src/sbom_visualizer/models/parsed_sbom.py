"""
The merged dependency model produced from a batch of SBOM documents.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Dict, Any, Optional, Mapping, Iterator
import json

from .component import Component, Severity, SEVERITY_ORDER


@dataclass(frozen=True)
class ParsedSBOM:
    """
    Unified view over one upload batch.

    ``components`` is a read-only mapping from component id to Component.
    Views and exports derive data from the model; none of them mutate it.
    """

    project_name: str
    timestamp: str
    components: Mapping[str, Component]
    root_components: List[str] = field(default_factory=list)
    source_count: int = 0

    def __post_init__(self):
        if not isinstance(self.components, MappingProxyType):
            object.__setattr__(self, "components", MappingProxyType(dict(self.components)))
        object.__setattr__(self, "root_components", list(self.root_components))

    @property
    def total_components(self) -> int:
        return len(self.components)

    @property
    def direct_count(self) -> int:
        return sum(1 for comp in self.components.values() if comp.is_direct)

    @property
    def transitive_count(self) -> int:
        return self.total_components - self.direct_count

    def get_component(self, component_id: str) -> Optional[Component]:
        """
        Look up a component by id.

        Dangling dependency ids resolve to None rather than raising.
        """
        return self.components.get(component_id)

    def iter_components(self) -> Iterator[Component]:
        return iter(self.components.values())

    def resolve_dependencies(self, component_id: str) -> List[Component]:
        """
        Get the resolvable dependencies of a component.

        Args:
            component_id: Id of the depending component

        Returns:
            Components for each dependency id that exists in the model
        """
        component = self.get_component(component_id)
        if component is None:
            return []
        resolved = []
        for dep_id in component.dependencies:
            dep = self.components.get(dep_id)
            if dep is not None:
                resolved.append(dep)
        return resolved

    def get_dependents_of(self, component_id: str) -> List[str]:
        """Ids of components that declare ``component_id`` as a dependency."""
        return [
            comp.id for comp in self.components.values()
            if component_id in comp.dependencies
        ]

    def dangling_references(self) -> Dict[str, List[str]]:
        """
        Get dependency ids that have no matching component.

        Returns:
            Mapping of depending component id to its unresolved dependency ids
        """
        dangling = {}
        for comp in self.components.values():
            missing = [dep_id for dep_id in comp.dependencies if dep_id not in self.components]
            if missing:
                dangling[comp.id] = missing
        return dangling

    def count_vulnerabilities(self, severity: Severity) -> int:
        """Count vulnerabilities of one severity across all components."""
        return sum(
            1 for comp in self.components.values()
            for vuln in comp.vulnerabilities
            if vuln.severity == severity
        )

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get summary statistics about the model.

        Returns:
            Dictionary of statistics
        """
        type_breakdown: Dict[str, int] = {}
        license_breakdown: Dict[str, int] = {}
        for comp in self.components.values():
            type_breakdown[comp.type] = type_breakdown.get(comp.type, 0) + 1
            license_breakdown[comp.license] = license_breakdown.get(comp.license, 0) + 1

        return {
            "total_components": self.total_components,
            "direct_count": self.direct_count,
            "transitive_count": self.transitive_count,
            "root_count": len(self.root_components),
            "source_count": self.source_count,
            "vulnerable_component_count": sum(
                1 for comp in self.components.values() if comp.has_vulnerabilities
            ),
            "vulnerabilities": {
                severity.value: self.count_vulnerabilities(severity) for severity in SEVERITY_ORDER
            },
            "type_breakdown": type_breakdown,
            "license_breakdown": license_breakdown,
            "dangling_reference_count": sum(len(ids) for ids in self.dangling_references().values())
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the model to a dictionary for serialization.

        Returns:
            Dictionary representation of the model
        """
        return {
            "projectName": self.project_name,
            "timestamp": self.timestamp,
            "rootComponents": list(self.root_components),
            "totalComponents": self.total_components,
            "directCount": self.direct_count,
            "transitiveCount": self.transitive_count,
            "components": {comp_id: comp.to_dict() for comp_id, comp in self.components.items()}
        }

    def to_json(self) -> str:
        """Convert the model to a JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)
