"""
Component data model for merged SBOM entries.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum
import json


class Severity(Enum):
    """Vulnerability severities, most severe first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Position in severity order (0 is most severe)."""
        return SEVERITY_ORDER.index(self)

    @classmethod
    def parse(cls, value: Optional[str]) -> 'Severity':
        """
        Convert a severity string to a Severity.

        CycloneDX ratings may carry "none" or "unknown"; those, and anything
        unrecognised, map to INFO.
        """
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            return cls.INFO
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.INFO


SEVERITY_ORDER = [
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFO,
]


@dataclass
class Vulnerability:
    """A vulnerability attached to a component."""

    id: str
    severity: Severity = Severity.INFO
    description: Optional[str] = None
    remediation: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.severity, Severity):
            self.severity = Severity.parse(self.severity)

    def to_dict(self) -> Dict[str, Any]:
        """Convert vulnerability to dictionary."""
        return {
            "id": self.id,
            "severity": self.severity.value,
            "description": self.description,
            "remediation": self.remediation
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vulnerability':
        """Create vulnerability from dictionary."""
        return cls(
            id=data["id"],
            severity=Severity.parse(data.get("severity")),
            description=data.get("description"),
            remediation=data.get("remediation")
        )


@dataclass
class Component:
    """
    A canonical component of the merged dependency model.

    Scalar fields come from the first record seen for the component's id.
    ``is_direct`` and ``dependencies`` are computed during the merge and are
    never read from the input.
    """

    id: str
    name: str
    version: str
    type: str
    purl: Optional[str] = None
    license: str = "Unknown"
    path: str = ""
    is_direct: bool = False
    dependencies: List[str] = field(default_factory=list)
    vulnerabilities: List[Vulnerability] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        """Get the component name with version."""
        return f"{self.name}@{self.version}"

    @property
    def dependency_count(self) -> int:
        """Number of declared dependency ids, dangling ones included."""
        return len(self.dependencies)

    @property
    def vulnerability_count(self) -> int:
        return len(self.vulnerabilities)

    @property
    def has_vulnerabilities(self) -> bool:
        return len(self.vulnerabilities) > 0

    @property
    def max_severity(self) -> Optional[Severity]:
        """
        Get the most severe vulnerability severity.

        Returns:
            Highest severity present, or None when there are no vulnerabilities
        """
        if not self.vulnerabilities:
            return None
        return min((v.severity for v in self.vulnerabilities), key=lambda s: s.rank)

    def add_vulnerability(self, vulnerability: Vulnerability) -> bool:
        """
        Attach a vulnerability unless one with the same id is already present.

        Args:
            vulnerability: Vulnerability to attach

        Returns:
            True if the vulnerability was added
        """
        if any(v.id == vulnerability.id for v in self.vulnerabilities):
            return False
        self.vulnerabilities.append(vulnerability)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert component to dictionary for serialization.

        Returns:
            Dictionary representation of the component
        """
        max_severity = self.max_severity
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "type": self.type,
            "purl": self.purl,
            "license": self.license,
            "path": self.path,
            "isDirect": self.is_direct,
            "dependencies": list(self.dependencies),
            "dependencyCount": self.dependency_count,
            "maxSeverity": max_severity.value if max_severity else None,
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities]
        }

    def to_json(self) -> str:
        """Convert component to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Component':
        """
        Create component from dictionary produced by ``to_dict``.

        Args:
            data: Dictionary containing component data

        Returns:
            Component instance
        """
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            version=data.get("version", ""),
            type=data.get("type", "library"),
            purl=data.get("purl"),
            license=data.get("license") or "Unknown",
            path=data.get("path") or "",
            is_direct=bool(data.get("isDirect", False)),
            dependencies=list(data.get("dependencies", [])),
            vulnerabilities=[Vulnerability.from_dict(v) for v in data.get("vulnerabilities", [])]
        )
