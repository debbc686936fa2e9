"""
Raw CycloneDX document records, as read from a single SBOM file.

Records are immutable. Every optional field of the input degrades to an
empty or unknown default here, so the merge engine never has to check for
presence. Structural problems (wrong JSON types) raise ValueError.
"""

from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Tuple

from .component import Severity

PATH_PROPERTY = "syft:location:0:path"
DEFAULT_COMPONENT_TYPE = "library"


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _expect_list(data: Dict[str, Any], key: str, where: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' in {where} must be a list, got {type(value).__name__}")
    return value


def _expect_dict(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be an object, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ComponentRecord:
    """
    A component entry exactly as one document declares it.

    ``licenses`` holds the license id, name or expression of each
    ``licenses[]`` entry in document order; ``properties`` holds the
    ``(name, value)`` pairs of ``properties[]``.
    """

    name: str
    version: str
    type: str = DEFAULT_COMPONENT_TYPE
    bom_ref: Optional[str] = None
    purl: Optional[str] = None
    licenses: Tuple[str, ...] = ()
    properties: Tuple[Tuple[str, str], ...] = ()

    @property
    def identity(self) -> str:
        """The merge key: ``bom-ref`` when present, otherwise ``name@version``."""
        if self.bom_ref:
            return self.bom_ref
        return f"{self.name}@{self.version}"

    def first_license(self, default: str = "Unknown") -> str:
        """First license id/name found, or ``default``."""
        return self.licenses[0] if self.licenses else default

    def property_value(self, name: str) -> Optional[str]:
        """Value of the first property called ``name``."""
        for prop_name, value in self.properties:
            if prop_name == name:
                return value
        return None

    @classmethod
    def from_dict(cls, data: Any) -> 'ComponentRecord':
        """
        Create a record from a ``components[]`` entry.

        Args:
            data: Decoded JSON object

        Returns:
            ComponentRecord instance

        Raises:
            ValueError: If the entry is not shaped like a component
        """
        data = _expect_dict(data, "component")

        licenses = []
        for entry in _expect_list(data, "licenses", "component"):
            if not isinstance(entry, dict):
                continue
            license_info = entry.get("license")
            if isinstance(license_info, dict):
                value = license_info.get("id") or license_info.get("name")
                if value:
                    licenses.append(str(value))
            elif entry.get("expression"):
                licenses.append(str(entry["expression"]))

        properties = []
        for prop in _expect_list(data, "properties", "component"):
            if isinstance(prop, dict) and prop.get("name") is not None:
                properties.append((str(prop["name"]), str(prop.get("value", ""))))

        return cls(
            name=_optional_str(data.get("name")) or "",
            version=_optional_str(data.get("version")) or "",
            type=_optional_str(data.get("type")) or DEFAULT_COMPONENT_TYPE,
            bom_ref=_optional_str(data.get("bom-ref")) or None,
            purl=_optional_str(data.get("purl")),
            licenses=tuple(licenses),
            properties=tuple(properties)
        )


@dataclass(frozen=True)
class DependencyRecord:
    """A ``dependencies[]`` entry: ``ref`` depends on each id of ``depends_on``."""

    ref: str
    depends_on: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> 'DependencyRecord':
        data = _expect_dict(data, "dependency")
        ref = data.get("ref")
        if ref is None:
            raise ValueError("dependency entry is missing 'ref'")
        depends_on = tuple(str(target) for target in _expect_list(data, "dependsOn", "dependency"))
        return cls(ref=str(ref), depends_on=depends_on)


@dataclass(frozen=True)
class VulnerabilityRecord:
    """
    A CycloneDX ``vulnerabilities[]`` entry.

    ``severity`` is the most severe of the entry's ratings (or None when it
    carries none) and ``affects`` lists the bom-refs it applies to.
    """

    id: str
    severity: Optional[str] = None
    description: Optional[str] = None
    recommendation: Optional[str] = None
    affects: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> 'VulnerabilityRecord':
        data = _expect_dict(data, "vulnerability")
        vuln_id = data.get("id")
        if vuln_id is None:
            raise ValueError("vulnerability entry is missing 'id'")

        severities = []
        for rating in _expect_list(data, "ratings", "vulnerability"):
            if not isinstance(rating, dict) or rating.get("severity") in (None, ""):
                continue
            if not isinstance(rating["severity"], str):
                raise ValueError(f"rating severity of {vuln_id} must be a string")
            severities.append(Severity.parse(rating["severity"]))
        severity = min(severities, key=lambda s: s.rank).value if severities else None

        affects = []
        for target in _expect_list(data, "affects", "vulnerability"):
            if isinstance(target, dict) and target.get("ref"):
                affects.append(str(target["ref"]))

        return cls(
            id=str(vuln_id),
            severity=severity,
            description=_optional_str(data.get("description")),
            recommendation=_optional_str(data.get("recommendation")),
            affects=tuple(affects)
        )


@dataclass(frozen=True)
class RawDocument:
    """
    One parsed CycloneDX SBOM document.

    ``bom_format``, ``spec_version``, ``serial_number`` and ``version`` are
    carried through untouched; the merge does not use them.
    """

    source: str = "<memory>"
    bom_format: Optional[str] = None
    spec_version: Optional[str] = None
    serial_number: Optional[str] = None
    version: Optional[int] = None
    timestamp: Optional[str] = None
    project_name: Optional[str] = None
    components: Tuple[ComponentRecord, ...] = ()
    dependencies: Tuple[DependencyRecord, ...] = ()
    vulnerabilities: Tuple[VulnerabilityRecord, ...] = ()

    @property
    def component_count(self) -> int:
        return len(self.components)

    @property
    def has_dependency_graph(self) -> bool:
        """True if any dependency entry declares at least one target."""
        return any(dep.depends_on for dep in self.dependencies)

    @classmethod
    def from_dict(cls, data: Any, source: str = "<memory>") -> 'RawDocument':
        """
        Create a document from decoded CycloneDX JSON.

        Args:
            data: Decoded JSON value
            source: Name of the input, used in error messages

        Returns:
            RawDocument instance

        Raises:
            ValueError: If the value is not shaped like a CycloneDX document
        """
        data = _expect_dict(data, "SBOM document")

        metadata = data.get("metadata")
        if metadata is None:
            metadata = {}
        metadata = _expect_dict(metadata, "'metadata'")

        project_name = None
        meta_component = metadata.get("component")
        if isinstance(meta_component, dict) and meta_component.get("name"):
            project_name = str(meta_component["name"])

        return cls(
            source=source,
            bom_format=_optional_str(data.get("bomFormat")),
            spec_version=_optional_str(data.get("specVersion")),
            serial_number=_optional_str(data.get("serialNumber")),
            version=data.get("version"),
            timestamp=_optional_str(metadata.get("timestamp")) or None,
            project_name=project_name,
            components=tuple(
                ComponentRecord.from_dict(comp) for comp in _expect_list(data, "components", "document")
            ),
            dependencies=tuple(
                DependencyRecord.from_dict(dep) for dep in _expect_list(data, "dependencies", "document")
            ),
            vulnerabilities=tuple(
                VulnerabilityRecord.from_dict(vuln) for vuln in _expect_list(data, "vulnerabilities", "document")
            )
        )
