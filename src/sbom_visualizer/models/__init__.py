"""
Data models for raw SBOM documents and the merged dependency model.
"""

from .component import Component, Vulnerability, Severity, SEVERITY_ORDER
from .sbom_document import (
    RawDocument, ComponentRecord, DependencyRecord, VulnerabilityRecord,
    PATH_PROPERTY
)
from .parsed_sbom import ParsedSBOM

__all__ = [
    "Component",
    "Vulnerability",
    "Severity",
    "SEVERITY_ORDER",
    "RawDocument",
    "ComponentRecord",
    "DependencyRecord",
    "VulnerabilityRecord",
    "PATH_PROPERTY",
    "ParsedSBOM"
]
