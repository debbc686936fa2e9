"""
Severity helpers shared by the views and the export report.
"""

from typing import Dict

from ..models import Component, Vulnerability, Severity, ParsedSBOM

# Severities shown in summaries and offered by the severity filter
REPORTED_SEVERITIES = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


def severity_label(component: Component) -> str:
    """Max severity of a component as a string, ``"none"`` when clean."""
    severity = component.max_severity
    return severity.value if severity else "none"


def count_by_severity(model: ParsedSBOM) -> Dict[str, int]:
    """
    Count vulnerabilities per reported severity across a model.

    Returns:
        Mapping of severity name to count, critical through low
    """
    return {severity.value: model.count_vulnerabilities(severity) for severity in REPORTED_SEVERITIES}


def remediation_advice(component: Component, vulnerability: Vulnerability) -> str:
    """
    Remediation text for a vulnerability.

    Uses the remediation carried by the input when present, otherwise
    generic advice scaled to the severity.
    """
    if vulnerability.remediation:
        return vulnerability.remediation

    if vulnerability.severity in (Severity.CRITICAL, Severity.HIGH):
        return (f"Update {component.name} to the latest patched version immediately. "
                f"Check the package repository for security advisories.")
    if vulnerability.severity == Severity.MEDIUM:
        return (f"Consider updating {component.name} to a patched version. "
                f"Review the vulnerability details and assess impact on your application.")
    return f"Update {component.name} when convenient. This is a low-severity issue with minimal risk."
