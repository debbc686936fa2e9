"""
SBOM merge engine: combines N CycloneDX documents into one dependency model.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Sequence, Tuple

from ..models import (
    RawDocument, ComponentRecord, Component, Vulnerability, Severity, ParsedSBOM
)
from ..config import get_config, MergeConfig
from .document_parser import DocumentParser, SBOMText

logger = logging.getLogger(__name__)


@dataclass
class MergeReport:
    """
    Data-completeness findings from one merge.

    None of these conditions are errors; the model is built regardless.
    """

    documents_merged: int = 0
    component_records: int = 0
    duplicate_components: int = 0
    dependency_edges: int = 0
    dangling_edges: int = 0
    orphan_edge_sources: int = 0
    vulnerabilities_attached: int = 0
    unmatched_vulnerability_refs: int = 0
    degenerate_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def latest_timestamp(timestamps: Sequence[str]) -> Optional[str]:
    """
    Pick the chronologically latest ISO-8601 timestamp.

    Ties go to the later entry. If none of the values parse, the last one
    is returned as declared.

    Args:
        timestamps: Declared timestamps in processing order

    Returns:
        The winning timestamp string, or None for an empty sequence
    """
    latest = None
    latest_parsed = None
    for value in timestamps:
        parsed = _parse_timestamp(value)
        if parsed is None:
            continue
        if latest_parsed is None or parsed >= latest_parsed:
            latest, latest_parsed = value, parsed

    if latest is None and timestamps:
        return timestamps[-1]
    return latest


class SBOMMerger:
    """
    Merges SBOM documents into a ParsedSBOM.

    Each call owns its accumulation maps, so one merger can be shared and
    concurrent merges of different batches never interact. The merge runs in
    one sequential pass:

    1. collect components by identity (first occurrence wins),
    2. collect dependency edges as a per-ref ordered set union,
    3. apply edges to the components they start from,
    4. infer roots (components no edge points at),
    5. mark each root's immediate dependencies direct (one hop only),
    6. fall back to "everything is a root" when no root was found.
    """

    def __init__(self, config: Optional[MergeConfig] = None, parser: Optional[DocumentParser] = None):
        """
        Initialize the merger.

        Args:
            config: Merge configuration (defaults to the app config)
            parser: Parser used by ``parse_and_merge``
        """
        self.config = config or get_config().merge
        self.parser = parser or DocumentParser(self.config.parse_workers)

    def merge(self, documents: Sequence[RawDocument]) -> ParsedSBOM:
        """
        Merge parsed documents into one model.

        Args:
            documents: Documents in processing order

        Returns:
            The merged model
        """
        model, _ = self.merge_with_report(documents)
        return model

    def parse_and_merge(self, texts: Sequence[SBOMText], sources: Optional[Sequence[str]] = None) -> ParsedSBOM:
        """
        Parse raw texts and merge them.

        All texts are parsed before anything is merged, so a ParseError
        leaves no partial model behind.

        Raises:
            ParseError: If any text is not a CycloneDX JSON document
        """
        return self.merge(self.parser.parse_all(texts, sources))

    def merge_files(self, paths: Sequence[Any]) -> ParsedSBOM:
        """Read, parse and merge SBOM files."""
        return self.merge(self.parser.read_files(paths))

    def merge_with_report(self, documents: Sequence[RawDocument]) -> Tuple[ParsedSBOM, MergeReport]:
        """
        Merge parsed documents and describe what was found along the way.

        Args:
            documents: Documents in processing order

        Returns:
            Tuple of (merged model, merge report)
        """
        report = MergeReport(documents_merged=len(documents))
        components: Dict[str, Component] = {}
        # ref -> ordered set of targets (dict keys keep discovery order)
        edges: Dict[str, Dict[str, None]] = {}
        project_name = None
        timestamps = []

        logger.info(f"Merging {len(documents)} SBOM documents")

        for document in documents:
            if project_name is None and document.project_name:
                project_name = document.project_name
            if document.timestamp:
                timestamps.append(document.timestamp)

            for record in document.components:
                report.component_records += 1
                component_id = record.identity
                if component_id in components:
                    report.duplicate_components += 1
                    continue
                components[component_id] = self._component_from_record(component_id, record)

            for dependency in document.dependencies:
                if not dependency.depends_on:
                    continue
                targets = edges.setdefault(dependency.ref, {})
                for target in dependency.depends_on:
                    targets.setdefault(target, None)

        self._attach_vulnerabilities(documents, components, report)

        depended_upon = set()
        for ref, targets in edges.items():
            depended_upon.update(targets)
            report.dependency_edges += len(targets)

            component = components.get(ref)
            if component is None:
                report.orphan_edge_sources += 1
                logger.debug(f"Dependency entry for unknown component '{ref}' kept out of the model")
                continue

            component.dependencies = list(targets)
            for target in targets:
                if target not in components:
                    report.dangling_edges += 1
                    logger.debug(f"Dangling dependency edge {ref} -> {target}")

        root_components = []
        for component_id, component in components.items():
            if component_id not in depended_upon:
                root_components.append(component_id)
                component.is_direct = True

        for root_id in root_components:
            for dep_id in components[root_id].dependencies:
                dependency = components.get(dep_id)
                if dependency is not None:
                    dependency.is_direct = True

        if not root_components and components:
            logger.info("No root components inferred from the dependency graph; treating all components as direct")
            report.degenerate_fallback = True
            for component_id, component in components.items():
                component.is_direct = True
                root_components.append(component_id)

        model = ParsedSBOM(
            project_name=project_name or self.config.default_project_name,
            timestamp=latest_timestamp(timestamps) or datetime.now(timezone.utc).isoformat(),
            components=components,
            root_components=root_components,
            source_count=len(documents)
        )

        logger.info(
            f"Merged model has {model.total_components} components "
            f"({model.direct_count} direct, {model.transitive_count} transitive, "
            f"{len(root_components)} roots)",
            extra={"merge_report": report.to_dict()}
        )
        if report.dangling_edges:
            logger.warning(f"{report.dangling_edges} dependency edges point at components missing from every document")

        return model, report

    def _component_from_record(self, component_id: str, record: ComponentRecord) -> Component:
        return Component(
            id=component_id,
            name=record.name,
            version=record.version,
            type=record.type,
            purl=record.purl,
            license=record.first_license(self.config.unknown_license),
            path=record.property_value(self.config.path_property) or ""
        )

    def _attach_vulnerabilities(
        self,
        documents: Sequence[RawDocument],
        components: Dict[str, Component],
        report: MergeReport
    ) -> None:
        """Attach embedded CycloneDX vulnerabilities to the components they affect."""
        for document in documents:
            for record in document.vulnerabilities:
                for ref in record.affects:
                    component = components.get(ref)
                    if component is None:
                        report.unmatched_vulnerability_refs += 1
                        continue
                    vulnerability = Vulnerability(
                        id=record.id,
                        severity=Severity.parse(record.severity),
                        description=record.description,
                        remediation=record.recommendation
                    )
                    if component.add_vulnerability(vulnerability):
                        report.vulnerabilities_attached += 1


def merge_documents(documents: Sequence[RawDocument], config: Optional[MergeConfig] = None) -> ParsedSBOM:
    """Merge parsed documents with a fresh merger."""
    return SBOMMerger(config).merge(documents)


def parse_sbom_texts(
    texts: Sequence[SBOMText],
    sources: Optional[Sequence[str]] = None,
    config: Optional[MergeConfig] = None
) -> ParsedSBOM:
    """
    Parse and merge raw CycloneDX texts in one call.

    Raises:
        ParseError: If any text is not a CycloneDX JSON document
    """
    return SBOMMerger(config).parse_and_merge(texts, sources)
