"""
SBOM parsing, merging and export.
"""

from .document_parser import DocumentParser
from .sbom_merger import (
    SBOMMerger, MergeReport, merge_documents, parse_sbom_texts, latest_timestamp
)
from .export_manager import ExportManager

__all__ = [
    "DocumentParser",
    "SBOMMerger",
    "MergeReport",
    "merge_documents",
    "parse_sbom_texts",
    "latest_timestamp",
    "ExportManager"
]
