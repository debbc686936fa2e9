"""
Parser turning raw SBOM texts into RawDocument records.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..models import RawDocument
from ..error_handling import ParseError
from ..config import get_config

logger = logging.getLogger(__name__)

SBOMText = Union[str, bytes]

EXPECTED_BOM_FORMAT = "CycloneDX"


class DocumentParser:
    """
    Parses CycloneDX JSON texts into immutable RawDocument records.

    Documents are independent of each other, so a batch may be parsed on a
    thread pool. Results always come back in input order, and the first
    failing input (by position) fails the whole batch.
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Initialize the parser.

        Args:
            max_workers: Thread pool size (defaults to merge.parse_workers)
        """
        if max_workers is None:
            max_workers = get_config().merge.parse_workers
        self.max_workers = max(1, max_workers)

    def parse_text(self, text: SBOMText, source: Optional[str] = None, index: Optional[int] = None) -> RawDocument:
        """
        Parse one SBOM text.

        Args:
            text: JSON text (str, or bytes in UTF-8)
            source: Name of the input for error messages
            index: Position of the input in its batch

        Returns:
            Parsed RawDocument

        Raises:
            ParseError: If the text is not a CycloneDX JSON document
        """
        label = source or (f"document[{index}]" if index is not None else "<memory>")

        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ParseError(f"{label} is not valid UTF-8", source=label, index=index, cause=e)
        elif not isinstance(text, str):
            raise ParseError(
                f"{label} must be text, got {type(text).__name__}", source=label, index=index
            )

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"{label} is not valid JSON", source=label, index=index, cause=e)
        except RecursionError as e:
            raise ParseError(f"{label} is nested too deeply", source=label, index=index, cause=e)

        try:
            document = RawDocument.from_dict(data, source=label)
        except ValueError as e:
            raise ParseError(f"{label} is not a CycloneDX document", source=label, index=index, cause=e)

        if document.bom_format and document.bom_format != EXPECTED_BOM_FORMAT:
            logger.warning(f"{label} declares bomFormat '{document.bom_format}', expected '{EXPECTED_BOM_FORMAT}'")

        logger.debug(f"Parsed {label}: {document.component_count} components, "
                     f"{len(document.dependencies)} dependency entries")
        return document

    def parse_all(self, texts: Sequence[SBOMText], sources: Optional[Sequence[str]] = None) -> List[RawDocument]:
        """
        Parse a batch of SBOM texts.

        Args:
            texts: Raw document texts, in processing order
            sources: Optional names for each text (same length as ``texts``)

        Returns:
            RawDocuments in the same order as ``texts``

        Raises:
            ParseError: For the first input that fails to parse
        """
        if sources is not None and len(sources) != len(texts):
            raise ValueError("sources must have the same length as texts")

        names = list(sources) if sources is not None else [None] * len(texts)
        jobs = list(zip(texts, names, range(len(texts))))

        if self.max_workers == 1 or len(jobs) <= 1:
            return [self.parse_text(text, name, index) for text, name, index in jobs]

        logger.debug(f"Parsing {len(jobs)} documents with {self.max_workers} workers")
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(jobs))) as executor:
            return list(executor.map(lambda job: self.parse_text(*job), jobs))

    def read_files(self, paths: Sequence[Union[str, Path]]) -> List[RawDocument]:
        """
        Read and parse SBOM files.

        Args:
            paths: File paths, in processing order

        Returns:
            RawDocuments in the same order as ``paths``

        Raises:
            ParseError: If a file cannot be read or parsed
        """
        texts = []
        sources = []
        for index, path in enumerate(paths):
            path = Path(path)
            try:
                texts.append(path.read_bytes())
            except OSError as e:
                raise ParseError(f"Cannot read {path}", source=str(path), index=index, cause=e)
            sources.append(path.name)

        return self.parse_all(texts, sources)
