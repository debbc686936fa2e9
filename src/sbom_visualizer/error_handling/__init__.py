"""
Error types for the SBOM visualizer.
"""

from .exceptions import (
    SBOMVisualizerError, ParseError, ExportError, ConfigurationError
)

__all__ = [
    "SBOMVisualizerError",
    "ParseError",
    "ExportError",
    "ConfigurationError"
]
