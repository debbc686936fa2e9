"""
Custom exceptions for the SBOM visualizer.
"""

from typing import Optional, Dict, Any


class SBOMVisualizerError(Exception):
    """
    Base exception for all SBOM visualizer errors.

    Carries an optional error code, a context dictionary and the original
    exception that caused it.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize SBOM visualizer error.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        parts = [self.message]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


class ParseError(SBOMVisualizerError):
    """
    Raised when an input cannot be read as a CycloneDX JSON document.

    A ParseError fails the whole batch: no partial model is produced.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        index: Optional[int] = None,
        **kwargs
    ):
        """
        Initialize parse error.

        Args:
            message: Error message
            source: Name of the input that failed (file name or label)
            index: Position of the input in the batch
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if source is not None:
            context['source'] = source
        if index is not None:
            context['index'] = index

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'PARSE_ERROR')
        super().__init__(message, **kwargs)

        self.source = source
        self.index = index


class ExportError(SBOMVisualizerError):
    """Raised when a model cannot be written in a requested export format."""

    def __init__(
        self,
        message: str,
        export_format: Optional[str] = None,
        output_path: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if export_format:
            context['export_format'] = export_format
        if output_path:
            context['output_path'] = output_path

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'EXPORT_ERROR')
        super().__init__(message, **kwargs)

        self.export_format = export_format
        self.output_path = output_path


class ConfigurationError(SBOMVisualizerError):
    """Raised for invalid configuration values."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if config_key:
            context['config_key'] = config_key

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'CONFIG_ERROR')
        super().__init__(message, **kwargs)

        self.config_key = config_key
