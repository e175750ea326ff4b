"""
Domain-Specific Exceptions

Defines domain-specific exceptions and error boundaries for the export tool.
These exceptions provide clear error semantics and enable proper error
translation at architectural boundaries.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


# Base domain exception hierarchy
class ESExportDomainError(Exception):
    """Base exception for all export domain errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.domain = "es_export"


class ExportConfigurationError(ESExportDomainError):
    """Raised when an export configuration is invalid"""

    def __init__(self, message: str, **context):
        super().__init__(message, context)


class MissingSourceError(ExportConfigurationError):
    """Raised when no source client was configured"""

    def __init__(self):
        super().__init__("no source client")


class MissingIndexError(ExportConfigurationError):
    """Raised when no source index was configured"""

    def __init__(self):
        super().__init__("no source index")


class MissingSinkError(ExportConfigurationError):
    """Raised when no destination writer was configured"""

    def __init__(self):
        super().__init__("no destination writer")


class MissingFieldsError(ExportConfigurationError):
    """Raised when the field list is empty"""

    def __init__(self):
        super().__init__("no fields")


class ExportError(ESExportDomainError):
    """
    Fatal error that aborted an export run.

    The partially populated ExportResult is kept on ``result`` so callers
    can still report what was written before the failure.
    """

    def __init__(self, message: str, result=None, original_error: Optional[Exception] = None, **context):
        super().__init__(message, context)
        self.result = result
        self.original_error = original_error


class CountQueryError(ExportError):
    """Raised when the progress count query fails"""
    pass


class CursorError(ExportError):
    """Raised when opening or advancing the scroll cursor fails"""
    pass


class SinkWriteError(ExportError):
    """Raised when the header row cannot be written"""
    pass


class SinkFlushError(ExportError):
    """Raised when flushing buffered rows fails"""
    pass


class SourceError(ESExportDomainError):
    """Raised when the search cluster rejects or fails a request"""

    def __init__(self, message: str, index: Optional[str] = None, **context):
        super().__init__(message, context)
        self.index = index


class ConfigurationError(ESExportDomainError):
    """Raised when environment configuration is invalid or missing"""
    pass


class EndOfStream(Exception):
    """Raised by a cursor when no further pages remain"""
    pass


# Error translation utilities
class ErrorTranslator:
    """Utility for translating infrastructure exceptions to domain exceptions"""

    @staticmethod
    def translate_source_error(error: Exception, operation: str, index: Optional[str] = None) -> SourceError:
        """Translate client/transport errors to a SourceError"""
        if isinstance(error, SourceError):
            return error
        target = f" on <{index}>" if index else ""
        return SourceError(f"{operation} failed{target}: {error}", index=index,
                           operation=operation, original_error=error)

    @staticmethod
    def translate_sink_error(error: Exception, operation: str) -> str:
        """Describe a sink failure in a single line"""
        if isinstance(error, (OSError, PermissionError)):
            return f"Error {operation} file: {error}"
        return f"Error {operation} row: {error}"


# Context managers for error boundary handling
class ErrorBoundary:
    """Context manager that logs infrastructure errors crossing an architectural boundary"""

    def __init__(self, boundary_name: str, context: Optional[Dict[str, Any]] = None):
        self.boundary_name = boundary_name
        self.context = context or {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type and not issubclass(exc_type, (ESExportDomainError, EndOfStream)):
            logger.debug("Infrastructure error at %s %s: %s", self.boundary_name, self.context, exc_val)
        return False  # Don't suppress exceptions
