"""
Core domain layer

Contains the export driver, domain models, and port interfaces
that are independent of infrastructure concerns.
"""

from .domain import (
    ExportConfiguration,
    ExportResult,
    RecordFailure,
    CursorState,
    DEFAULT_BATCH_SIZE,
    DEFAULT_SCROLL
)

from .export_service import ExportService, export
from .rendering import ScalarKind, render_cell, render_row

from .ports import (
    SourcePort,
    CursorPort,
    RowSinkPort,
    ProgressCallback,
    ConfigurationPort
)

from .exceptions import (
    ESExportDomainError,
    ExportConfigurationError,
    MissingSourceError,
    MissingIndexError,
    MissingSinkError,
    MissingFieldsError,
    ExportError,
    CountQueryError,
    CursorError,
    SinkWriteError,
    SinkFlushError,
    SourceError,
    ConfigurationError,
    EndOfStream
)

__all__ = [
    # Domain models
    'ExportConfiguration',
    'ExportResult',
    'RecordFailure',
    'CursorState',
    'DEFAULT_BATCH_SIZE',
    'DEFAULT_SCROLL',

    # Services
    'ExportService',
    'export',
    'ScalarKind',
    'render_cell',
    'render_row',

    # Ports
    'SourcePort',
    'CursorPort',
    'RowSinkPort',
    'ProgressCallback',
    'ConfigurationPort',

    # Exceptions
    'ESExportDomainError',
    'ExportConfigurationError',
    'MissingSourceError',
    'MissingIndexError',
    'MissingSinkError',
    'MissingFieldsError',
    'ExportError',
    'CountQueryError',
    'CursorError',
    'SinkWriteError',
    'SinkFlushError',
    'SourceError',
    'ConfigurationError',
    'EndOfStream'
]
