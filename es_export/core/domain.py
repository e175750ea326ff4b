"""
Core domain models for Elasticsearch document export.

These models define the configuration, cursor bookkeeping and result values
used by the export driver, independent of any infrastructure concerns.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .exceptions import (
    MissingFieldsError,
    MissingIndexError,
    MissingSinkError,
    MissingSourceError,
)


DEFAULT_BATCH_SIZE = 500
DEFAULT_SCROLL = "5m"


@dataclass(frozen=True)
class ExportConfiguration:
    """Complete, immutable configuration of one export run"""

    source: Any                                  # SourcePort
    index: str
    fields: Tuple[str, ...]                      # Output column order
    sink: Any                                    # RowSinkPort
    types: Tuple[str, ...] = ()
    query: Optional[Dict[str, Any]] = None       # Opaque filter predicate, None matches all
    page_size: Optional[int] = None              # None leaves the source default
    batch_size: Optional[int] = None
    scroll: Optional[str] = None
    progress: Optional[Callable[[int, int], None]] = None

    def __post_init__(self):
        # Accept lists from callers but keep the stored value immutable
        object.__setattr__(self, "fields", tuple(self.fields or ()))
        object.__setattr__(self, "types", tuple(self.types or ()))

    def resolved_batch_size(self) -> int:
        """Rows written between two sink flushes"""
        if self.batch_size is None or self.batch_size <= 0:
            return DEFAULT_BATCH_SIZE
        return self.batch_size

    def resolved_scroll(self) -> str:
        """Keep-alive of the scroll context on the source"""
        return self.scroll or DEFAULT_SCROLL

    def resolved_page_size(self) -> Optional[int]:
        if self.page_size is None or self.page_size <= 0:
            return None
        return self.page_size

    def validate_or_raise(self) -> None:
        """
        Check the export preconditions, raising the first failure.

        Checks run in a fixed order (source, index, sink, fields) so the
        caller always sees the same error for the same configuration.
        """
        if self.source is None:
            raise MissingSourceError()
        if not self.index:
            raise MissingIndexError()
        if self.sink is None:
            raise MissingSinkError()
        if not self.fields:
            raise MissingFieldsError()


@dataclass
class CursorState:
    """Scan bookkeeping owned by a single export call"""

    seen: int = 0
    pending_rows: int = 0   # Rows written since the last flush
    pages: int = 0


@dataclass
class RecordFailure:
    """A single document that could not be exported"""

    index: str
    doc_id: str
    error: str
    doc_type: Optional[str] = None

    def __str__(self) -> str:
        return f"Index[{self.index}] Type[{self.doc_type or ''}] Id[{self.doc_id}]: {self.error}"


@dataclass
class ExportResult:
    """Summary of an export run, returned even when the run aborts"""

    success: int = 0
    failed: int = 0
    errors: List[RecordFailure] = field(default_factory=list)
    total: Optional[int] = None      # Count estimate, only known with progress reporting
    elapsed: float = 0.0

    @property
    def has_errors(self) -> bool:
        """Check if any record failed to export"""
        return len(self.errors) > 0

    @property
    def processed(self) -> int:
        """Records attempted so far"""
        return self.success + self.failed

    def record_failure(self, hit: Dict[str, Any], error: Exception) -> RecordFailure:
        """Register a dropped record"""
        failure = RecordFailure(
            index=str(hit.get("_index", "")),
            doc_id=str(hit.get("_id", "")),
            doc_type=hit.get("_type"),
            error=str(error),
        )
        self.errors.append(failure)
        self.failed += 1
        return failure
