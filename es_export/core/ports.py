"""
Port interfaces for Elasticsearch document export.

These interfaces define the contracts between the export driver and
infrastructure. They enable dependency inversion and allow for easy testing
with in-memory implementations.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

# A hit is a mapping shaped like an Elasticsearch search hit:
# {"_index": ..., "_id": ..., "_type": ... (optional), "fields": {name: [values]}}
Hit = Mapping[str, Any]


class CursorPort(Protocol):
    """Port for a paginated scroll cursor"""

    def next_page(self) -> List[Hit]:
        """
        Fetch the next page of hits.

        Returns:
            Non-empty list of hits

        Raises:
            EndOfStream: When no further pages remain
            SourceError: If the page cannot be fetched
        """
        ...

    def close(self) -> None:
        """Release the scroll context on the source. Safe to call twice."""
        ...


class SourcePort(Protocol):
    """Port for the search index holding the documents"""

    def count(self, index: str, types: Sequence[str], query: Optional[Dict[str, Any]]) -> int:
        """
        Count documents matching the same restriction the scan will use.

        Raises:
            SourceError: If the count request fails
        """
        ...

    def open_cursor(
        self,
        index: str,
        types: Sequence[str],
        query: Optional[Dict[str, Any]],
        fields: Sequence[str],
        page_size: Optional[int],
        scroll: str
    ) -> CursorPort:
        """
        Open a scroll cursor projecting the given fields.

        Raises:
            SourceError: If the scroll cannot be opened
        """
        ...


class RowSinkPort(Protocol):
    """Port for delimited row output"""

    def write_row(self, row: Sequence[str]) -> None:
        """Write one row. May raise; the driver decides whether it is fatal."""
        ...

    def flush(self) -> None:
        """Push buffered rows to the underlying file."""
        ...


class ProgressCallback(Protocol):
    """Called once per exported record while progress reporting is enabled"""

    def __call__(self, current: int, total: int) -> None:
        ...


class ConfigurationPort(Protocol):
    """Port for configuration management"""

    def get_server_config(self) -> Dict[str, Any]:
        """
        Get cluster connection settings.

        Returns:
            Dictionary with host, credentials, timeout and TLS settings
        """
        ...

    def get_export_config(self) -> Dict[str, Any]:
        """
        Get export tuning settings.

        Returns:
            Dictionary with batch_size, page_size, scroll and delimiter
        """
        ...
