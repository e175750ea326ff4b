"""
CSV Output Adapter

Provides delimited row sinks for streaming export output.
"""

import csv
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Sequence

from ...core.exceptions import ESExportDomainError

DEFAULT_DELIMITER = ';'
OUTPUT_TYPES = ("csv", "tsv")


def check_delimiter(delimiter: str) -> None:
    """Reject delimiters the csv module cannot use as a single column separator"""
    if not isinstance(delimiter, str) or len(delimiter) != 1 or delimiter in ('"', '\r', '\n'):
        raise ValueError(f"Delimiter must be a single character, got: {delimiter!r}")


class CSVRowSink:
    """Delimited row sink writing through the csv module"""

    def __init__(
        self,
        stream: IO[str],
        delimiter: str = DEFAULT_DELIMITER,
        lineterminator: str = '\n'
    ):
        check_delimiter(delimiter)

        self.stream = stream
        self.delimiter = delimiter
        # Cells holding the multi-value newline separator are quoted
        self.writer = csv.writer(
            stream,
            delimiter=delimiter,
            lineterminator=lineterminator,
            quoting=csv.QUOTE_MINIMAL
        )
        self.rows_written = 0

    def write_row(self, row: Sequence[str]) -> None:
        """Write one row; csv.Error and OSError propagate to the caller"""
        self.writer.writerow(row)
        self.rows_written += 1

    def flush(self) -> None:
        """Flush buffered rows to the underlying file"""
        self.stream.flush()


class TSVRowSink(CSVRowSink):
    """Tab-separated values row sink"""

    def __init__(self, stream: IO[str], **kwargs):
        kwargs['delimiter'] = '\t'
        super().__init__(stream, **kwargs)


def create_row_sink(
    output_type: str,
    stream: IO[str],
    **kwargs
) -> CSVRowSink:
    """
    Factory function to create a row sink.

    Args:
        output_type: Type of delimited output ("csv", "tsv")
        stream: Text stream opened with newline=''
        **kwargs: Additional arguments for the sink

    Returns:
        Configured row sink
    """
    if output_type == "csv":
        return CSVRowSink(stream, **kwargs)
    elif output_type == "tsv":
        return TSVRowSink(stream, **kwargs)
    else:
        raise ValueError(f"Unknown output type: {output_type}")


@contextmanager
def open_csv_sink(
    destination: str,
    delimiter: str = DEFAULT_DELIMITER,
    encoding: str = 'utf-8',
    output_type: str = "csv"
) -> Iterator[CSVRowSink]:
    """
    Create the output file and yield a sink writing to it.

    The file is closed on every exit path.

    Raises:
        ESExportDomainError: If the file cannot be created
        ValueError: If the delimiter or output type is invalid; the file is
            left untouched
    """
    if output_type not in OUTPUT_TYPES:
        raise ValueError(f"Unknown output type: {output_type}")
    if output_type == "csv":
        check_delimiter(delimiter)

    path = Path(destination)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        stream = open(path, 'w', newline='', encoding=encoding)
    except OSError as e:
        raise ESExportDomainError(f"Cannot create output file[{destination}]: {e}",
                                  {"destination": destination}) from e

    try:
        if output_type == "csv":
            yield create_row_sink(output_type, stream, delimiter=delimiter)
        else:
            yield create_row_sink(output_type, stream)
    finally:
        stream.close()
