"""
Export Service - Core business logic for exporting index documents.

Drives the scan/scroll cursor, projects the configured fields into rows and
streams them to the row sink in bounded flush batches.
"""

import logging
import time
from typing import Optional

from .domain import CursorState, ExportConfiguration, ExportResult
from .exceptions import (
    CountQueryError,
    CursorError,
    EndOfStream,
    ErrorBoundary,
    ErrorTranslator,
    SinkFlushError,
    SinkWriteError,
)
from .ports import CursorPort, RowSinkPort
from .rendering import header_row, render_row

logger = logging.getLogger(__name__)


class ExportService:
    """Service that runs one export per call; holds no state between calls"""

    def export(self, config: ExportConfiguration) -> ExportResult:
        """
        Export every document matching the configuration into its sink.

        Args:
            config: Export configuration; validated before any I/O

        Returns:
            ExportResult with success/failure counts and dropped records

        Raises:
            ExportConfigurationError: If a required setting is missing
            CountQueryError: If the progress count query fails
            CursorError: If the scroll cannot be opened or advanced
            SinkWriteError: If the header row cannot be written
            SinkFlushError: If buffered rows cannot be flushed

        Every ExportError carries the partial result on ``result``.
        """
        config.validate_or_raise()

        started = time.monotonic()
        result = ExportResult()
        state = CursorState()

        logger.info("Starting export of <%s> (%d fields)", config.index, len(config.fields))

        try:
            if config.progress is not None:
                result.total = self._count(config, result)

            cursor = self._open_cursor(config, result)
            try:
                self._write_header(config.sink, config, result)

                scan_error: Optional[CursorError] = None
                try:
                    self._scan(cursor, config, result, state)
                except CursorError as e:
                    scan_error = e

                # Final flush runs on normal end and on cursor failure alike
                try:
                    self._flush(config.sink, result, "final")
                except SinkFlushError as flush_error:
                    if scan_error is not None:
                        raise flush_error from scan_error
                    raise

                if scan_error is not None:
                    raise scan_error
            finally:
                self._close_cursor(cursor, config.index)
        finally:
            result.elapsed = time.monotonic() - started

        logger.info(
            "Export of <%s> completed in %.2fs, %d documents succeeded and %d failed",
            config.index, result.elapsed, result.success, result.failed
        )
        return result

    def _count(self, config: ExportConfiguration, result: ExportResult) -> int:
        """Count documents under the same restriction the scan will use"""
        try:
            with ErrorBoundary("ExportService.count", {"index": config.index}):
                total = config.source.count(config.index, config.types, config.query)
        except Exception as e:
            raise CountQueryError(
                f"Error counting documents in <{config.index}>: {e}",
                result=result, original_error=e
            ) from e

        logger.debug("Source reports %d matching documents", total)
        return total

    def _open_cursor(self, config: ExportConfiguration, result: ExportResult) -> CursorPort:
        try:
            with ErrorBoundary("ExportService.open_cursor", {"index": config.index}):
                return config.source.open_cursor(
                    config.index,
                    config.types,
                    config.query,
                    config.fields,
                    config.resolved_page_size(),
                    config.resolved_scroll(),
                )
        except Exception as e:
            raise CursorError(
                f"Error opening scroll on <{config.index}>: {e}",
                result=result, original_error=e
            ) from e

    def _write_header(self, sink: RowSinkPort, config: ExportConfiguration, result: ExportResult) -> None:
        """Write the field names as the first row and flush it immediately"""
        try:
            sink.write_row(header_row(config.fields))
        except Exception as e:
            raise SinkWriteError(
                ErrorTranslator.translate_sink_error(e, "writing header to"),
                result=result, original_error=e
            ) from e

        self._flush(sink, result, "header")

    def _scan(
        self,
        cursor: CursorPort,
        config: ExportConfiguration,
        result: ExportResult,
        state: CursorState
    ) -> None:
        """Main loop: fetch pages until the cursor is exhausted"""
        batch_size = config.resolved_batch_size()

        while True:
            try:
                with ErrorBoundary("ExportService.next_page", {"page": state.pages + 1}):
                    hits = cursor.next_page()
            except EndOfStream:
                break
            except Exception as e:
                raise CursorError(
                    f"Error fetching page {state.pages + 1} from <{config.index}>: {e}",
                    result=result, original_error=e
                ) from e

            state.pages += 1

            for hit in hits:
                if config.progress is not None:
                    state.seen += 1
                    config.progress(state.seen, result.total)

                row = render_row(hit.get("fields"), config.fields)

                try:
                    config.sink.write_row(row)
                except Exception as e:
                    failure = result.record_failure(hit, e)
                    logger.warning("%s (%s)", ErrorTranslator.translate_sink_error(e, "writing to"), failure)
                    continue

                result.success += 1
                state.pending_rows += 1
                if state.pending_rows >= batch_size:
                    self._flush(config.sink, result, "batch")
                    state.pending_rows = 0

        logger.debug("Scroll exhausted after %d pages", state.pages)

    def _flush(self, sink: RowSinkPort, result: ExportResult, stage: str) -> None:
        try:
            sink.flush()
        except Exception as e:
            raise SinkFlushError(
                ErrorTranslator.translate_sink_error(e, "flushing to"),
                result=result, original_error=e, stage=stage
            ) from e

    def _close_cursor(self, cursor: CursorPort, index: str) -> None:
        """Release the scroll context without masking the export outcome"""
        try:
            cursor.close()
        except Exception as e:
            logger.warning("Error releasing scroll on <%s>: %s", index, e)


def export(config: ExportConfiguration) -> ExportResult:
    """Run a single export with a fresh ExportService"""
    return ExportService().export(config)
