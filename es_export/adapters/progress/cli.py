"""
CLI Progress Adapter

Provides export progress reporting for command-line use, either as log
lines or as a rich progress bar.
"""

import logging
import sys
import time
from typing import Callable, Optional

from rich.console import Console
from rich.progress import (
    BarColumn, MofNCompleteColumn, Progress, TaskID, TextColumn,
    TimeElapsedColumn, TimeRemainingColumn
)

logger = logging.getLogger(__name__)


class LogProgressAdapter:
    """Logs one line per whole percentage point reached"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.started = clock()
        self.last_percent = -1

    def __call__(self, current: int, total: int) -> None:
        if not total:
            return

        percent = int(current / total * 100)
        # The count is an estimate; concurrent writes may push past 100
        if percent > self.last_percent:
            self.last_percent = percent
            elapsed = self.clock() - self.started
            logger.info("Exporting... %d%% [Time elapsed: %.1fs]", percent, elapsed)


class RichProgressAdapter:
    """Progress bar rendered with rich"""

    def __init__(self, console: Optional[Console] = None, description: str = "Exporting"):
        self.console = console or Console(stderr=True)
        self.description = description
        self.current_task: Optional[TaskID] = None
        self.progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=self.console
        )

    def __enter__(self):
        """Context manager entry"""
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.progress.stop()
        return False

    def __call__(self, current: int, total: int) -> None:
        if self.current_task is None:
            self.current_task = self.progress.add_task(self.description, total=total)
        self.progress.update(self.current_task, completed=current)


def create_progress_callback(
    progress_type: str = "auto",
    **kwargs
):
    """
    Factory function to create the progress callback for an export.

    Args:
        progress_type: Type of progress ("auto", "rich", "log", "silent")
        **kwargs: Additional arguments for the adapter

    Returns:
        Progress callback, or None when progress is disabled (which also
        skips the count query)
    """
    if progress_type == "auto":
        # Auto-detect best available option
        if sys.stderr.isatty() and kwargs.get('use_rich', True):
            rich_kwargs = {k: v for k, v in kwargs.items() if k in ['console', 'description']}
            return RichProgressAdapter(**rich_kwargs)
        return LogProgressAdapter()

    elif progress_type == "rich":
        rich_kwargs = {k: v for k, v in kwargs.items() if k in ['console', 'description']}
        return RichProgressAdapter(**rich_kwargs)

    elif progress_type == "log":
        log_kwargs = {k: v for k, v in kwargs.items() if k in ['clock']}
        return LogProgressAdapter(**log_kwargs)

    elif progress_type == "silent":
        return None

    else:
        raise ValueError(f"Unknown progress type: {progress_type}")
