"""
Logging setup for the command-line entry point.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
    use_rich: bool = True,
    console: Optional[Console] = None
) -> None:
    """
    Install the root handler for CLI runs.

    Args:
        verbose: Log DEBUG lines, including the client transport
        quiet: Only log warnings and errors
        use_rich: Use rich formatting instead of plain text lines
        console: Console for the rich handler (defaults to stderr)
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    if use_rich:
        handler: logging.Handler = RichHandler(console=console or Console(stderr=True), show_path=verbose)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(level=level, handlers=[handler], force=True)

    # The client logs every request at INFO
    transport_level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("elastic_transport").setLevel(transport_level)
    logging.getLogger("elasticsearch").setLevel(transport_level)
