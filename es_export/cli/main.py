#!/usr/bin/env python3
"""
Elasticsearch Export CLI

Command-line interface for exporting the documents of an index (optionally
restricted to document types) into a delimited text file.
"""

import argparse
import logging
import sys
import time
from contextlib import nullcontext
from typing import Any, Dict, List, Optional

from rich.console import Console

from ..adapters.config import EnvironmentConfigAdapter
from ..adapters.output.csv import check_delimiter, open_csv_sink
from ..adapters.progress.cli import RichProgressAdapter, create_progress_callback
from ..adapters.source.cluster import MATCH_ALL, ElasticsearchSource, create_elasticsearch_source
from ..core.domain import ExportConfiguration, ExportResult
from ..core.exceptions import ConfigurationError, ESExportDomainError, ExportError
from ..core.export_service import ExportService
from .log_setup import configure_logging

logger = logging.getLogger("es_export.cli")

REQUIRED_OPTIONS = ('host', 'index', 'fieldlist', 'output')


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser"""
    parser = argparse.ArgumentParser(
        prog='es-export',
        description='Export documents of an Elasticsearch index to a delimited text file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  # Export two fields of every document in an index
  es-export --index companies --fieldlist name,cnpj --output companies.csv

  # Restrict to a document type and use a comma delimiter
  es-export --index companies --type company --fieldlist name --output out.csv --delimiter ,

  # Clusters without mapping types: match --type against a keyword field
  es-export --index companies --type company --type-field doc_type --fieldlist name --output out.csv

Settings not given on the command line are read from ES_EXPORT_* environment
variables (a .env file is loaded if present).
        '''
    )

    # Source options
    parser.add_argument('--host', default=None, help='Elasticsearch host to get data from (default: ES_EXPORT_HOST or http://127.0.0.1:9200)')
    parser.add_argument('--index', default=None, help='Name of index (or alias) to export')
    parser.add_argument(
        '--type',
        action='append',
        dest='types',
        default=None,
        help='Name of document type inside of <index> to export (optional, can be used multiple times)'
    )
    parser.add_argument(
        '--type-field',
        default=None,
        help="Document field holding the type matched by --type (default: ES_EXPORT_TYPE_FIELD or '_type')"
    )
    parser.add_argument('--fieldlist', default=None, help='Comma-separated list of fields to export')

    # Output options
    parser.add_argument('--output', '-o', default=None, help='Name of file to output')
    parser.add_argument('--delimiter', default=None, help="Column delimiter (default: ES_EXPORT_DELIMITER or ';')")

    # Tuning options
    parser.add_argument('--batch-size', type=int, default=None, help='Rows written between file flushes (default: ES_EXPORT_BATCH_SIZE or 1000)')
    parser.add_argument('--page-size', type=int, default=None, help='Documents fetched per scroll page (default: ES_EXPORT_PAGE_SIZE or 10)')
    parser.add_argument('--scroll', default=None, help='Scroll keep-alive (default: ES_EXPORT_SCROLL or 5m)')

    # Progress and display options
    parser.add_argument(
        '--progress-type',
        choices=['auto', 'rich', 'log', 'silent'],
        default='auto',
        help='Type of progress display (default: auto)'
    )
    parser.add_argument('--no-rich', action='store_true', help='Disable rich terminal formatting')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress non-essential output')

    return parser


def parse_field_list(fieldlist: str) -> List[str]:
    """Split the comma-separated field list; any empty name makes it invalid"""
    fields = [name.strip() for name in fieldlist.split(',')]
    if not fields or any(not name for name in fields):
        raise ValueError(f"Fields informed is invalid: {fieldlist!r}")
    return fields


def resolve_settings(args, server_config: Dict[str, Any], export_config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge CLI arguments over environment configuration"""
    return {
        'server': {**server_config, 'host': args.host or server_config.get('host')},
        'index': args.index,
        'types': tuple(args.types or ()),
        'type_field': args.type_field or export_config['type_field'],
        'fieldlist': args.fieldlist,
        'output': args.output,
        'delimiter': args.delimiter or export_config['delimiter'],
        'batch_size': args.batch_size if args.batch_size is not None else export_config['batch_size'],
        'page_size': args.page_size if args.page_size is not None else export_config['page_size'],
        'scroll': args.scroll or export_config['scroll'],
    }


def get_missing_options(settings: Dict[str, Any]) -> List[str]:
    """Get required options that have no value"""
    values = {
        'host': settings['server'].get('host'),
        'index': settings['index'],
        'fieldlist': settings['fieldlist'],
        'output': settings['output'],
    }
    return [name for name in REQUIRED_OPTIONS if not values[name]]


def verify_target(source: ElasticsearchSource, index: str, types) -> Optional[str]:
    """
    Check that the index and every requested type exist.

    Returns:
        Error message, or None when the target is valid
    """
    if not source.index_exists(index):
        return f"The index <{index}> doesn't exist, we need a valid index or alias"

    for doc_type in types:
        if not source.type_exists(index, doc_type):
            return f"The type <{index}/{doc_type}> doesn't exist, we need a valid type"

    return None


def print_export_results(result: ExportResult, output: str) -> None:
    """Log the export summary and every dropped record"""
    logger.info(
        "Export to <%s> was completed in <%.2fs>, %d documents succeeded and %d failed",
        output, result.elapsed, result.success, result.failed
    )

    if result.has_errors:
        logger.warning("We got errors in some documents...")
        for failure in result.errors:
            logger.warning("%s", failure)


def run_export(source: ElasticsearchSource, settings: Dict[str, Any], fields: List[str], progress) -> ExportResult:
    """Open the output file and run the export into it"""
    progress_context = progress if isinstance(progress, RichProgressAdapter) else nullcontext()

    with open_csv_sink(settings['output'], delimiter=settings['delimiter']) as sink, progress_context:
        config = ExportConfiguration(
            source=source,
            index=settings['index'],
            types=settings['types'],
            fields=tuple(fields),
            sink=sink,
            query=dict(MATCH_ALL),
            page_size=settings['page_size'],
            batch_size=settings['batch_size'],
            scroll=settings['scroll'],
            progress=progress
        )
        return ExportService().export(config)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point; returns the process exit status"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Shared by the log handler and the progress bar
    console = Console(stderr=True)
    configure_logging(verbose=args.verbose, quiet=args.quiet, use_rich=not args.no_rich, console=console)

    try:
        config_adapter = EnvironmentConfigAdapter()
        settings = resolve_settings(args, config_adapter.get_server_config(), config_adapter.get_export_config())
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    missing = get_missing_options(settings)
    if missing:
        logger.error("Missing some parameters: %s", ", ".join(f"--{name}" for name in missing))
        parser.print_usage(sys.stderr)
        return 1

    try:
        fields = parse_field_list(settings['fieldlist'])
        check_delimiter(settings['delimiter'])
    except ValueError as e:
        logger.error("%s", e)
        return 1

    host = settings['server']['host']
    source = None
    try:
        source = create_elasticsearch_source(settings['server'], type_field=settings['type_field'])
        logger.info("Connected in Elasticsearch <%s>, version %s", host, source.server_version())

        problem = verify_target(source, settings['index'], settings['types'])
        if problem:
            logger.error("%s", problem)
            return 1

        progress_type = "silent" if args.quiet else args.progress_type
        if args.no_rich and progress_type == "auto":
            progress_type = "log"
        progress = create_progress_callback(progress_type, use_rich=not args.no_rich, console=console)

        logger.info("Starting exporting to <%s>...", settings['output'])
        started = time.monotonic()
        result = run_export(source, settings, fields, progress)
        logger.debug("Wall time including file setup: %.2fs", time.monotonic() - started)

        print_export_results(result, settings['output'])
        return 0

    except ExportError as e:
        logger.error("Error trying exporting: %s", e)
        if e.result is not None:
            logger.error("Partial export: %d documents written, %d failed", e.result.success, e.result.failed)
        return 1
    except ESExportDomainError as e:
        logger.error("%s", e)
        if args.verbose:
            logger.exception("Details")
        return 1
    except KeyboardInterrupt:
        logger.warning("Export cancelled by user")
        return 130
    finally:
        if source is not None:
            source.close()


def run() -> None:
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
