"""
Unit tests for the es-export command line.

The cluster client is replaced by an in-memory source and logging setup is
patched out so caplog keeps its handler.
"""

import csv
import logging
from unittest.mock import patch

import pytest

from es_export.adapters.source.cluster import MATCH_ALL
from es_export.cli.main import (
    create_argument_parser, get_missing_options, main, parse_field_list, resolve_settings
)
from es_export.core.exceptions import SourceError
from tests.fixtures.test_helpers import FakeSource, make_hit

SERVER_CONFIG = {'host': 'http://127.0.0.1:9200', 'api_key': None, 'username': None,
                 'password': None, 'timeout': 30, 'verify_certs': True}
EXPORT_CONFIG = {'batch_size': 1000, 'page_size': 10, 'scroll': '5m', 'delimiter': ';',
                 'type_field': '_type'}


class ClusterSource(FakeSource):
    """In-memory source that also answers the CLI's cluster checks"""

    def __init__(self, pages=(), indices=("companies",), types=(), **kwargs):
        super().__init__(pages, **kwargs)
        self.indices = set(indices)
        self.types = set(types)
        self.closed = False

    def server_version(self):
        return "8.13.0"

    def index_exists(self, index):
        return index in self.indices

    def type_exists(self, index, doc_type):
        return doc_type in self.types

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def logging_setup():
    with patch("es_export.cli.main.configure_logging") as configure:
        yield configure


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('ES_EXPORT_HOST', 'ES_EXPORT_BATCH_SIZE', 'ES_EXPORT_PAGE_SIZE',
                 'ES_EXPORT_SCROLL', 'ES_EXPORT_DELIMITER', 'ES_EXPORT_TIMEOUT',
                 'ES_EXPORT_TYPE_FIELD'):
        monkeypatch.delenv(name, raising=False)


def run_cli(source, *argv):
    with patch("es_export.cli.main.create_elasticsearch_source", return_value=source) as factory:
        status = main(list(argv) + ['--progress-type', 'silent', '--no-rich'])
    return status, factory


class TestArgumentParsing:
    """Test argument parser and settings resolution"""

    def test_type_is_repeatable(self):
        args = create_argument_parser().parse_args(
            ['--index', 'companies', '--type', 'company', '--type', 'branch']
        )

        assert args.types == ['company', 'branch']

    def test_cli_values_override_environment(self):
        args = create_argument_parser().parse_args(
            ['--host', 'http://es:9200', '--delimiter', ',', '--batch-size', '5', '--page-size', '50']
        )

        settings = resolve_settings(args, SERVER_CONFIG, EXPORT_CONFIG)

        assert settings['server']['host'] == 'http://es:9200'
        assert settings['delimiter'] == ','
        assert settings['batch_size'] == 5
        assert settings['page_size'] == 50
        assert settings['scroll'] == '5m'
        assert settings['types'] == ()
        assert settings['type_field'] == '_type'

    def test_type_field_option(self):
        args = create_argument_parser().parse_args(['--type', 'company', '--type-field', 'doc_type'])

        settings = resolve_settings(args, SERVER_CONFIG, EXPORT_CONFIG)

        assert settings['type_field'] == 'doc_type'
        assert settings['types'] == ('company',)

    def test_missing_options_reported_in_order(self):
        args = create_argument_parser().parse_args([])

        settings = resolve_settings(args, SERVER_CONFIG, EXPORT_CONFIG)

        assert get_missing_options(settings) == ['index', 'fieldlist', 'output']

    def test_parse_field_list(self):
        assert parse_field_list("name, city,cnpj") == ["name", "city", "cnpj"]

    @pytest.mark.parametrize("fieldlist", ["name,,city", ",", "name,"])
    def test_parse_field_list_rejects_empty_names(self, fieldlist):
        with pytest.raises(ValueError, match="Fields informed is invalid"):
            parse_field_list(fieldlist)


class TestMain:
    """Test the main entry point"""

    def test_missing_options_exit_1(self, caplog, capsys):
        with caplog.at_level(logging.ERROR, logger="es_export.cli"):
            assert main(['--index', 'companies']) == 1

        assert "--fieldlist, --output" in caplog.text
        assert "usage: es-export" in capsys.readouterr().err

    def test_invalid_field_list_exit_1(self, tmp_path):
        source = ClusterSource()

        status, factory = run_cli(source, '--index', 'companies', '--fieldlist', 'name,,city',
                                  '--output', str(tmp_path / 'out.csv'))

        assert status == 1
        factory.assert_not_called()

    def test_export_writes_file(self, tmp_path, caplog):
        pages = [[make_hit("1", name=["ACME"], tags=["a", "b"])], [make_hit("2", name=["Globex"])]]
        source = ClusterSource(pages)
        output = tmp_path / "out.csv"

        with caplog.at_level(logging.INFO, logger="es_export.cli"):
            status, _ = run_cli(source, '--index', 'companies', '--fieldlist', 'name,tags',
                                '--output', str(output))

        assert status == 0
        with open(output, newline='', encoding='utf-8') as handle:
            assert list(csv.reader(handle, delimiter=';')) == [
                ["name", "tags"], ["ACME", "a\nb"], ["Globex", ""]
            ]
        assert "2 documents succeeded and 0 failed" in caplog.text
        assert source.closed

    def test_cli_tuning_reaches_cursor(self, tmp_path):
        source = ClusterSource([[make_hit("1", name=["ACME"])]], types=("company",))

        status, _ = run_cli(source, '--index', 'companies', '--type', 'company', '--fieldlist', 'name',
                            '--output', str(tmp_path / 'out.csv'), '--page-size', '25', '--scroll', '1m')

        assert status == 0
        call = source.open_calls[0]
        assert call['types'] == ('company',)
        assert call['fields'] == ('name',)
        assert call['page_size'] == 25
        assert call['scroll'] == '1m'

    def test_silent_progress_skips_count(self, tmp_path):
        source = ClusterSource([[make_hit("1", name=["ACME"])]])

        run_cli(source, '--index', 'companies', '--fieldlist', 'name', '--output', str(tmp_path / 'out.csv'))

        assert source.count_calls == []

    def test_unknown_index_exit_1(self, tmp_path, caplog):
        source = ClusterSource(indices=())

        with caplog.at_level(logging.ERROR, logger="es_export.cli"):
            status, _ = run_cli(source, '--index', 'companies', '--fieldlist', 'name',
                                '--output', str(tmp_path / 'out.csv'))

        assert status == 1
        assert "The index <companies> doesn't exist" in caplog.text
        assert source.open_calls == []
        assert source.closed

    def test_unknown_type_exit_1(self, tmp_path, caplog):
        source = ClusterSource(types=("company",))

        with caplog.at_level(logging.ERROR, logger="es_export.cli"):
            status, _ = run_cli(source, '--index', 'companies', '--type', 'branch',
                                '--fieldlist', 'name', '--output', str(tmp_path / 'out.csv'))

        assert status == 1
        assert "The type <companies/branch> doesn't exist" in caplog.text

    def test_export_error_exit_1(self, tmp_path, caplog):
        """Test a cursor failure mid-export reports partial counts."""
        pages = [[make_hit("1", name=["ACME"])], SourceError("Scroll failed on <companies>: timeout")]
        source = ClusterSource(pages)

        with caplog.at_level(logging.ERROR, logger="es_export.cli"):
            status, _ = run_cli(source, '--index', 'companies', '--fieldlist', 'name',
                                '--output', str(tmp_path / 'out.csv'))

        assert status == 1
        assert "Error trying exporting" in caplog.text
        assert "Partial export: 1 documents written, 0 failed" in caplog.text

    def test_connection_error_exit_1(self, tmp_path):
        with patch("es_export.cli.main.create_elasticsearch_source",
                   side_effect=SourceError("No cluster address configured")):
            status = main(['--index', 'companies', '--fieldlist', 'name',
                           '--output', str(tmp_path / 'out.csv'), '--progress-type', 'silent'])

        assert status == 1

    @pytest.mark.parametrize("delimiter_args, env_delimiter", [
        (['--delimiter', ';;'], None),
        ([], '||'),
    ])
    def test_invalid_delimiter_exit_1(self, tmp_path, caplog, monkeypatch, delimiter_args, env_delimiter):
        """Test a bad delimiter is reported before connecting or creating the file."""
        if env_delimiter:
            monkeypatch.setenv('ES_EXPORT_DELIMITER', env_delimiter)
        output = tmp_path / 'out.csv'

        with caplog.at_level(logging.ERROR, logger="es_export.cli"):
            status, factory = run_cli(ClusterSource(), '--index', 'companies', '--fieldlist', 'name',
                                      '--output', str(output), *delimiter_args)

        assert status == 1
        assert "Delimiter must be a single character" in caplog.text
        assert not output.exists()
        factory.assert_not_called()

    def test_host_without_scheme_exit_1(self, tmp_path, caplog):
        """Test an address the client rejects is a logged error, not a traceback."""
        with caplog.at_level(logging.ERROR, logger="es_export.cli"):
            status = main(['--host', 'localhost:9200', '--index', 'companies', '--fieldlist', 'name',
                           '--output', str(tmp_path / 'out.csv'), '--progress-type', 'silent'])

        assert status == 1
        assert "Connect to <localhost:9200> failed" in caplog.text

    @patch("es_export.adapters.source.cluster.Elasticsearch")
    def test_type_field_reaches_cluster_queries(self, es_class, tmp_path):
        """Test --type is matched against the field named by --type-field."""
        client = es_class.return_value
        client.info.return_value = {"version": {"number": "8.13.0"}}
        client.indices.exists.return_value = True
        client.count.return_value = {"count": 1}
        client.search.return_value = {"_scroll_id": "s1", "hits": {"hits": [make_hit("1", name=["ACME"])]}}
        client.scroll.return_value = {"_scroll_id": "s1", "hits": {"hits": []}}

        status = main(['--host', 'http://es:9200', '--index', 'companies', '--type', 'company',
                       '--type-field', 'doc_type', '--fieldlist', 'name',
                       '--output', str(tmp_path / 'out.csv'), '--progress-type', 'silent'])

        assert status == 0
        expected_query = {
            "bool": {"must": [MATCH_ALL], "filter": [{"terms": {"doc_type": ["company"]}}]}
        }
        client.count.assert_called_once_with(index="companies", query=expected_query)
        assert client.search.call_args.kwargs["query"] == expected_query

    def test_type_field_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv('ES_EXPORT_TYPE_FIELD', 'kind')

        status, factory = run_cli(ClusterSource([[]]), '--index', 'companies', '--fieldlist', 'name',
                                  '--output', str(tmp_path / 'out.csv'))

        assert status == 0
        assert factory.call_args.kwargs["type_field"] == 'kind'

    def test_logging_and_progress_share_console(self, tmp_path, logging_setup):
        with patch("es_export.cli.main.create_progress_callback", return_value=None) as progress_factory:
            run_cli(ClusterSource(), '--index', 'companies', '--fieldlist', 'name',
                    '--output', str(tmp_path / 'out.csv'))

        console = logging_setup.call_args.kwargs["console"]
        assert console is not None
        assert progress_factory.call_args.kwargs["console"] is console
