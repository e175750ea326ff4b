"""
Elasticsearch Source Adapter

Implements the source port on top of the official Elasticsearch client:
count queries, scroll cursors and the existence checks used by the CLI.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from elasticsearch import Elasticsearch, NotFoundError

from ...core.exceptions import EndOfStream, ErrorTranslator, SourceError
from ...core.ports import Hit

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://127.0.0.1:9200"
MATCH_ALL = {"match_all": {}}


def _body(response: Any) -> Dict[str, Any]:
    """Unwrap a client response into its JSON body"""
    return getattr(response, "body", response)


def create_elasticsearch_client(
    host: str = DEFAULT_HOST,
    api_key: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    timeout: int = 30,
    verify_certs: bool = True
) -> Elasticsearch:
    """
    Create a client for a single cluster address.

    Args:
        host: Cluster URL
        api_key: Encoded API key (takes precedence over basic auth)
        username: Basic auth user
        password: Basic auth password
        timeout: Request timeout in seconds
        verify_certs: Verify TLS certificates

    Returns:
        Configured Elasticsearch client (sniffing disabled)
    """
    kwargs: Dict[str, Any] = {
        "request_timeout": timeout,
        "verify_certs": verify_certs,
    }
    if api_key:
        kwargs["api_key"] = api_key
    elif username:
        kwargs["basic_auth"] = (username, password or "")

    return Elasticsearch(host, **kwargs)


class ElasticsearchScrollCursor:
    """Scroll cursor over one search; the first page is fetched on open"""

    def __init__(self, client: Elasticsearch, index: str, scroll: str, first_response: Dict[str, Any]):
        self.client = client
        self.index = index
        self.scroll = scroll
        self.scroll_id: Optional[str] = None
        self.closed = False
        self._exhausted = False
        self._buffered: Optional[List[Hit]] = self._consume(first_response)

    def _consume(self, response: Dict[str, Any]) -> List[Hit]:
        body = _body(response)
        self.scroll_id = body.get("_scroll_id") or self.scroll_id
        return body["hits"]["hits"]

    def next_page(self) -> List[Hit]:
        """Return the next non-empty page of hits or raise EndOfStream"""
        if self._exhausted or self.closed:
            raise EndOfStream()

        if self._buffered is not None:
            hits, self._buffered = self._buffered, None
        else:
            try:
                response = self.client.scroll(scroll_id=self.scroll_id, scroll=self.scroll)
            except Exception as e:
                raise ErrorTranslator.translate_source_error(e, "Scroll", self.index) from e
            hits = self._consume(response)

        if not hits:
            self._exhausted = True
            raise EndOfStream()
        return hits

    def close(self) -> None:
        """Clear the scroll context on the cluster"""
        if self.closed:
            return
        self.closed = True

        if not self.scroll_id:
            return
        try:
            self.client.clear_scroll(scroll_id=self.scroll_id)
        except NotFoundError:
            logger.debug("Scroll context on <%s> already expired", self.index)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ElasticsearchSource:
    """Source port implementation backed by an Elasticsearch cluster"""

    def __init__(self, client: Elasticsearch, type_field: str = "_type"):
        """
        Args:
            client: Connected Elasticsearch client
            type_field: Document field the type restriction filters on
        """
        self.client = client
        self.type_field = type_field

    def build_query(self, types: Sequence[str], query: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Combine the filter predicate with the optional type restriction"""
        base = query or MATCH_ALL
        if not types:
            return base

        return {
            "bool": {
                "must": [base],
                "filter": [{"terms": {self.type_field: list(types)}}]
            }
        }

    def count(self, index: str, types: Sequence[str], query: Optional[Dict[str, Any]]) -> int:
        try:
            response = self.client.count(index=index, query=self.build_query(types, query))
        except Exception as e:
            raise ErrorTranslator.translate_source_error(e, "Count", index) from e
        return int(_body(response)["count"])

    def open_cursor(
        self,
        index: str,
        types: Sequence[str],
        query: Optional[Dict[str, Any]],
        fields: Sequence[str],
        page_size: Optional[int],
        scroll: str
    ) -> ElasticsearchScrollCursor:
        search_kwargs: Dict[str, Any] = {
            "index": index,
            "scroll": scroll,
            "query": self.build_query(types, query),
            "fields": list(fields),
            "source": False,
        }
        if page_size:
            search_kwargs["size"] = page_size

        logger.debug("Opening scroll on <%s> keep-alive=%s size=%s", index, scroll, page_size)
        try:
            response = self.client.search(**search_kwargs)
        except Exception as e:
            raise ErrorTranslator.translate_source_error(e, "Search", index) from e

        return ElasticsearchScrollCursor(self.client, index, scroll, response)

    def index_exists(self, index: str) -> bool:
        """Check whether an index or alias exists"""
        try:
            return bool(self.client.indices.exists(index=index))
        except Exception as e:
            raise ErrorTranslator.translate_source_error(e, "Index check", index) from e

    def type_exists(self, index: str, doc_type: str) -> bool:
        """Check whether any document of the given type exists in the index"""
        return self.count(index, [doc_type], None) > 0

    def server_version(self) -> str:
        try:
            info = _body(self.client.info())
        except Exception as e:
            raise ErrorTranslator.translate_source_error(e, "Connect") from e
        return info["version"]["number"]

    def close(self) -> None:
        """Close the client's connection pool"""
        self.client.close()


def create_elasticsearch_source(server_config: Dict[str, Any], type_field: str = "_type") -> ElasticsearchSource:
    """
    Factory function to create a source from server configuration.

    Args:
        server_config: Dictionary as returned by ConfigurationPort.get_server_config()
        type_field: Document field used for type restrictions

    Returns:
        ElasticsearchSource wrapping a new client

    Raises:
        SourceError: If no address is configured or the client rejects it
    """
    if not server_config.get("host"):
        raise SourceError("No cluster address configured")

    try:
        client = create_elasticsearch_client(
            host=server_config["host"],
            api_key=server_config.get("api_key"),
            username=server_config.get("username"),
            password=server_config.get("password"),
            timeout=server_config.get("timeout", 30),
            verify_certs=server_config.get("verify_certs", True),
        )
    except Exception as e:
        # The client rejects malformed addresses (e.g. no scheme) on construction
        raise ErrorTranslator.translate_source_error(e, f"Connect to <{server_config['host']}>") from e
    return ElasticsearchSource(client, type_field=type_field)
