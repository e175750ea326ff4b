"""
Source adapters

Search cluster implementations of the source port.
"""

from .cluster import (
    ElasticsearchSource,
    ElasticsearchScrollCursor,
    create_elasticsearch_client,
    create_elasticsearch_source
)

__all__ = [
    'ElasticsearchSource',
    'ElasticsearchScrollCursor',
    'create_elasticsearch_client',
    'create_elasticsearch_source'
]
