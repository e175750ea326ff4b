"""
Infrastructure adapters

Concrete implementations of the core ports: the Elasticsearch source,
delimited row sinks, progress reporting and environment configuration.
"""
