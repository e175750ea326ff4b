"""
Elasticsearch Export Tool

A hexagonal architecture implementation for exporting search index
documents into delimited text files.
"""

__version__ = "1.0.0"
__description__ = "Export Elasticsearch documents to delimited text files"
