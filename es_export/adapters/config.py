"""
Configuration adapters for the export tool.

These adapters provide cluster connection settings and export tuning
values read from the environment (and an optional .env file).
"""

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..core.exceptions import ConfigurationError

DEFAULT_HOST = "http://127.0.0.1:9200"
# Mapping-type metadata; clusters from 7.x on need a regular keyword field instead
DEFAULT_TYPE_FIELD = "_type"


def _get_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got: {raw!r}", {"variable": name})


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class EnvironmentConfigAdapter:
    """Configuration adapter that reads from environment variables"""

    def __init__(self, load_env_file: bool = True, env_file: Optional[str] = None):
        if load_env_file:
            load_dotenv(env_file)

    def get_server_config(self) -> Dict[str, Any]:
        """Get cluster connection settings from environment"""
        return {
            'host': os.getenv('ES_EXPORT_HOST', DEFAULT_HOST),
            'api_key': os.getenv('ES_EXPORT_API_KEY') or None,
            'username': os.getenv('ES_EXPORT_USERNAME') or None,
            'password': os.getenv('ES_EXPORT_PASSWORD') or None,
            'timeout': _get_int('ES_EXPORT_TIMEOUT', '30'),
            'verify_certs': _get_bool('ES_EXPORT_VERIFY_CERTS', 'true')
        }

    def get_export_config(self) -> Dict[str, Any]:
        """Get export tuning settings from environment"""
        return {
            'batch_size': _get_int('ES_EXPORT_BATCH_SIZE', '1000'),
            'page_size': _get_int('ES_EXPORT_PAGE_SIZE', '10'),
            'scroll': os.getenv('ES_EXPORT_SCROLL', '5m'),
            'delimiter': os.getenv('ES_EXPORT_DELIMITER', ';'),
            'type_field': os.getenv('ES_EXPORT_TYPE_FIELD', DEFAULT_TYPE_FIELD)
        }
