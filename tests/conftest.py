"""
Shared pytest configuration and fixtures for the export test suite.

This file provides common fixtures over the in-memory fakes in
tests/fixtures/test_helpers.py, used across all test types.
"""

import pytest
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from es_export.core.domain import ExportConfiguration
from tests.fixtures.test_helpers import FakeSource, RecordingSink, make_hit


# Fake adapter fixtures
@pytest.fixture
def hit_factory():
    """Factory for search hits."""
    return make_hit


@pytest.fixture
def fake_source_factory():
    """Factory for in-memory sources."""
    return FakeSource


@pytest.fixture
def recording_sink():
    """Sink that records rows and flushes."""
    return RecordingSink()


@pytest.fixture
def sample_pages():
    """Three documents split over two scroll pages."""
    return [
        [
            make_hit("1", name=["ACME"], active=[True]),
            make_hit("2", name=["Globex", "Globex Corp"], revenue=[1500.5]),
        ],
        [
            make_hit("3", active=[False]),
        ],
    ]


@pytest.fixture
def sample_export_configuration(sample_pages, recording_sink):
    """Standard export configuration over the sample pages."""
    return ExportConfiguration(
        source=FakeSource(sample_pages),
        index="companies",
        fields=("name", "active", "revenue"),
        sink=recording_sink
    )


# Pytest Configuration Hooks
def pytest_configure(config):
    """Configure pytest with custom settings."""
    markers = [
        "unit: Unit tests (fast, isolated)",
        "integration: Integration tests (slower, multiple components)",
        "contract: Port contract compliance tests",
        "architecture: Architecture validation tests",
    ]

    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Auto-mark tests based on file path
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "contract" in path:
            item.add_marker(pytest.mark.contract)
        elif "architecture" in path:
            item.add_marker(pytest.mark.architecture)
