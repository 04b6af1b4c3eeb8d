"""
Shared pytest fixtures and configuration for sequelorm tests.

This module provides:
- Registry cleanup fixtures for test isolation (data types, tables,
  models, the connection manager and the event bus)
- A recording connector for statement-level assertions
- An in-memory SQLite connector for end-to-end tests
"""

import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure sequelorm package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sequelorm.adapters import SQLiteConnector
from sequelorm.core.events import set_event_bus
from sequelorm.orm import (
    INT,
    VARCHAR,
    clear_table_definitions,
    define_model,
    reset_connection_manager,
    reset_data_types,
    set_connector,
)

from tests._support.recording import RecordingConnector, RecordingEventBus


# =============================================================================
# Registry Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_registries() -> Generator[None, None, None]:
    """
    Reset every process-wide singleton before and after each test.

    No test can affect another by leaving types, tables, models, a
    connector or event subscribers behind.
    """
    reset_data_types()
    clear_table_definitions()
    reset_connection_manager()
    set_event_bus(None)
    yield
    reset_data_types()
    clear_table_definitions()
    reset_connection_manager()
    set_event_bus(None)


# =============================================================================
# Connectors
# =============================================================================


@pytest.fixture
def recording_connector() -> RecordingConnector:
    """Fake connector installed on the connection manager."""
    connector = RecordingConnector()
    set_connector(connector)
    return connector


@pytest.fixture
def sqlite_connector() -> Generator[SQLiteConnector, None, None]:
    """In-memory SQLite connector installed on the connection manager."""
    connector = SQLiteConnector()
    set_connector(connector)
    yield connector
    connector.disconnect()


@pytest.fixture
def event_bus() -> RecordingEventBus:
    """Event bus that records every diagnostic event."""
    bus = RecordingEventBus()
    set_event_bus(bus)
    return bus


# =============================================================================
# Sample Models
# =============================================================================


@pytest.fixture
def item_model():
    """``Item{name: VARCHAR, price: INT}`` with timestamps."""
    return define_model("Item", {"name": VARCHAR(), "price": INT()}, timestamps=True)
