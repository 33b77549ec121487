"""
Shared pytest fixtures for Pixie Gateway tests.

This module provides:
- FakeQueryClient: in-memory QueryServiceClient that streams canned tables
- Config fixtures writing Pixie config files to a temp directory
- A QueryService wired to the fakes
"""

import asyncio
import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, List, Optional

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pixie_gateway.config.provider import FilePixieConfigProvider, PixieConfig
from pixie_gateway.modules.accumulator import ColumnNames, Record
from pixie_gateway.modules.query import ExecutionStats, QueryService


# =============================================================================
# Fake Query-Service Client
# =============================================================================

@dataclass
class FakeTable:
    """A table the fake client streams: metadata then rows."""
    metadata: Any
    rows: List[List[Any]] = field(default_factory=list)


class FakeResultHandle:
    """ResultHandle that replays FakeTables into the muxer."""

    def __init__(self, client: "FakeQueryClient", muxer):
        self.client = client
        self.muxer = muxer
        self.closed = False
        self._stats = ExecutionStats()

    async def stream(self) -> None:
        if self.client.stream_delay:
            await asyncio.sleep(self.client.stream_delay)
        for table in self.client.tables:
            handler = self.muxer.accept_table(table.metadata)
            handler.handle_init(table.metadata)
            self._stats.tables += 1
            for row in table.rows:
                handler.handle_record(Record(values=row))
                self._stats.records_processed += 1
            handler.handle_done()
        if self.client.stream_error:
            raise self.client.stream_error

    def stats(self) -> ExecutionStats:
        return self._stats

    async def close(self) -> None:
        self.closed = True


class FakeSession:
    def __init__(self, client: "FakeQueryClient"):
        self.client = client

    async def execute_script(self, script: str, muxer) -> FakeResultHandle:
        self.client.scripts.append(script)
        if self.client.submit_error:
            raise self.client.submit_error
        handle = FakeResultHandle(self.client, muxer)
        self.client.handles.append(handle)
        return handle


class FakeQueryClient:
    """
    QueryServiceClient double.

    Usage:
        def test_something(fake_client, query_service):
            fake_client.tables = [FakeTable(ColumnNames(["a"]), [["1"]])]
            result = await query_service.run("px.display(df)")
    """

    def __init__(self):
        self.tables: List[FakeTable] = []
        self.session_error: Optional[BaseException] = None
        self.submit_error: Optional[BaseException] = None
        self.stream_error: Optional[BaseException] = None
        self.session_delay: float = 0
        self.stream_delay: float = 0
        self.sessions_opened: List[str] = []
        self.scripts: List[str] = []
        self.handles: List[FakeResultHandle] = []
        self.configs: List[PixieConfig] = []

    def factory(self, config: PixieConfig) -> "FakeQueryClient":
        self.configs.append(config)
        return self

    async def create_session(self, cluster_id: str) -> FakeSession:
        if self.session_delay:
            await asyncio.sleep(self.session_delay)
        if self.session_error:
            raise self.session_error
        self.sessions_opened.append(cluster_id)
        return FakeSession(self)


# =============================================================================
# Fixtures
# =============================================================================

VALID_CONFIG = {
    "px_api_key": "px-api-test-key",
    "px_cluster_id": "cluster-1234",
    "cloud_addr": "getcosmic.ai:443",
}

SAMPLE_TABLE = FakeTable(
    metadata=ColumnNames(names=["upid", "req_path"], table_name="http"),
    rows=[["12345", "/api/users"], ["67890", "/login"]],
)


@pytest.fixture
def config_file(tmp_path):
    """Write a valid Pixie config file and return its path."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(VALID_CONFIG), encoding="utf-8")
    return path


@pytest.fixture
def fake_client():
    client = FakeQueryClient()
    client.tables = [SAMPLE_TABLE]
    return client


@pytest.fixture
def query_service(config_file, fake_client):
    """QueryService wired to the fake client and a temp config file."""
    return QueryService(
        config_provider=FilePixieConfigProvider(str(config_file)),
        client_factory=fake_client.factory,
        session_timeout=1,
        execution_timeout=1,
    )


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring a Pixie cluster"
    )
