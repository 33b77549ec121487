"""
Query service: runs one PxL script end to end.

Loads the Pixie config, opens a cluster session, executes the script
with a fresh ResultAccumulator as its sink and returns the flattened
result with the client's execution stats. Every failure is raised as a
GatewayError; no partial result is ever returned.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict

from ..accumulator import AccumulatedResult, ResultAccumulator
from ...config.provider import PixieConfigProvider
from .client import ClientFactory, QuerySession, ResultHandle
from .errors import (
    ConfigError,
    GatewayError,
    QueryTimeoutError,
    RequestError,
    classify_error,
)

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Accumulated rows plus the opaque execution stats."""

    result: AccumulatedResult
    stats: Any = None

    def to_dict(self) -> Dict[str, Any]:
        stats = self.stats.to_dict() if hasattr(self.stats, "to_dict") else self.stats
        return {"columns": self.result.columns, "rows": self.result.rows, "stats": stats}


class QueryService:
    """Orchestrates config, session and streaming for a single script."""

    def __init__(
        self,
        config_provider: PixieConfigProvider,
        client_factory: ClientFactory,
        session_timeout: float = 60,
        execution_timeout: float = 60,
    ):
        """
        Initialize query service.

        Args:
            config_provider: Source of Pixie credentials, read per run
            client_factory: Builds a query-service client from credentials
            session_timeout: Seconds allowed to open the cluster session
            execution_timeout: Seconds allowed to stream the results
        """
        self.config_provider = config_provider
        self.client_factory = client_factory
        self.session_timeout = session_timeout
        self.execution_timeout = execution_timeout

    async def run(self, script: str) -> QueryResult:
        """
        Execute a script and collect its results.

        Raises:
            GatewayError: One of the taxonomy subclasses on any failure
        """
        if not script or not script.strip():
            raise RequestError("script must not be empty")

        try:
            config = self.config_provider.load()
        except ValueError as e:
            logger.error(f"Failed to load config: {e}")
            raise ConfigError("Failed to load configuration", e) from e

        cluster_id = config.px_cluster_id
        logger.info("Checking Pixie API credentials...")
        logger.info(f"API key provided (length: {len(config.px_api_key)})")
        logger.info(f"Cluster ID provided: {cluster_id}")

        try:
            client = self.client_factory(config)
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"ERROR creating Pixie API client: {e}")
            raise classify_error(e, "client", cluster_id) from e
        logger.info("Pixie API client created successfully")

        session = await self._open_session(client, cluster_id)

        accumulator = ResultAccumulator()
        try:
            handle = await session.execute_script(script, accumulator)
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"ERROR submitting PxL script: {e}")
            raise classify_error(e, "submit", cluster_id) from e

        try:
            await self._stream(handle)
        finally:
            await handle.close()

        mismatch = ResultAccumulator.describe(accumulator.result)
        if mismatch:
            logger.warning(f"Row width mismatch: {mismatch}")

        logger.info(
            f"Streamed {len(accumulator.rows)} rows across {accumulator.tables_accepted} table(s)"
        )
        return QueryResult(result=accumulator.result, stats=handle.stats())

    async def _open_session(self, client, cluster_id: str) -> QuerySession:
        logger.info(f"Creating Vizier client for cluster: {cluster_id}")
        start = time.monotonic()
        try:
            session = await asyncio.wait_for(
                client.create_session(cluster_id), timeout=self.session_timeout
            )
        except asyncio.TimeoutError as e:
            logger.error("ERROR: Timeout connecting to cluster")
            raise QueryTimeoutError("Timeout connecting to cluster", e) from e
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"ERROR creating Vizier client: {e}")
            raise classify_error(e, "session", cluster_id) from e
        finally:
            logger.info(f"Vizier client creation took {time.monotonic() - start:.3f}s")

        logger.info(f"Successfully connected to Vizier cluster: {cluster_id}")
        return session

    async def _stream(self, handle: ResultHandle) -> None:
        logger.info("Attempting to stream results from PxL script...")
        try:
            await asyncio.wait_for(handle.stream(), timeout=self.execution_timeout)
        except asyncio.TimeoutError as e:
            logger.error("ERROR: Timeout executing PxL script")
            raise QueryTimeoutError("Timeout executing PxL script", e) from e
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"ERROR streaming results: {e}")
            raise classify_error(e, "stream") from e
        logger.info("Successfully streamed results from PxL script")
