"""
Pixie binding for the query-service client protocol.

Wraps the pxapi SDK: a pxapi.Client per request, connect_to_cluster()
for the session, and prepare_script() / subscribe_all_tables() /
run_async() to stream every table the script produces into a
TableMuxer.

pxapi is installed through the "pixie" extra and imported when a
client is built, so the rest of the gateway does not depend on it.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any, List, Optional, Tuple

from ..accumulator import FieldDescriptor, FieldDescriptors, Record, TableMuxer
from ...config.provider import PixieConfig
from .client import ExecutionStats
from .errors import CompilationError

logger = logging.getLogger(__name__)


def relation_to_metadata(relation: Any, table_name: Optional[str] = None) -> FieldDescriptors:
    """Adapt a pxapi Relation to the FieldDescriptors variant."""
    fields = []
    for idx in range(relation.num_cols()):
        col_type = relation.get_col_type(idx)
        fields.append(
            FieldDescriptor(
                name=relation.get_col_name(idx),
                data_type=getattr(col_type, "name", None) or str(col_type),
            )
        )
    return FieldDescriptors(fields=fields, table_name=table_name)


def row_to_record(row: Any, num_cols: int) -> Record:
    """Read the cells of a pxapi Row in column order."""
    return Record(values=[row[idx] for idx in range(num_cols)])


async def _cancel_pending(tasks) -> None:
    """Cancel the tasks that are still running and wait for them to finish."""
    pending = [t for t in tasks if not t.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


class PixieResultHandle:
    """Streams the tables of one prepared pxapi script."""

    def __init__(self, script: Any, muxer: TableMuxer, compile_errors: Tuple[type, ...] = ()):
        self._script = script
        self._muxer = muxer
        self._compile_errors = compile_errors
        self._stats = ExecutionStats()

    async def stream(self) -> None:
        self._stats.accepted_at = datetime.now(UTC)
        tables = self._script.subscribe_all_tables()
        consumers: List[asyncio.Task] = []

        async def consume_all():
            async for table_sub in tables():
                consumers.append(asyncio.create_task(self._consume(table_sub)))
            if consumers:
                await asyncio.gather(*consumers)

        runner = asyncio.create_task(self._script.run_async())
        collector = asyncio.create_task(consume_all())
        try:
            await asyncio.gather(runner, collector)
        except Exception as e:
            if self._compile_errors and isinstance(e, self._compile_errors):
                raise CompilationError(f"PxL compilation error: {e}", e) from e
            raise
        finally:
            # Nothing may keep writing into the muxer once stream() returns
            await _cancel_pending([runner, collector])
            await _cancel_pending(consumers)
            self._stats.completed_at = datetime.now(UTC)
            elapsed = self._stats.completed_at - self._stats.accepted_at
            self._stats.execution_time_ns = int(elapsed.total_seconds() * 1_000_000_000)

    async def _consume(self, table_sub: Any) -> None:
        table_name = getattr(table_sub, "table_name", None)
        handler = None
        num_cols = 0
        async for row in table_sub:
            if handler is None:
                metadata = relation_to_metadata(row.relation, table_name)
                num_cols = len(metadata.fields)
                handler = self._muxer.accept_table(metadata)
                handler.handle_init(metadata)
                self._stats.tables += 1
                logger.debug(f"Streaming table {table_name} ({num_cols} columns)")
            handler.handle_record(row_to_record(row, num_cols))
            self._stats.records_processed += 1
        if handler is not None:
            handler.handle_done()

    def stats(self) -> ExecutionStats:
        return self._stats

    async def close(self) -> None:
        # pxapi releases the stream when run_async returns
        return None


class PixieSession:
    """Connection to one Vizier cluster."""

    def __init__(self, conn: Any, compile_errors: Tuple[type, ...] = ()):
        self._conn = conn
        self._compile_errors = compile_errors

    async def execute_script(self, script: str, muxer: TableMuxer) -> PixieResultHandle:
        prepared = self._conn.prepare_script(script)
        return PixieResultHandle(prepared, muxer, self._compile_errors)


class PixieClient:
    """QueryServiceClient backed by pxapi.Client."""

    def __init__(
        self,
        config: PixieConfig,
        use_encryption: bool = True,
        client: Any = None,
        compile_errors: Tuple[type, ...] = (),
    ):
        """
        Initialize Pixie client.

        Args:
            config: Credentials and cloud address
            use_encryption: Request end-to-end encrypted results
            client: Pre-built pxapi.Client-compatible object (tests)
            compile_errors: Exception types reported as CompilationError.
                Resolved to pxapi's PxLError when the client is built here.
        """
        self.config = config
        if client is None:
            import pxapi
            from pxapi.errors import PxLError

            client = pxapi.Client(
                token=config.px_api_key,
                server_url=config.cloud_addr,
                use_encryption=use_encryption,
            )
            compile_errors = compile_errors or (PxLError,)
        self._client = client
        self._compile_errors = compile_errors

    async def create_session(self, cluster_id: str) -> PixieSession:
        # connect_to_cluster blocks on the token exchange
        conn = await asyncio.to_thread(self._client.connect_to_cluster, cluster_id)
        return PixieSession(conn, self._compile_errors)


def pixie_client_factory(use_encryption: bool = True):
    """Return a ClientFactory that builds PixieClients."""

    def factory(config: PixieConfig) -> PixieClient:
        logger.info(f"Creating Pixie API client for {config.cloud_addr} (encryption: {use_encryption})")
        return PixieClient(config, use_encryption=use_encryption)

    return factory


__all__ = [
    "PixieClient",
    "PixieResultHandle",
    "PixieSession",
    "pixie_client_factory",
    "relation_to_metadata",
    "row_to_record",
]
