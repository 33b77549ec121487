"""Query-service client interfaces following Black Box Design principles."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Protocol

from ..accumulator import TableMuxer
from ...config.provider import PixieConfig


@dataclass
class ExecutionStats:
    """Execution statistics reported by a client binding."""
    accepted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    execution_time_ns: int = 0
    records_processed: int = 0
    tables: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        for key in ("accepted_at", "completed_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


class ResultHandle(Protocol):
    """A submitted script whose results have not been streamed yet."""

    async def stream(self) -> None:
        """Drive the muxer callbacks until every table is done."""
        ...

    def stats(self) -> Any:
        """Opaque execution statistics, valid after stream() returns."""
        ...

    async def close(self) -> None:
        """Release the underlying stream."""
        ...


class QuerySession(Protocol):
    """Authenticated handle to one cluster."""

    async def execute_script(self, script: str, muxer: TableMuxer) -> ResultHandle:
        """
        Submit a script for execution.

        Args:
            script: PxL source
            muxer: Sink that receives every table the script produces

        Returns:
            Handle used to stream the results
        """
        ...


class QueryServiceClient(Protocol):
    """Protocol for remote query-service clients."""

    async def create_session(self, cluster_id: str) -> QuerySession:
        """Open a session on the given cluster."""
        ...


ClientFactory = Callable[[PixieConfig], QueryServiceClient]
