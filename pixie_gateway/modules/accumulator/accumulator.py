"""
Result accumulator: the streaming sink for query results.

The client binding drives the sink in two phases for every table the
script produces:

    handler = muxer.accept_table(metadata)
    handler.handle_init(metadata)
    handler.handle_record(record)   # once per row, in delivery order
    handler.handle_done()

The accumulator is its own record handler and keeps a single flat
columns/rows result.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .metadata import TableMetadata, derive_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Record:
    """One row of typed cells, in column order."""

    values: Sequence[Any]


@dataclass
class AccumulatedResult:
    """Flat tabular result of a query."""

    columns: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"columns": self.columns, "rows": self.rows}


class TableRecordHandler(Protocol):
    """Receives the records of one table."""

    def handle_init(self, metadata: TableMetadata) -> None:
        ...

    def handle_record(self, record: Record) -> None:
        ...

    def handle_done(self) -> None:
        ...


class TableMuxer(Protocol):
    """Hands out a record handler for each table of a script."""

    def accept_table(self, metadata: TableMetadata) -> TableRecordHandler:
        ...


def format_cell(value: Any) -> str:
    """Render a cell using the natural text form of its type."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class ResultAccumulator:
    """
    Collects streamed tables into an AccumulatedResult.

    Columns are taken from the first table's metadata only. Rows are
    appended as they arrive; their length is not checked against the
    column count.

    Not thread-safe. Each request owns its own accumulator.
    """

    def __init__(self):
        self.result = AccumulatedResult()
        self.tables_accepted = 0
        self.done = False
        self._columns_derived = False

    @property
    def columns(self) -> List[str]:
        return self.result.columns

    @property
    def rows(self) -> List[List[str]]:
        return self.result.rows

    def accept_table(self, metadata: TableMetadata) -> TableRecordHandler:
        """Derive columns on the first table and return the record handler."""
        self.tables_accepted += 1
        if not self._columns_derived:
            self.result.columns = derive_columns(metadata)
            self._columns_derived = True
            logger.debug("Accepted table with %d columns", len(self.result.columns))
        else:
            logger.debug("Accepted additional table #%d; keeping first table's columns", self.tables_accepted)
        return self

    def handle_init(self, metadata: TableMetadata) -> None:
        # Columns are derived in accept_table
        return None

    def handle_record(self, record: Record) -> None:
        self.result.rows.append([format_cell(v) for v in record.values])

    def handle_done(self) -> None:
        self.done = True

    @staticmethod
    def describe(result: AccumulatedResult) -> Optional[str]:
        """Summarise column/row width mismatches for logging, if any."""
        width = len(result.columns)
        mismatched = sum(1 for row in result.rows if len(row) != width)
        if not mismatched:
            return None
        return f"{mismatched} of {len(result.rows)} rows do not match {width} columns"
