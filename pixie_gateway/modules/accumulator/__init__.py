"""
Accumulator Module - Black Box Interface

Purpose: Turn streamed table metadata and records into a flat result
Interface: ResultAccumulator, Record, AccumulatedResult, metadata variants
Hidden: Column discovery heuristics, cell formatting

Any client binding that drives the TableMuxer protocol can feed it.
"""

from .accumulator import (
    AccumulatedResult,
    Record,
    ResultAccumulator,
    TableMuxer,
    TableRecordHandler,
    format_cell,
)
from .metadata import ColumnNames, FieldDescriptor, FieldDescriptors, derive_columns

__all__ = [
    "AccumulatedResult",
    "ColumnNames",
    "FieldDescriptor",
    "FieldDescriptors",
    "Record",
    "ResultAccumulator",
    "TableMuxer",
    "TableRecordHandler",
    "derive_columns",
    "format_cell",
]
