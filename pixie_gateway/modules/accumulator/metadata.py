"""
Table metadata variants and column-name derivation.

Client bindings describe each streamed table with one of the tagged
variants below. Objects that are not one of these variants are probed
for a small set of known attribute or key names.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDescriptor:
    """A single column of a table schema."""

    name: str
    data_type: Optional[str] = None


@dataclass(frozen=True)
class ColumnNames:
    """Schema given as a flat list of column names."""

    names: List[str] = field(default_factory=list)
    table_name: Optional[str] = None


@dataclass(frozen=True)
class FieldDescriptors:
    """Schema given as a list of named field descriptors."""

    fields: List[FieldDescriptor] = field(default_factory=list)
    table_name: Optional[str] = None


TableMetadata = Union[ColumnNames, FieldDescriptors, Any]

# Probe order for opaque metadata objects. Each entry lists the spellings
# accepted for one candidate.
PROBE_CANDIDATES = (
    ("columns", "Columns"),
    ("col_names", "ColNames"),
    ("fields", "Fields"),
    ("schema", "Schema"),
)

_MISSING = object()


def derive_columns(metadata: TableMetadata) -> List[str]:
    """
    Derive the ordered column names of a table.

    Args:
        metadata: A ColumnNames or FieldDescriptors variant, or any
            opaque schema object (mapping or attribute based)

    Returns:
        Column names in schema order, or an empty list when no known
        shape is found. Never raises for unrecognised metadata.
    """
    if isinstance(metadata, ColumnNames):
        return list(metadata.names)
    if isinstance(metadata, FieldDescriptors):
        return [f.name for f in metadata.fields]
    if metadata is None:
        return []

    for spellings in PROBE_CANDIDATES:
        value = _lookup(metadata, spellings)
        if value is _MISSING:
            continue
        names = _names_from_candidate(value)
        if names:
            return names

    logger.debug("No column names found on metadata of type %s", type(metadata).__name__)
    return []


def _lookup(obj: Any, spellings: Sequence[str]) -> Any:
    """Read the first spelling present on obj, as a key or an attribute."""
    for name in spellings:
        if isinstance(obj, Mapping):
            if name in obj:
                return obj[name]
            continue
        try:
            return getattr(obj, name)
        except AttributeError:
            continue
        except Exception as e:  # noqa: BLE001 - foreign objects may raise anything from properties
            logger.debug("Probing %r on metadata failed: %s", name, e)
            continue
    return _MISSING


def _names_from_candidate(value: Any) -> List[str]:
    # Any non-text, non-mapping iterable counts as a column list
    if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(value, Iterable):
        return []
    try:
        items = list(value)
    except Exception as e:  # noqa: BLE001 - foreign containers may raise anything while iterating
        logger.debug("Iterating column candidate %s failed: %s", type(value).__name__, e)
        return []
    if items and all(isinstance(item, str) for item in items):
        return items

    names = []
    for item in items:
        name = _lookup(item, ("name", "Name", "column_name"))
        if isinstance(name, str):
            names.append(name)
    return names
