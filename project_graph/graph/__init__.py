"""Graph store, read snapshots and the status/priority index."""

from .store import GraphStore
from .snapshot import GraphSnapshot
from .status_index import StatusIndex, StatusTable, synthetic_name, synthetic_value

__all__ = [
    "GraphStore",
    "GraphSnapshot",
    "StatusIndex",
    "StatusTable",
    "synthetic_name",
    "synthetic_value",
]
