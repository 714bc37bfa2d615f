"""File-backed project-management knowledge graph."""

__version__ = "0.1.0"

from .config import GraphConfig, configure_logging
from .manager import OPERATIONS, ProjectGraphManager

__all__ = [
    "__version__",
    "GraphConfig",
    "configure_logging",
    "OPERATIONS",
    "ProjectGraphManager",
]
