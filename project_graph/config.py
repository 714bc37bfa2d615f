"""Configuration from environment variables."""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from .core import MAX_RECENT_BACKUPS, BACKUP_INTERVAL_SECONDS

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass(frozen=True)
class GraphConfig:
    """Project graph configuration."""
    memory_path: Path = Path("memory.json")
    sessions_path: Path = Path("sessions.json")
    log_level: str = "INFO"
    backup_count: int = MAX_RECENT_BACKUPS
    backup_interval: int = BACKUP_INTERVAL_SECONDS
    http_host: str = "127.0.0.1"
    http_port: int = 8765

    @classmethod
    def from_env(cls) -> "GraphConfig":
        """Create configuration from environment variables. Relative paths resolve against the cwd."""
        return cls(
            memory_path=Path(os.getenv("MEMORY_FILE_PATH", "memory.json")).resolve(),
            sessions_path=Path(os.getenv("SESSIONS_FILE_PATH", "sessions.json")).resolve(),
            log_level=os.getenv("KG_LOG_LEVEL", "INFO").upper(),
            backup_count=int(os.getenv("KG_BACKUP_COUNT", str(MAX_RECENT_BACKUPS))),
            backup_interval=int(os.getenv("KG_BACKUP_INTERVAL", str(BACKUP_INTERVAL_SECONDS))),
            http_host=os.getenv("KG_HTTP_HOST", "127.0.0.1"),
            http_port=int(os.getenv("KG_HTTP_PORT", "8765")),
        )


def configure_logging(level: str) -> None:
    """Log to stderr; stdout belongs to the MCP protocol."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr
    )
