"""Session workflow, stage models and session stores."""

from .models import (
    AssemblyData,
    ContextLoaded,
    SessionCompleted,
    StageRecord,
    SessionRecord,
    STAGE_MODELS,
    build_stage,
    parse_record,
)
from .store import SessionStore, FileSessionStore, InMemorySessionStore
from .workflow import SessionWorkflow, normalize_status, summary_message

__all__ = [
    "AssemblyData",
    "ContextLoaded",
    "SessionCompleted",
    "StageRecord",
    "SessionRecord",
    "STAGE_MODELS",
    "build_stage",
    "parse_record",
    "SessionStore",
    "FileSessionStore",
    "InMemorySessionStore",
    "SessionWorkflow",
    "normalize_status",
    "summary_message",
]
