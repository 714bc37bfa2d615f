"""
Project graph facade.

One method per public operation, each run under a re-entrant lock, plus
execute() which wraps any operation in the uniform success/failure shape
used by the command surfaces.
"""

import inspect
import logging
import threading
from datetime import date
from typing import Any, Callable

from . import analytics
from .config import GraphConfig
from .core import (
    DEFAULT_DEPENDENCY_DEPTH,
    DEFAULT_RELATED_DEPTH,
    Entity,
    Relation,
    KnowledgeGraph,
    ObservationDeletion,
    GraphPersistence,
    SessionPersistence,
    KGError,
    ValidationError,
)
from .graph import GraphStore, StatusIndex
from .session import FileSessionStore, SessionStore, SessionWorkflow

logger = logging.getLogger(__name__)

OPERATIONS = (
    # Store
    "read_graph",
    "search_nodes",
    "open_nodes",
    "create_entities",
    "create_relations",
    "add_observations",
    "delete_entities",
    "delete_observations",
    "delete_relations",
    # Status/priority
    "get_entity_status",
    "get_entity_priority",
    "set_entity_status",
    "set_entity_priority",
    # Analytics
    "get_project_overview",
    "get_task_dependencies",
    "get_team_member_assignments",
    "get_milestone_progress",
    "get_project_timeline",
    "get_resource_allocation",
    "get_project_risks",
    "find_related_projects",
    "get_decision_log",
    "get_project_health",
    # Sessions
    "start_session",
    "load_context",
    "submit_stage",
)


class ProjectGraphManager:
    """Thread-safe entry point to the graph engine."""

    def __init__(self, store: GraphStore, sessions: SessionStore,
                 today: Callable[[], date] = date.today):
        self.store = store
        self.status_index = StatusIndex(store)
        self.sessions = sessions
        self.today = today
        self.workflow = SessionWorkflow(store, self.status_index, sessions, today)

        # Thread safety
        self.lock = threading.RLock()

        with self.lock:
            self.status_index.initialize_status_and_priority()

        logger.info("Project graph initialized")

    @classmethod
    def from_config(cls, config: GraphConfig) -> "ProjectGraphManager":
        store = GraphStore(GraphPersistence(
            config.memory_path, config.backup_count, config.backup_interval
        ))
        sessions = FileSessionStore(SessionPersistence(
            config.sessions_path, config.backup_count, config.backup_interval
        ))
        logger.info(f"Graph file: {config.memory_path}, sessions file: {config.sessions_path}")
        return cls(store, sessions)

    # ========================================================================
    # Uniform Dispatch
    # ========================================================================

    def execute(self, operation: str, params: dict | None = None) -> dict:
        """
        Run an operation by name.
        Returns {"success": True, "result": ...} or {"success": False, "error": msg}.
        """
        try:
            if operation not in OPERATIONS:
                raise ValidationError(f"Unknown operation: {operation}")
            method = getattr(self, operation)
            try:
                bound = inspect.signature(method).bind(**(params or {}))
            except TypeError as e:
                raise ValidationError(f"Invalid parameters for {operation}: {e}") from e
            return {"success": True, "result": method(*bound.args, **bound.kwargs)}

        except KGError as e:
            logger.warning(f"KG error in {operation}: {e}")
            return {"success": False, "error": str(e)}

        except Exception as e:
            logger.error(f"Unexpected error in {operation}: {e}", exc_info=True)
            return {"success": False, "error": f"Internal error: {str(e)}"}

    # ========================================================================
    # Store
    # ========================================================================

    def read_graph(self) -> KnowledgeGraph:
        with self.lock:
            return self.store.read_graph()

    def search_nodes(self, query: str) -> KnowledgeGraph:
        with self.lock:
            return self.store.search_nodes(query)

    def open_nodes(self, names: list[str]) -> KnowledgeGraph:
        with self.lock:
            return self.store.open_nodes(names)

    def create_entities(self, entities: list[Entity]) -> list[Entity]:
        with self.lock:
            return self.store.create_entities(entities)

    def create_relations(self, relations: list[Relation]) -> list[Relation]:
        with self.lock:
            return self.store.create_relations(relations)

    def add_observations(self, entity_name: str, observations: list[str]) -> Entity:
        with self.lock:
            return self.store.add_observations(entity_name, observations)

    def delete_entities(self, entity_names: list[str]) -> dict:
        with self.lock:
            return self.store.delete_entities(entity_names)

    def delete_observations(self, deletions: list[ObservationDeletion]) -> int:
        with self.lock:
            return self.store.delete_observations(deletions)

    def delete_relations(self, relations: list[Relation]) -> int:
        with self.lock:
            return self.store.delete_relations(relations)

    # ========================================================================
    # Status/Priority
    # ========================================================================

    def get_entity_status(self, entity_name: str) -> str | None:
        with self.lock:
            return self.status_index.get_entity_status(entity_name)

    def get_entity_priority(self, entity_name: str) -> str | None:
        with self.lock:
            return self.status_index.get_entity_priority(entity_name)

    def set_entity_status(self, entity_name: str, status: str) -> None:
        with self.lock:
            self.status_index.set_entity_status(entity_name, status)

    def set_entity_priority(self, entity_name: str, priority: str) -> None:
        with self.lock:
            self.status_index.set_entity_priority(entity_name, priority)

    # ========================================================================
    # Analytics
    # ========================================================================

    def get_project_overview(self, project_name: str) -> dict:
        with self.lock:
            return analytics.get_project_overview(self.store.snapshot(), project_name, self.today())

    def get_task_dependencies(self, task_name: str, depth: int = DEFAULT_DEPENDENCY_DEPTH) -> dict:
        with self.lock:
            return analytics.get_task_dependencies(self.store.snapshot(), task_name, depth)

    def get_team_member_assignments(self, team_member_name: str) -> dict:
        with self.lock:
            return analytics.get_team_member_assignments(
                self.store.snapshot(), team_member_name, self.today()
            )

    def get_milestone_progress(self, project_name: str, milestone_name: str | None = None) -> dict:
        with self.lock:
            return analytics.get_milestone_progress(
                self.store.snapshot(), project_name, self.today(), milestone_name
            )

    def get_project_timeline(self, project_name: str) -> dict:
        with self.lock:
            return analytics.get_project_timeline(self.store.snapshot(), project_name, self.today())

    def get_resource_allocation(self, project_name: str, resource_name: str | None = None) -> dict:
        with self.lock:
            return analytics.get_resource_allocation(self.store.snapshot(), project_name, resource_name)

    def get_project_risks(self, project_name: str) -> dict:
        with self.lock:
            return analytics.get_project_risks(self.store.snapshot(), project_name)

    def find_related_projects(self, project_name: str, depth: int = DEFAULT_RELATED_DEPTH) -> dict:
        with self.lock:
            return analytics.find_related_projects(self.store.snapshot(), project_name, depth)

    def get_decision_log(self, project_name: str) -> dict:
        with self.lock:
            return analytics.get_decision_log(self.store.snapshot(), project_name)

    def get_project_health(self, project_name: str) -> dict:
        with self.lock:
            return analytics.get_project_health(self.store.snapshot(), project_name, self.today())

    # ========================================================================
    # Sessions
    # ========================================================================

    def start_session(self) -> dict:
        with self.lock:
            return self.workflow.start_session()

    def load_context(self, entity_name: str, entity_type: str = "project",
                     session_id: str | None = None) -> dict:
        with self.lock:
            return self.workflow.load_context(entity_name, entity_type, session_id)

    def submit_stage(self, session_id: str, stage: str, stage_number: int,
                     analysis: str | None = None, stage_data: dict[str, Any] | None = None,
                     next_stage_needed: bool = True, is_revision: bool = False,
                     revises_stage: int | None = None) -> dict:
        with self.lock:
            return self.workflow.submit_stage(
                session_id, stage, stage_number, analysis, stage_data,
                next_stage_needed, is_revision, revises_stage,
            )
