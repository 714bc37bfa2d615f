"""FastAPI HTTP server for the project graph."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from . import __version__
from .config import GraphConfig, configure_logging
from .core import ConflictError, KGError, NotFoundError, ValidationError
from .manager import OPERATIONS, ProjectGraphManager

logger = logging.getLogger(__name__)


# ============================================================================
# Request/Response Models
# ============================================================================

class EntityModel(BaseModel):
    """An entity to create."""
    name: str = Field(..., description="Unique entity name")
    entity_type: str = Field(..., alias="entityType", description="One of the entity types")
    observations: list[str] = Field(default_factory=list, description="Free-text facts")
    embedding: list[float] | None = Field(None, description="Optional vector embedding")


class RelationModel(BaseModel):
    """A directed relation triple."""
    from_: str = Field(..., alias="from", description="Source entity name")
    to: str = Field(..., description="Target entity name")
    relation_type: str = Field(..., alias="relationType", description="One of the relation types")


class EntitiesRequest(BaseModel):
    entities: list[EntityModel]


class RelationsRequest(BaseModel):
    relations: list[RelationModel]


class ObservationsRequest(BaseModel):
    """Observations to append to one entity."""
    entity_name: str = Field(..., alias="entityName")
    contents: list[str] = Field(..., description="Observation strings")


class ObservationDeletionModel(BaseModel):
    entity_name: str = Field(..., alias="entityName")
    observations: list[str]


class DeleteEntitiesRequest(BaseModel):
    entity_names: list[str] = Field(..., alias="entityNames")


class DeleteObservationsRequest(BaseModel):
    deletions: list[ObservationDeletionModel]


class OpenNodesRequest(BaseModel):
    names: list[str]


class ValueRequest(BaseModel):
    """New status or priority value."""
    value: str = Field(..., description="Status or priority value")


class ContextRequest(BaseModel):
    """Request to load context within a session."""
    entity_name: str = Field(..., alias="entityName")
    entity_type: str = Field("project", alias="entityType")


class StageRequest(BaseModel):
    """One end-of-session stage submission."""
    stage: str = Field(..., description="Stage name")
    stage_number: int = Field(..., alias="stageNumber", ge=1)
    analysis: str | None = Field(None, description="Free-text analysis for the stage")
    stage_data: dict[str, Any] | None = Field(None, alias="stageData")
    next_stage_needed: bool = Field(True, alias="nextStageNeeded")
    is_revision: bool = Field(False, alias="isRevision")
    revises_stage: int | None = Field(None, alias="revisesStage", ge=1)


class OperationRequest(BaseModel):
    params: dict[str, Any] = Field(default_factory=dict, description="Keyword parameters")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


# ============================================================================
# Global State
# ============================================================================

manager: ProjectGraphManager | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    global manager

    # Startup
    logger.info("Starting Project Graph HTTP Server...")

    if manager is None:
        config = GraphConfig.from_env()
        configure_logging(config.log_level)
        manager = ProjectGraphManager.from_config(config)

    logger.info("Server ready")

    yield

    logger.info("Server stopped")


# Create FastAPI app
app = FastAPI(
    title="Project Graph Server",
    description="HTTP server for project graph operations",
    version=__version__,
    lifespan=lifespan
)


def _run(operation: str, **params):
    """Call a manager operation, mapping graph errors onto HTTP statuses."""
    if not manager:
        raise HTTPException(status_code=500, detail="Manager not initialized")

    try:
        return getattr(manager, operation)(**params)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KGError as e:
        logger.error(f"Error in {operation}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Error in {operation}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


# ----------------------------------------------------------------------------
# Graph
# ----------------------------------------------------------------------------

@app.get("/api/graph")
async def read_graph():
    """Return the whole graph."""
    return _run("read_graph")


@app.get("/api/graph/search")
async def search_nodes(query: str):
    """Entities matching the query, with the relations among them."""
    return _run("search_nodes", query=query)


@app.post("/api/graph/open")
async def open_nodes(request: OpenNodesRequest):
    return _run("open_nodes", names=request.names)


@app.post("/api/graph/entities")
async def create_entities(request: EntitiesRequest):
    """Create entities. The whole batch is rejected on any duplicate or invalid type."""
    entities = [e.model_dump(by_alias=True, exclude_none=True) for e in request.entities]
    return {"created": _run("create_entities", entities=entities)}


@app.post("/api/graph/relations")
async def create_relations(request: RelationsRequest):
    """Create relations. The whole batch is rejected on any invalid relation."""
    relations = [r.model_dump(by_alias=True) for r in request.relations]
    return {"created": _run("create_relations", relations=relations)}


@app.post("/api/graph/observations")
async def add_observations(request: ObservationsRequest):
    return _run("add_observations", entity_name=request.entity_name, observations=request.contents)


@app.post("/api/graph/entities/delete")
async def delete_entities(request: DeleteEntitiesRequest):
    """Delete entities and every relation touching them."""
    return _run("delete_entities", entity_names=request.entity_names)


@app.post("/api/graph/relations/delete")
async def delete_relations(request: RelationsRequest):
    relations = [r.model_dump(by_alias=True) for r in request.relations]
    return {"deleted": _run("delete_relations", relations=relations)}


@app.post("/api/graph/observations/delete")
async def delete_observations(request: DeleteObservationsRequest):
    deletions = [d.model_dump(by_alias=True) for d in request.deletions]
    return {"deleted": _run("delete_observations", deletions=deletions)}


# ----------------------------------------------------------------------------
# Status/Priority
# ----------------------------------------------------------------------------

@app.get("/api/entities/{entity_name}/status")
async def get_entity_status(entity_name: str):
    return {"entity": entity_name, "status": _run("get_entity_status", entity_name=entity_name)}


@app.put("/api/entities/{entity_name}/status")
async def set_entity_status(entity_name: str, request: ValueRequest):
    _run("set_entity_status", entity_name=entity_name, status=request.value)
    return {"entity": entity_name, "status": request.value}


@app.get("/api/entities/{entity_name}/priority")
async def get_entity_priority(entity_name: str):
    return {"entity": entity_name, "priority": _run("get_entity_priority", entity_name=entity_name)}


@app.put("/api/entities/{entity_name}/priority")
async def set_entity_priority(entity_name: str, request: ValueRequest):
    _run("set_entity_priority", entity_name=entity_name, priority=request.value)
    return {"entity": entity_name, "priority": request.value}


# ----------------------------------------------------------------------------
# Analytics
# ----------------------------------------------------------------------------

@app.get("/api/projects/{project_name}/overview")
async def get_project_overview(project_name: str):
    return _run("get_project_overview", project_name=project_name)


@app.get("/api/projects/{project_name}/milestones")
async def get_milestone_progress(project_name: str, milestone_name: str | None = None):
    return _run("get_milestone_progress", project_name=project_name, milestone_name=milestone_name)


@app.get("/api/projects/{project_name}/timeline")
async def get_project_timeline(project_name: str):
    return _run("get_project_timeline", project_name=project_name)


@app.get("/api/projects/{project_name}/resources")
async def get_resource_allocation(project_name: str, resource_name: str | None = None):
    return _run("get_resource_allocation", project_name=project_name, resource_name=resource_name)


@app.get("/api/projects/{project_name}/risks")
async def get_project_risks(project_name: str):
    return _run("get_project_risks", project_name=project_name)


@app.get("/api/projects/{project_name}/related")
async def find_related_projects(project_name: str, depth: int = 1):
    return _run("find_related_projects", project_name=project_name, depth=depth)


@app.get("/api/projects/{project_name}/decisions")
async def get_decision_log(project_name: str):
    return _run("get_decision_log", project_name=project_name)


@app.get("/api/projects/{project_name}/health")
async def get_project_health(project_name: str):
    return _run("get_project_health", project_name=project_name)


@app.get("/api/tasks/{task_name}/dependencies")
async def get_task_dependencies(task_name: str, depth: int = 2):
    return _run("get_task_dependencies", task_name=task_name, depth=depth)


@app.get("/api/team-members/{team_member_name}/assignments")
async def get_team_member_assignments(team_member_name: str):
    return _run("get_team_member_assignments", team_member_name=team_member_name)


# ----------------------------------------------------------------------------
# Sessions
# ----------------------------------------------------------------------------

@app.post("/api/sessions")
async def start_session():
    """Start a session and return the attention digest."""
    return _run("start_session")


@app.post("/api/sessions/{session_id}/context")
async def load_context(session_id: str, request: ContextRequest):
    return _run(
        "load_context",
        entity_name=request.entity_name,
        entity_type=request.entity_type,
        session_id=session_id,
    )


@app.post("/api/sessions/{session_id}/stages")
async def submit_stage(session_id: str, request: StageRequest):
    """
    Submit one end-of-session stage.
    The assembly stage with nextStageNeeded=false applies the session to the graph.
    """
    return _run(
        "submit_stage",
        session_id=session_id,
        stage=request.stage,
        stage_number=request.stage_number,
        analysis=request.analysis,
        stage_data=request.stage_data,
        next_stage_needed=request.next_stage_needed,
        is_revision=request.is_revision,
        revises_stage=request.revises_stage,
    )


# ----------------------------------------------------------------------------
# Uniform dispatch
# ----------------------------------------------------------------------------

@app.post("/api/operations/{operation}")
async def execute_operation(operation: str, request: OperationRequest):
    """Run any operation by name and return the {success, result|error} envelope."""
    if not manager:
        raise HTTPException(status_code=500, detail="Manager not initialized")
    if operation not in OPERATIONS:
        raise HTTPException(status_code=404, detail=f"Unknown operation: {operation}")
    return manager.execute(operation, request.params)
