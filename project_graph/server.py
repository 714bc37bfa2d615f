"""
Project Graph MCP Server
Exposes the project graph engine over MCP stdio: session tools, context
build/delete tools, the advanced query tool and the whole graph as a
resource.
"""

import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Resource, TextContent, Tool

from .config import GraphConfig, configure_logging
from .core import ENTITY_TYPES, RELATION_TYPES, SESSION_STAGES, KGError, ValidationError
from .manager import ProjectGraphManager

logger = logging.getLogger(__name__)

GRAPH_RESOURCE_URI = "graph://project"

# advancedcontext type -> (operation, {param name: keyword})
ADVANCED_OPERATIONS = {
    "graph": ("read_graph", {}),
    "search": ("search_nodes", {"query": "query"}),
    "nodes": ("open_nodes", {"names": "names"}),
    "project": ("get_project_overview", {"projectName": "project_name"}),
    "dependencies": ("get_task_dependencies", {"taskName": "task_name", "depth": "depth"}),
    "assignments": ("get_team_member_assignments", {"teamMemberName": "team_member_name"}),
    "milestones": ("get_milestone_progress", {"projectName": "project_name", "milestoneName": "milestone_name"}),
    "timeline": ("get_project_timeline", {"projectName": "project_name"}),
    "resources": ("get_resource_allocation", {"projectName": "project_name", "resourceName": "resource_name"}),
    "risks": ("get_project_risks", {"projectName": "project_name"}),
    "related": ("find_related_projects", {"projectName": "project_name", "depth": "depth"}),
    "decisions": ("get_decision_log", {"projectName": "project_name"}),
    "health": ("get_project_health", {"projectName": "project_name"}),
}

CONTEXT_TYPES = ("entities", "relations", "observations")


# ============================================================================
# Tool Resolution
# ============================================================================

def _pick(arguments: dict, mapping: dict[str, str]) -> dict:
    """Rename present camelCase arguments to keyword names."""
    return {keyword: arguments[name] for name, keyword in mapping.items() if arguments.get(name) is not None}


def resolve_tool(name: str, arguments: dict) -> list[tuple[str, dict]]:
    """
    Translate a tool call into manager operations.
    Raises ValidationError for unknown tools or types.
    """
    if name == "startsession":
        return [("start_session", {})]

    if name == "loadcontext":
        return [("load_context", _pick(arguments, {
            "entityName": "entity_name", "entityType": "entity_type", "sessionId": "session_id",
        }))]

    if name == "endsession":
        return [("submit_stage", _pick(arguments, {
            "sessionId": "session_id",
            "stage": "stage",
            "stageNumber": "stage_number",
            "analysis": "analysis",
            "stageData": "stage_data",
            "nextStageNeeded": "next_stage_needed",
            "isRevision": "is_revision",
            "revisesStage": "revises_stage",
        }))]

    if name in ("buildcontext", "deletecontext"):
        kind = arguments.get("type")
        data = arguments.get("data") or []
        if kind not in CONTEXT_TYPES:
            raise ValidationError(f"Invalid type: {kind}. Must be one of: {', '.join(CONTEXT_TYPES)}")

        if name == "buildcontext":
            if kind == "entities":
                return [("create_entities", {"entities": data})]
            if kind == "relations":
                return [("create_relations", {"relations": data})]
            for item in data:
                if not (isinstance(item, dict) and isinstance(item.get("entityName"), str) and item["entityName"]
                        and isinstance(item.get("contents"), list)):
                    raise ValidationError(f"Invalid observation item: {item!r}. Expected {{entityName, contents}}")
            return [
                ("add_observations", {"entity_name": item["entityName"], "observations": item["contents"]})
                for item in data
            ]

        if kind == "entities":
            return [("delete_entities", {"entity_names": data})]
        if kind == "relations":
            return [("delete_relations", {"relations": data})]
        return [("delete_observations", {"deletions": data})]

    if name == "advancedcontext":
        kind = arguments.get("type")
        if kind not in ADVANCED_OPERATIONS:
            raise ValidationError(f"Invalid type: {kind}. Must be one of: {', '.join(ADVANCED_OPERATIONS)}")
        operation, mapping = ADVANCED_OPERATIONS[kind]
        return [(operation, _pick(arguments.get("params") or {}, mapping))]

    raise ValidationError(f"Unknown tool: {name}")


def run_tool(target: ProjectGraphManager, name: str, arguments: dict) -> dict:
    """Run every operation of a tool call, stopping at the first failure."""
    results = []
    for operation, params in resolve_tool(name, arguments):
        response = target.execute(operation, params)
        if not response["success"]:
            return response
        results.append(response["result"])
    return {"success": True, "result": results[0] if len(results) == 1 else results}


# ============================================================================
# MCP Server
# ============================================================================

# Initialize server
app = Server("project-graph")

# Global manager instance
manager: ProjectGraphManager | None = None


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available project graph tools."""
    return [
        Tool(
            name="startsession",
            description="Start a new work session. Returns the session ID, recent sessions, active projects, high-priority tasks, upcoming milestones and high-priority risks.",
            inputSchema={
                "type": "object",
                "properties": {}
            }
        ),
        Tool(
            name="loadcontext",
            description="Load structured context for an entity (project, task, milestone, teamMember, resource or any other type). Records the load in the session when a session ID is given.",
            inputSchema={
                "type": "object",
                "properties": {
                    "entityName": {"type": "string", "description": "Exact entity name"},
                    "entityType": {"type": "string", "enum": list(ENTITY_TYPES), "description": "Entity type (default: project)"},
                    "sessionId": {"type": "string", "description": "Optional: session ID from startsession"}
                },
                "required": ["entityName"]
            }
        ),
        Tool(
            name="buildcontext",
            description="Create entities, relations or observations. Entity and relation batches are validated as a whole before anything is written.",
            inputSchema={
                "type": "object",
                "properties": {
                    "type": {"type": "string", "enum": list(CONTEXT_TYPES)},
                    "data": {
                        "type": "array",
                        "description": f"Entities {{name, entityType, observations}}, relations {{from, to, relationType}} with relationType in {', '.join(RELATION_TYPES)}, or observations {{entityName, contents}}"
                    }
                },
                "required": ["type", "data"]
            }
        ),
        Tool(
            name="deletecontext",
            description="Delete entities (by name, cascading to their relations), relations (exact triples) or observations (exact strings).",
            inputSchema={
                "type": "object",
                "properties": {
                    "type": {"type": "string", "enum": list(CONTEXT_TYPES)},
                    "data": {"type": "array", "description": "Entity names, relations {from, to, relationType}, or {entityName, observations}"}
                },
                "required": ["type", "data"]
            }
        ),
        Tool(
            name="advancedcontext",
            description="Query the graph: whole graph, search, nodes, project overview, task dependencies, assignments, milestones, timeline, resources, risks, related projects, decisions or health.",
            inputSchema={
                "type": "object",
                "properties": {
                    "type": {"type": "string", "enum": list(ADVANCED_OPERATIONS)},
                    "params": {"type": "object", "description": "query, names, projectName, taskName, teamMemberName, milestoneName, resourceName, depth"}
                },
                "required": ["type"]
            }
        ),
        Tool(
            name="endsession",
            description="Submit one end-of-session stage. Submitting 'assembly' with nextStageNeeded=false applies the session's updates to the graph.",
            inputSchema={
                "type": "object",
                "properties": {
                    "sessionId": {"type": "string", "description": "Session ID from startsession"},
                    "stage": {"type": "string", "enum": list(SESSION_STAGES)},
                    "stageNumber": {"type": "integer", "minimum": 1},
                    "totalStages": {"type": "integer", "minimum": 1},
                    "analysis": {"type": "string"},
                    "stageData": {"type": "object", "description": "Stage-specific payload"},
                    "nextStageNeeded": {"type": "boolean"},
                    "isRevision": {"type": "boolean"},
                    "revisesStage": {"type": "integer", "minimum": 1}
                },
                "required": ["sessionId", "stage", "stageNumber", "nextStageNeeded"]
            }
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls with uniform error handling."""
    try:
        result = run_tool(manager, name, arguments or {})

    except KGError as e:
        # Structured error response for known errors
        logger.warning(f"KG error in {name}: {e}")
        result = {"success": False, "error": str(e)}

    except Exception as e:
        # Unexpected errors
        logger.error(f"Unexpected error in {name}: {e}", exc_info=True)
        result = {"success": False, "error": f"Internal error: {str(e)}"}

    return [TextContent(type="text", text=json.dumps(result, indent=2))]


@app.list_resources()
async def list_resources() -> list[Resource]:
    return [
        Resource(
            uri=GRAPH_RESOURCE_URI,
            name="graph",
            description="The whole project graph",
            mimeType="application/json",
        )
    ]


@app.read_resource()
async def read_resource(uri) -> str:
    if str(uri).rstrip("/") != GRAPH_RESOURCE_URI:
        raise ValueError(f"Unknown resource: {uri}")
    return json.dumps(manager.read_graph(), indent=2)


async def main():
    """Main entry point."""
    global manager

    # Load configuration from environment
    config = GraphConfig.from_env()
    configure_logging(config.log_level)

    manager = ProjectGraphManager.from_config(config)

    logger.info("Starting Project Graph MCP Server...")

    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())
