import asyncio
import json

import pytest

from project_graph import server
from project_graph.core import ValidationError


@pytest.fixture
def mcp(manager, monkeypatch):
    monkeypatch.setattr(server, "manager", manager)

    def call(name, arguments=None):
        content = asyncio.run(server.call_tool(name, arguments or {}))
        return json.loads(content[0].text)

    return call


def test_list_tools():
    tools = asyncio.run(server.list_tools())
    assert [t.name for t in tools] == [
        "startsession", "loadcontext", "buildcontext", "deletecontext", "advancedcontext", "endsession",
    ]


def test_resolve_advanced_params():
    assert server.resolve_tool("advancedcontext", {
        "type": "dependencies", "params": {"taskName": "T1", "depth": 3, "ignored": True},
    }) == [("get_task_dependencies", {"task_name": "T1", "depth": 3})]


def test_resolve_observation_batches():
    assert server.resolve_tool("buildcontext", {"type": "observations", "data": [
        {"entityName": "A", "contents": ["x"]},
        {"entityName": "B", "contents": ["y", "z"]},
    ]}) == [
        ("add_observations", {"entity_name": "A", "observations": ["x"]}),
        ("add_observations", {"entity_name": "B", "observations": ["y", "z"]}),
    ]


@pytest.mark.parametrize("item", [
    {"entityName": "A"},
    {"contents": ["x"]},
    {"entityName": "A", "contents": "x"},
    "A",
])
def test_resolve_rejects_malformed_observation_items(item):
    with pytest.raises(ValidationError, match="Invalid observation item"):
        server.resolve_tool("buildcontext", {"type": "observations", "data": [
            {"entityName": "B", "contents": ["y"]}, item,
        ]})


def test_malformed_observation_batch_writes_nothing(mcp):
    mcp("buildcontext", {"type": "entities", "data": [{"name": "N", "entityType": "note", "observations": []}]})

    result = mcp("buildcontext", {"type": "observations", "data": [
        {"entityName": "N", "contents": ["kept out"]}, {"entityName": "N"},
    ]})

    assert result["success"] is False
    assert "Invalid observation item" in result["error"]
    graph = mcp("advancedcontext", {"type": "nodes", "params": {"names": ["N"]}})["result"]
    assert graph["entities"][0]["observations"] == []


def test_resolve_rejects_unknown_tool():
    with pytest.raises(ValidationError):
        server.resolve_tool("dropcontext", {})


def test_build_and_query(mcp):
    result = mcp("buildcontext", {"type": "entities", "data": [
        {"name": "P1", "entityType": "project", "observations": []},
        {"name": "T1", "entityType": "task", "observations": ["Status: completed"]},
    ]})
    assert result["success"] is True

    mcp("buildcontext", {"type": "relations", "data": [
        {"from": "T1", "to": "P1", "relationType": "part_of"},
    ]})
    overview = mcp("advancedcontext", {"type": "project", "params": {"projectName": "P1"}})

    assert overview["result"]["summary"]["taskCompletionRate"] == 100


def test_errors_are_structured(mcp):
    assert mcp("advancedcontext", {"type": "health", "params": {"projectName": "Nope"}}) == {
        "success": False, "error": "Project 'Nope' not found",
    }
    assert mcp("buildcontext", {"type": "widgets", "data": []})["success"] is False


def test_delete_context(mcp):
    mcp("buildcontext", {"type": "entities", "data": [{"name": "N", "entityType": "note", "observations": ["a"]}]})

    result = mcp("deletecontext", {"type": "observations", "data": [{"entityName": "N", "observations": ["a"]}]})

    assert result == {"success": True, "result": 1}


def test_session_tools(mcp):
    mcp("buildcontext", {"type": "entities", "data": [{"name": "P1", "entityType": "project", "observations": []}]})
    session_id = mcp("startsession")["result"]["sessionId"]

    loaded = mcp("loadcontext", {"entityName": "P1", "sessionId": session_id})
    assert loaded["result"]["entityType"] == "project"

    mcp("endsession", {
        "sessionId": session_id, "stage": "summary", "stageNumber": 1, "totalStages": 2,
        "stageData": {"summary": "x", "project": "P1"}, "nextStageNeeded": True,
    })
    final = mcp("endsession", {
        "sessionId": session_id, "stage": "assembly", "stageNumber": 2, "nextStageNeeded": False,
    })

    assert final["result"]["sessionRecorded"] is True


def test_graph_resource(mcp):
    resources = asyncio.run(server.list_resources())
    assert str(resources[0].uri).startswith(server.GRAPH_RESOURCE_URI)

    graph = json.loads(asyncio.run(server.read_resource(server.GRAPH_RESOURCE_URI)))
    assert "status:active" in {e["name"] for e in graph["entities"]}
