import pytest
from fastapi.testclient import TestClient

from project_graph import api


@pytest.fixture
def client(manager, monkeypatch):
    monkeypatch.setattr(api, "manager", manager)
    with TestClient(api.app) as test_client:
        yield test_client


@pytest.fixture
def p1(client):
    response = client.post("/api/graph/entities", json={"entities": [
        {"name": "P1", "entityType": "project", "observations": ["Status: active"]},
        {"name": "T1", "entityType": "task", "observations": ["Status: completed"]},
        {"name": "T2", "entityType": "task", "observations": ["Status: not_started"]},
    ]})
    assert response.status_code == 200
    response = client.post("/api/graph/relations", json={"relations": [
        {"from": "T1", "to": "P1", "relationType": "part_of"},
        {"from": "T2", "to": "P1", "relationType": "part_of"},
    ]})
    assert response.status_code == 200
    return "P1"


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_and_read(client, p1):
    graph = client.get("/api/graph").json()
    assert "P1" in {e["name"] for e in graph["entities"]}
    assert {"from": "T1", "to": "P1", "relationType": "part_of"} in graph["relations"]


def test_embedding_is_kept(client):
    response = client.post("/api/graph/entities", json={"entities": [
        {"name": "V", "entityType": "note", "embedding": [0.5, 1.0]},
        {"name": "W", "entityType": "note"},
    ]})
    assert response.status_code == 200

    entities = {e["name"]: e for e in client.get("/api/graph").json()["entities"]}
    assert entities["V"]["embedding"] == [0.5, 1.0]
    assert "embedding" not in entities["W"]


def test_duplicate_entity_is_conflict(client, p1):
    response = client.post("/api/graph/entities", json={"entities": [
        {"name": "P1", "entityType": "project"},
    ]})
    assert response.status_code == 409


def test_invalid_type_is_bad_request(client):
    response = client.post("/api/graph/entities", json={"entities": [
        {"name": "X", "entityType": "spaceship"},
    ]})
    assert response.status_code == 400
    assert "spaceship" in response.json()["detail"]


def test_unknown_relation_endpoint_is_not_found(client, p1):
    response = client.post("/api/graph/relations", json={"relations": [
        {"from": "T1", "to": "Nowhere", "relationType": "depends_on"},
    ]})
    assert response.status_code == 404


def test_overview(client, p1):
    response = client.get("/api/projects/P1/overview")
    assert response.status_code == 200
    assert response.json()["summary"]["taskCompletionRate"] == 50


def test_missing_project_is_not_found(client):
    response = client.get("/api/projects/Missing/health")
    assert response.status_code == 404


def test_status_round_trip(client, p1):
    response = client.put("/api/entities/T2/status", json={"value": "blocked"})
    assert response.status_code == 200

    assert client.get("/api/entities/T2/status").json() == {"entity": "T2", "status": "blocked"}
    assert client.put("/api/entities/T2/status", json={"value": "nope"}).status_code == 400


def test_search_and_delete(client, p1):
    found = client.get("/api/graph/search", params={"query": "not_started"}).json()
    assert [e["name"] for e in found["entities"]] == ["T2"]

    response = client.post("/api/graph/entities/delete", json={"entityNames": ["T2"]})
    assert response.json() == {"deletedEntities": 1, "deletedRelations": 1}


def test_observations(client, p1):
    response = client.post("/api/graph/observations", json={"entityName": "T1", "contents": ["Note: ok"]})
    assert response.json()["observations"][-1] == "Note: ok"

    response = client.post("/api/graph/observations/delete", json={"deletions": [
        {"entityName": "T1", "observations": ["Note: ok"]},
    ]})
    assert response.json() == {"deleted": 1}


def test_session_flow(client, p1):
    session_id = client.post("/api/sessions").json()["sessionId"]

    response = client.post(f"/api/sessions/{session_id}/stages", json={
        "stage": "summary", "stageNumber": 1,
        "stageData": {"summary": "x", "project": "P1"}, "nextStageNeeded": True,
    })
    assert response.status_code == 200

    response = client.post(f"/api/sessions/{session_id}/stages", json={
        "stage": "assembly", "stageNumber": 2, "nextStageNeeded": False,
    })
    assert response.json()["sessionRecorded"] is True

    response = client.post(f"/api/sessions/{session_id}/stages", json={
        "stage": "assembly", "stageNumber": 3, "nextStageNeeded": False,
    })
    assert response.status_code == 409


def test_unknown_session_is_not_found(client):
    response = client.post("/api/sessions/proj_0_missing/stages", json={"stage": "summary", "stageNumber": 1})
    assert response.status_code == 404


def test_operation_envelope(client):
    client.post("/api/graph/entities", json={"entities": [{"name": "Empty", "entityType": "project"}]})

    response = client.post("/api/operations/get_project_health", json={"params": {"project_name": "Empty"}})

    body = response.json()
    assert body["success"] is True
    assert body["result"]["healthScore"] == 52


def test_unknown_operation(client):
    assert client.post("/api/operations/nope", json={}).status_code == 404
