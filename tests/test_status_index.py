import pytest

from project_graph.core import (
    InvalidValueError,
    PRIORITY_VALUES,
    STATUS_VALUES,
    UnknownEntityError,
)
from project_graph.graph import StatusIndex, StatusTable, synthetic_name, synthetic_value


@pytest.fixture
def task(manager):
    manager.create_entities([{"name": "T1", "entityType": "task", "observations": []}])
    return "T1"


def has_status_relations(manager, name):
    return [
        r for r in manager.read_graph()["relations"]
        if r["from"] == name and r["relationType"] == "has_status"
    ]


def test_synthetic_entities_created_once(manager, store):
    names = {e["name"] for e in store.load()["entities"]}
    for value in STATUS_VALUES:
        assert synthetic_name("status", value) in names
    for value in PRIORITY_VALUES:
        assert synthetic_name("priority", value) in names

    assert StatusIndex(store).initialize_status_and_priority() == 0
    assert len(store.load()["entities"]) == len(STATUS_VALUES) + len(PRIORITY_VALUES)


def test_second_status_replaces_first(manager, task):
    manager.set_entity_status(task, "active")
    manager.set_entity_status(task, "completed")

    assert manager.get_entity_status(task) == "completed"
    relations = has_status_relations(manager, task)
    assert relations == [{"from": task, "to": "status:completed", "relationType": "has_status"}]


def test_status_and_priority_are_independent(manager, task):
    manager.set_entity_priority(task, "high")
    manager.set_entity_status(task, "blocked")
    manager.set_entity_priority(task, "low")

    assert manager.get_entity_priority(task) == "low"
    assert manager.get_entity_status(task) == "blocked"


def test_unset_values_are_none(manager, task):
    assert manager.get_entity_status(task) is None
    assert manager.get_entity_priority("Ghost") is None


def test_invalid_value_rejected_before_write(manager, task):
    before = manager.read_graph()

    with pytest.raises(InvalidValueError):
        manager.set_entity_status(task, "finished")
    with pytest.raises(InvalidValueError):
        manager.set_entity_priority(task, "medium")

    assert manager.read_graph() == before


def test_unknown_entity(manager):
    with pytest.raises(UnknownEntityError):
        manager.set_entity_status("Ghost", "active")


def test_deleted_synthetic_entity_is_recreated(manager, task, store):
    manager.delete_entities(["status:active"])

    manager.set_entity_status(task, "active")

    assert any(e["name"] == "status:active" for e in store.load()["entities"])
    assert manager.get_entity_status(task) == "active"


def test_status_table_first_relation_wins():
    table = StatusTable.from_relations([
        {"from": "T1", "to": "status:active", "relationType": "has_status"},
        {"from": "T1", "to": "status:blocked", "relationType": "has_status"},
        {"from": "T1", "to": "priority:high", "relationType": "has_priority"},
        {"from": "T1", "to": "P1", "relationType": "part_of"},
    ])

    assert table.status("T1") == "active"
    assert table.priority("T1") == "high"
    assert table.status("P1") is None


def test_synthetic_value():
    assert synthetic_value("status:active") == "active"
    assert synthetic_value("plain") == "plain"
