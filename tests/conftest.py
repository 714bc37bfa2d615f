"""Shared fixtures: stores, a manager with a fixed date, and a seeded project graph."""

from datetime import date

import pytest

from project_graph import ProjectGraphManager
from project_graph.core import GraphPersistence
from project_graph.graph import GraphSnapshot, GraphStore
from project_graph.session import InMemorySessionStore

TODAY = date(2024, 6, 15)


def build_graph(entities, relations):
    """Graph document from (name, type, observations) and (from, to, type) tuples."""
    return {
        "entities": [
            {"name": name, "entityType": entity_type, "observations": list(observations)}
            for name, entity_type, observations in entities
        ],
        "relations": [
            {"from": frm, "to": to, "relationType": relation_type}
            for frm, to, relation_type in relations
        ],
    }


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_graph():
    return build_graph


@pytest.fixture
def graph_path(tmp_path):
    return tmp_path / "memory.json"


@pytest.fixture
def store(graph_path):
    return GraphStore(GraphPersistence(graph_path, backup_count=0))


@pytest.fixture
def sessions():
    return InMemorySessionStore()


@pytest.fixture
def manager(store, sessions):
    return ProjectGraphManager(store, sessions, today=lambda: TODAY)


@pytest.fixture
def apollo():
    """
    A project with four chained tasks, two milestones, two resources,
    two risks, two issues, two decisions and three neighbouring projects.
    """
    return build_graph(
        [
            ("Apollo", "project", [
                "Description: Lunar lander", "StartDate: 2024-01-01", "EndDate: 2024-12-31",
                "Status: active", "Priority: high", "Goal: Land safely",
            ]),
            ("Gemini", "project", ["Status: active"]),
            ("Mercury", "project", []),
            ("Vostok", "project", []),
            ("Design", "task", [
                "Description: Draft the design", "Status: completed",
                "DueDate: 2024-03-01", "Priority: high",
            ]),
            ("Build", "task", ["Status: in_progress", "DueDate: 2024-06-20"]),
            ("Test", "task", ["Status: not_started", "DueDate: 2024-06-10"]),
            ("Launch", "task", ["Status: blocked", "DueDate: 2024-09-01"]),
            ("Alice", "teamMember", ["Role: Engineer", "Skills: Python"]),
            ("Bob", "teamMember", ["Role: Manager"]),
            ("Alpha", "milestone", ["Date: 2024-04-01", "Status: reached"]),
            ("Beta", "milestone", ["Description: Beta release", "Date: 2024-07-01", "Status: planned"]),
            ("Rig", "resource", ["Type: hardware", "Capacity: 2"]),
            ("Cloud", "resource", ["Type: compute"]),
            ("Slip", "risk", ["Likelihood: 4", "Impact: 5", "Status: identified"]),
            ("Churn", "risk", ["Likelihood: high", "Impact: low", "Status: mitigating"]),
            ("Bug", "issue", ["Status: open", "Priority: high"]),
            ("Crash", "issue", ["Status: resolved"]),
            ("UseRust", "decision", ["Date: 2024-02-01", "Status: approved", "Rationale: Safety"]),
            ("UseGo", "decision", ["Status: proposed"]),
            ("Sponsor", "stakeholder", []),
            ("Investor", "stakeholder", []),
        ],
        [
            ("Design", "Apollo", "part_of"),
            ("Build", "Apollo", "part_of"),
            ("Test", "Apollo", "part_of"),
            ("Launch", "Apollo", "part_of"),
            ("Alpha", "Apollo", "part_of"),
            ("Beta", "Apollo", "part_of"),
            ("Rig", "Apollo", "part_of"),
            ("Cloud", "Apollo", "part_of"),
            ("Slip", "Apollo", "part_of"),
            ("Churn", "Apollo", "part_of"),
            ("Bug", "Apollo", "part_of"),
            ("Crash", "Apollo", "part_of"),
            ("UseRust", "Apollo", "part_of"),
            ("UseGo", "Apollo", "part_of"),
            ("Build", "Design", "depends_on"),
            ("Test", "Build", "depends_on"),
            ("Launch", "Test", "depends_on"),
            ("Design", "Alice", "assigned_to"),
            ("Build", "Alice", "assigned_to"),
            ("Test", "Alice", "assigned_to"),
            ("Alice", "Apollo", "contributes_to"),
            ("Bob", "Apollo", "manages"),
            ("Bob", "Gemini", "contributes_to"),
            ("Design", "Beta", "required_for"),
            ("Build", "Beta", "required_for"),
            ("Build", "Rig", "requires"),
            ("Test", "Rig", "requires"),
            ("Alice", "Rig", "uses"),
            ("Build", "Slip", "impacted_by"),
            ("UseRust", "Bob", "created_by"),
            ("Apollo", "UseRust", "impacted_by"),
            ("Sponsor", "Apollo", "stakeholder_of"),
            ("Investor", "Gemini", "stakeholder_of"),
            ("Investor", "Vostok", "stakeholder_of"),
            ("Apollo", "Mercury", "depends_on"),
        ],
    )


@pytest.fixture
def snapshot(apollo):
    return GraphSnapshot(apollo)


@pytest.fixture
def seeded_manager(store, sessions, apollo):
    """Manager over a store preloaded with the apollo graph."""
    store.save(apollo)
    return ProjectGraphManager(store, sessions, today=lambda: TODAY)
