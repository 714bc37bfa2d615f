from datetime import date

import pytest

from project_graph.analytics import get_project_health, health_category, health_recommendations
from project_graph.analytics.health import schedule_status
from project_graph.core import ProjectNotFoundError


def test_empty_project_is_neutral(manager):
    manager.create_entities([{"name": "Empty", "entityType": "project", "observations": []}])

    health = manager.get_project_health("Empty")

    assert health["factors"] == [50] * 8 + [70]
    assert health["healthScore"] == 52
    assert health["healthStatus"] == "at_risk"
    assert health["topIssues"] == []
    assert health["recommendations"] == []


def test_seeded_project(snapshot, today):
    health = get_project_health(snapshot, "Apollo", today)

    assert health["factors"] == [25, 50, 50, 100, 50, 50, 50, 50, 30]
    assert health["healthScore"] == 51
    assert health["healthStatus"] == "at_risk"

    metrics = health["metrics"]
    assert metrics["tasks"] == {"total": 4, "completed": 1, "blocked": 1, "completionRate": 25}
    assert metrics["milestones"]["reached"] == 1
    assert metrics["issues"]["open"] == 1
    assert metrics["risks"] == {"total": 2, "mitigated": 1, "active": 1, "mitigationRate": 50}
    assert metrics["timeline"] == {"progress": 45, "behindSchedule": True}

    assert [i["name"] for i in health["topIssues"]] == ["Bug"]
    assert health["recommendations"] == [
        "Urgently resolve blocked tasks - consider reassigning resources",
        "Reevaluate project scope and timeline - consider adjustments",
        "Implement mitigation strategies for active risks immediately",
        "Prioritize issue resolution and prevent new issues",
    ]


def test_top_issues_ranked_by_priority(make_graph, today):
    from project_graph.graph import GraphSnapshot

    snapshot = GraphSnapshot(make_graph(
        [
            ("P", "project", []),
            ("Low", "issue", ["Priority: low"]),
            ("Plain", "issue", []),
            ("Urgent", "issue", ["Priority: high"]),
            ("Closed", "issue", ["Priority: high", "Status: wont_fix"]),
            ("Extra", "issue", ["Priority: high"]),
        ],
        [(name, "P", "part_of") for name in ("Low", "Plain", "Urgent", "Closed", "Extra")],
    ))

    health = get_project_health(snapshot, "P", today)

    assert [i["name"] for i in health["topIssues"]] == ["Urgent", "Extra", "Plain"]


@pytest.mark.parametrize("score, category", [
    (100, "healthy"),
    (80, "healthy"),
    (79, "attention_needed"),
    (60, "attention_needed"),
    (52, "at_risk"),
    (40, "at_risk"),
    (39, "critical"),
    (0, "critical"),
])
def test_health_category(score, category):
    assert health_category(score) == category


def test_schedule_status():
    start, end = date(2024, 1, 1), date(2024, 1, 11)

    assert schedule_status(start, end, 50, date(2024, 1, 6)) == (50, False)
    assert schedule_status(start, end, 10, date(2024, 1, 6)) == (50, True)
    assert schedule_status(start, end, 0, date(2023, 12, 1)) == (0, False)
    assert schedule_status(None, end, 0, date(2024, 1, 6)) == (0, False)


def test_critical_recommendations_always_escalate():
    recommendations = health_recommendations("critical", 0, 0, 0, False)
    assert recommendations[0] == "Conduct emergency project review with stakeholders"
    assert len(recommendations) == 3


def test_unknown_project(snapshot, today):
    with pytest.raises(ProjectNotFoundError):
        get_project_health(snapshot, "Nowhere", today)
