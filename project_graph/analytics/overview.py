"""Consolidated view of one project."""

from datetime import date

from ..core import TEAM_RELATIONS, date_sort_key, percent
from ..graph import GraphSnapshot


def group_by_status(snapshot: GraphSnapshot, entities: list) -> dict[str, list]:
    """Group entities by their Status field, keeping entity order within a group."""
    groups: dict[str, list] = {}
    for entity in entities:
        groups.setdefault(snapshot.fields(entity).status, []).append(entity)
    return groups


def get_project_overview(snapshot: GraphSnapshot, project_name: str, today: date) -> dict:
    """
    Assemble tasks, milestones, team, issues, risks, resources and
    stakeholders of a project with grouped and summarized counts.

    Raises ProjectNotFoundError if no project entity has that name.
    """
    project = snapshot.require_project(project_name)
    info = snapshot.fields(project)

    components = snapshot.part_of(project_name, "component")
    tasks = snapshot.part_of(project_name, "task")
    issues = snapshot.part_of(project_name, "issue")
    risks = snapshot.part_of(project_name, "risk")
    resources = snapshot.part_of(project_name, "resource")
    team_members = snapshot.sources(project_name, TEAM_RELATIONS, "teamMember")
    stakeholders = snapshot.sources(project_name, "stakeholder_of", "stakeholder")

    # sorted() is stable, so undated milestones keep entity order
    milestones = sorted(
        snapshot.part_of(project_name, "milestone"),
        key=lambda m: date_sort_key(snapshot.fields(m).when),
    )
    upcoming = [
        m for m in milestones
        if snapshot.fields(m).when is not None and snapshot.fields(m).when >= today
    ]

    completed = sum(1 for t in tasks if snapshot.fields(t).status == "completed")

    return {
        "project": project,
        "info": {
            "description": info.description,
            "startDate": info.start_date,
            "endDate": info.end_date,
            "priority": info.priority,
            "status": info.status,
            "goal": info.goal,
            "budget": info.budget,
        },
        "summary": {
            "taskCount": len(tasks),
            "completedTasks": completed,
            "taskCompletionRate": percent(completed, len(tasks)),
            "milestoneCount": len(milestones),
            "teamMemberCount": len(team_members),
            "issueCount": len(issues),
            "riskCount": len(risks),
            "componentCount": len(components),
        },
        "components": components,
        "tasks": tasks,
        "tasksByStatus": group_by_status(snapshot, tasks),
        "milestones": milestones,
        "upcomingMilestones": upcoming,
        "teamMembers": team_members,
        "issues": issues,
        "issuesByStatus": group_by_status(snapshot, issues),
        "risks": risks,
        "resources": resources,
        "stakeholders": stakeholders,
    }
