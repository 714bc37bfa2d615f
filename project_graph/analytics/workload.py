"""Tasks assigned to a team member, grouped and partitioned by deadline."""

from datetime import date

from ..core import (
    UPCOMING_WINDOW_DAYS,
    TeamMemberNotFoundError,
    date_sort_key,
    percent,
    parse_date,
)
from ..graph import GraphSnapshot


def _due(assignment: dict) -> date | None:
    return parse_date(assignment["dueDate"])


def get_team_member_assignments(snapshot: GraphSnapshot, member_name: str, today: date) -> dict:
    """Raises TeamMemberNotFoundError if no teamMember has that name."""
    member = snapshot.require(member_name, "teamMember", TeamMemberNotFoundError)
    info = snapshot.fields(member)

    assignments = []
    for task in snapshot.sources(member_name, "assigned_to", "task"):
        fields = snapshot.fields(task)
        assignments.append({
            "task": task,
            "project": snapshot.project_of(task["name"]),
            "dueDate": fields.due_date,
            "status": fields.status,
            "priority": fields.priority,
        })
    assignments.sort(key=lambda a: date_sort_key(_due(a)))

    by_project: dict[str, list] = {}
    by_status: dict[str, list] = {}
    for assignment in assignments:
        project = assignment["project"]["name"] if assignment["project"] else "Unassigned"
        by_project.setdefault(project, []).append(assignment)
        by_status.setdefault(assignment["status"], []).append(assignment)

    def count(status: str) -> int:
        return len(by_status.get(status, []))

    open_dated = [a for a in assignments if a["status"] != "completed" and _due(a) is not None]
    upcoming = [a for a in open_dated if 0 <= (_due(a) - today).days <= UPCOMING_WINDOW_DAYS]
    overdue = [a for a in open_dated if _due(a) < today]

    return {
        "teamMember": member,
        "info": {
            "role": info.role,
            "skills": info.skills,
            "availability": info.availability,
        },
        "workload": {
            "totalTasks": len(assignments),
            "completedTasks": count("completed"),
            "inProgressTasks": count("in_progress"),
            "notStartedTasks": count("not_started"),
            "blockedTasks": count("blocked"),
            "completionRate": percent(count("completed"), len(assignments)),
        },
        "assignedTasks": assignments,
        "tasksByProject": by_project,
        "tasksByStatus": by_status,
        "projects": snapshot.targets(member_name, ("manages", "contributes_to"), "project"),
        "upcomingDeadlines": upcoming,
        "overdueTasks": overdue,
    }
