"""Milestone progress from required_for tasks."""

from datetime import date

from ..core import MilestoneNotFoundError, date_sort_key, percent
from ..graph import GraphSnapshot

# Milestone statuses that end tracking
SETTLED_STATUSES = ("reached", "missed")


def milestone_progress(snapshot: GraphSnapshot, milestone: dict, today: date) -> dict:
    info = snapshot.fields(milestone)
    tasks = snapshot.sources(milestone["name"], "required_for", "task")
    completed = sum(1 for t in tasks if snapshot.fields(t).status == "completed")

    if tasks:
        completion = percent(completed, len(tasks))
    else:
        completion = 100 if info.status == "reached" else 0

    days_remaining = None
    overdue = False
    if info.when is not None:
        days_remaining = (info.when - today).days
        overdue = days_remaining < 0 and info.status not in SETTLED_STATUSES

    return {
        "milestone": milestone,
        "info": {
            "description": info.description,
            "date": info.date,
            "status": info.status,
            "criteria": info.criteria,
        },
        "progress": {
            "totalTasks": len(tasks),
            "completedTasks": completed,
            "completionPercentage": completion,
            "daysRemaining": days_remaining,
            "isOverdue": overdue,
        },
        "relatedTasks": tasks,
        "blockers": [
            t for t in tasks
            if snapshot.fields(t).status not in ("completed", "cancelled")
        ],
    }


def get_milestone_progress(snapshot: GraphSnapshot, project_name: str, today: date,
                           milestone_name: str | None = None) -> dict:
    """
    Progress of every milestone of a project, or of one named milestone.

    Raises ProjectNotFoundError, or MilestoneNotFoundError when the named
    milestone is not part of the project.
    """
    project = snapshot.require_project(project_name)

    milestones = snapshot.part_of(project_name, "milestone")
    if milestone_name is not None:
        milestones = [m for m in milestones if m["name"] == milestone_name]
        if not milestones:
            raise MilestoneNotFoundError(milestone_name, project_name)

    entries = [milestone_progress(snapshot, m, today) for m in milestones]
    entries.sort(key=lambda e: date_sort_key(snapshot.fields(e["milestone"]).when))

    total = len(entries)
    reached = sum(1 for e in entries if e["info"]["status"] == "reached")
    average = sum(e["progress"]["completionPercentage"] for e in entries) / total if total else 0

    return {
        "project": project,
        "milestones": entries,
        "summary": {
            "totalMilestones": total,
            "reachedMilestones": reached,
            "milestoneCompletionRate": percent(reached, total),
            "averageCompletion": round(average),
            "nextMilestone": next(
                (e for e in entries if e["info"]["status"] not in SETTLED_STATUSES), None
            ),
            "overdueMilestones": sum(1 for e in entries if e["progress"]["isOverdue"]),
        },
    }
