"""Resource utilisation from the tasks and team members using each resource."""

from ..core import (
    RESOURCE_TASK_RELATION,
    RESOURCE_MEMBER_RELATION,
    OVERALLOCATED_PERCENT,
    UNDERUTILIZED_PERCENT,
    ResourceNotFoundError,
    date_sort_key,
    parse_int_prefix,
)
from ..graph import GraphSnapshot
from .overview import group_by_status

# Usage assumed for a busy resource without a usable capacity
DEFAULT_USAGE_PERCENT = 50


def usage_percentage(capacity: str | None, total_tasks: int, in_progress: int) -> int:
    """
    in-progress / capacity as a percentage capped at 100.
    Without a usable capacity, 50 if the resource has any task, else 0.
    """
    limit = parse_int_prefix(capacity)
    if limit is None or limit < 0:
        return DEFAULT_USAGE_PERCENT if total_tasks > 0 else 0
    if limit == 0:
        return 100 if in_progress > 0 else 0
    return min(100, round(in_progress / limit * 100))


def resource_allocation(snapshot: GraphSnapshot, resource: dict) -> dict:
    info = snapshot.fields(resource)
    tasks = sorted(
        snapshot.sources(resource["name"], RESOURCE_TASK_RELATION, "task"),
        key=lambda t: date_sort_key(snapshot.fields(t).due),
    )
    by_status = group_by_status(snapshot, tasks)
    in_progress = len(by_status.get("in_progress", []))

    return {
        "resource": resource,
        "info": {
            "type": info.type,
            "availability": info.availability,
            "capacity": info.capacity,
            "cost": info.cost,
        },
        "usage": {
            "totalTasks": len(tasks),
            "inProgressTasks": in_progress,
            "usagePercentage": usage_percentage(info.capacity, len(tasks), in_progress),
        },
        "assignedTasks": tasks,
        "tasksByStatus": by_status,
        "teamMembers": snapshot.sources(resource["name"], RESOURCE_MEMBER_RELATION, "teamMember"),
    }


def get_resource_allocation(snapshot: GraphSnapshot, project_name: str,
                            resource_name: str | None = None) -> dict:
    """
    Raises ProjectNotFoundError, or ResourceNotFoundError when the named
    resource is not part of the project.
    """
    project = snapshot.require_project(project_name)

    resources = snapshot.part_of(project_name, "resource")
    if resource_name is not None:
        resources = [r for r in resources if r["name"] == resource_name]
        if not resources:
            raise ResourceNotFoundError(resource_name, project_name)

    allocations = [resource_allocation(snapshot, r) for r in resources]
    allocations.sort(key=lambda a: a["usage"]["usagePercentage"], reverse=True)

    overallocated = [a for a in allocations if a["usage"]["usagePercentage"] > OVERALLOCATED_PERCENT]
    underutilized = [
        a for a in allocations
        if a["usage"]["usagePercentage"] < UNDERUTILIZED_PERCENT and a["usage"]["totalTasks"] > 0
    ]

    return {
        "project": project,
        "resources": allocations,
        "summary": {
            "totalResources": len(resources),
            "overallocatedCount": len(overallocated),
            "underutilizedCount": len(underutilized),
        },
        "overallocatedResources": overallocated,
        "underutilizedResources": underutilized,
    }
