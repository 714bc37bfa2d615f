"""Read-only analytics computed from a GraphSnapshot."""

from .overview import get_project_overview, group_by_status
from .dependencies import get_task_dependencies, critical_path, DependencyMap
from .workload import get_team_member_assignments
from .milestones import get_milestone_progress
from .timeline import get_project_timeline
from .resources import get_resource_allocation, usage_percentage
from .risks import get_project_risks, risk_score
from .related import find_related_projects
from .decisions import get_decision_log
from .health import get_project_health, health_category, health_recommendations

__all__ = [
    "get_project_overview",
    "group_by_status",
    "get_task_dependencies",
    "critical_path",
    "DependencyMap",
    "get_team_member_assignments",
    "get_milestone_progress",
    "get_project_timeline",
    "get_resource_allocation",
    "usage_percentage",
    "get_project_risks",
    "risk_score",
    "find_related_projects",
    "get_decision_log",
    "get_project_health",
    "health_category",
    "health_recommendations",
]
