"""
Aggregate project health score.

Nine factors in [0, 100] are averaged: two each for tasks, milestones,
issues and risks, plus one for schedule. A kind with no entities
contributes NEUTRAL_FACTOR to both of its factors.
"""

from datetime import date

from ..core import (
    NEUTRAL_FACTOR,
    ON_SCHEDULE_FACTOR,
    BEHIND_SCHEDULE_FACTOR,
    SCHEDULE_SLIP_POINTS,
    percent,
)
from ..graph import GraphSnapshot

TOP_ISSUE_LIMIT = 3
CLOSED_ISSUE_STATUSES = ("resolved", "wont_fix")

# (category, minimum score), checked in order
HEALTH_CATEGORIES = (
    ("healthy", 80),
    ("attention_needed", 60),
    ("at_risk", 40),
    ("critical", 0),
)

# Ranking of issue priorities for top issues; anything else sits between
_ISSUE_RANK = {"high": 0, "low": 2}


def health_category(score: int) -> str:
    for category, floor in HEALTH_CATEGORIES:
        if score >= floor:
            return category
    return "critical"


def _ratio_factor(part: int, total: int) -> float:
    return min(100, part / total * 100) if total else NEUTRAL_FACTOR


def _inverse_factor(part: int, total: int, weight: int = 100) -> float:
    return max(0, 100 - part / total * weight) if total else NEUTRAL_FACTOR


def schedule_status(start: date | None, end: date | None, completion_rate: float,
                    today: date) -> tuple[int, bool]:
    """
    (elapsed-time percent, behind schedule) for a dated project.
    Behind means completion trails elapsed time by more than SCHEDULE_SLIP_POINTS.
    """
    if start is None or end is None or end <= start:
        return 0, False
    elapsed = (today - start).days / (end - start).days * 100
    elapsed = min(100, max(0, elapsed))
    return round(elapsed), completion_rate < elapsed - SCHEDULE_SLIP_POINTS


def health_recommendations(category: str, blocked_tasks: int, open_issues: int,
                           active_risks: int, behind_schedule: bool) -> list[str]:
    recommendations = []

    if category == "healthy":
        recommendations.append("Continue current management practices")
        recommendations.append("Document successful strategies for future projects")

    elif category == "attention_needed":
        if blocked_tasks > 0:
            recommendations.append("Address blocked tasks to maintain momentum")
        if open_issues > 2:
            recommendations.append("Resolve open issues to prevent escalation")
        if behind_schedule:
            recommendations.append("Review project timeline and adjust as needed")

    elif category == "at_risk":
        if blocked_tasks > 0:
            recommendations.append("Urgently resolve blocked tasks - consider reassigning resources")
        if behind_schedule:
            recommendations.append("Reevaluate project scope and timeline - consider adjustments")
        if active_risks > 0:
            recommendations.append("Implement mitigation strategies for active risks immediately")
        if open_issues > 0:
            recommendations.append("Prioritize issue resolution and prevent new issues")

    else:
        recommendations.append("Conduct emergency project review with stakeholders")
        recommendations.append("Consider project restructuring or reset")
        recommendations.append("Implement daily status meetings and tight monitoring")
        if blocked_tasks > 0:
            recommendations.append("Escalate blocked tasks to management for immediate action")
        if active_risks > 0:
            recommendations.append("Reassess all project risks and implement mitigation measures")

    return recommendations


def get_project_health(snapshot: GraphSnapshot, project_name: str, today: date) -> dict:
    """Raises ProjectNotFoundError."""
    project = snapshot.require_project(project_name)
    info = snapshot.fields(project)

    def statuses(entity_type: str) -> list[str]:
        return [snapshot.fields(e).status for e in snapshot.part_of(project_name, entity_type)]

    task_statuses = statuses("task")
    milestone_statuses = statuses("milestone")
    issues = snapshot.part_of(project_name, "issue")
    issue_statuses = [snapshot.fields(i).status for i in issues]
    risk_statuses = statuses("risk")

    tasks_total = len(task_statuses)
    tasks_completed = task_statuses.count("completed")
    tasks_blocked = task_statuses.count("blocked")
    task_rate = tasks_completed / tasks_total * 100 if tasks_total else 0

    milestones_total = len(milestone_statuses)
    milestones_reached = milestone_statuses.count("reached")
    milestones_missed = milestone_statuses.count("missed")

    issues_total = len(issue_statuses)
    issues_resolved = issue_statuses.count("resolved")
    issues_open = issues_total - issues_resolved

    risks_total = len(risk_statuses)
    risks_mitigated = sum(1 for s in risk_statuses if s in ("mitigating", "avoided"))
    risks_active = sum(1 for s in risk_statuses if s in ("identified", "monitoring"))

    timeline_progress, behind = schedule_status(info.start, info.end, task_rate, today)

    factors = [
        _ratio_factor(tasks_completed, tasks_total),
        _inverse_factor(tasks_blocked, tasks_total, weight=200),
        _ratio_factor(milestones_reached, milestones_total),
        _inverse_factor(milestones_missed, milestones_total, weight=200),
        _ratio_factor(issues_resolved, issues_total),
        _inverse_factor(issues_open, issues_total),
        _ratio_factor(risks_mitigated, risks_total),
        _inverse_factor(risks_active, risks_total),
        BEHIND_SCHEDULE_FACTOR if behind else ON_SCHEDULE_FACTOR,
    ]
    score = round(sum(factors) / len(factors))
    category = health_category(score)

    open_issues = [
        i for i in issues
        if snapshot.fields(i).status not in CLOSED_ISSUE_STATUSES
    ]
    open_issues.sort(key=lambda i: _ISSUE_RANK.get(snapshot.fields(i).priority, 1))

    return {
        "project": project,
        "healthScore": score,
        "healthStatus": category,
        "factors": [round(f) for f in factors],
        "metrics": {
            "tasks": {
                "total": tasks_total,
                "completed": tasks_completed,
                "blocked": tasks_blocked,
                "completionRate": round(task_rate),
            },
            "milestones": {
                "total": milestones_total,
                "reached": milestones_reached,
                "missed": milestones_missed,
                "completionRate": percent(milestones_reached, milestones_total),
            },
            "issues": {
                "total": issues_total,
                "resolved": issues_resolved,
                "open": issues_open,
                "resolutionRate": percent(issues_resolved, issues_total),
            },
            "risks": {
                "total": risks_total,
                "mitigated": risks_mitigated,
                "active": risks_active,
                "mitigationRate": percent(risks_mitigated, risks_total),
            },
            "timeline": {
                "progress": timeline_progress,
                "behindSchedule": behind,
            },
        },
        "topIssues": open_issues[:TOP_ISSUE_LIMIT],
        "recommendations": health_recommendations(
            category, tasks_blocked, issues_open, risks_active, behind
        ),
    }
