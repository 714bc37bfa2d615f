"""Chronological view of project dates, milestones and task deadlines."""

from datetime import date

from ..graph import GraphSnapshot

UPCOMING_EVENT_LIMIT = 5


def _event(when: date, raw: str, entity: dict, event_type: str,
           description: str | None = None, status: str | None = None) -> dict:
    return {
        "date": when.isoformat(),
        "rawDate": raw,
        "entity": entity,
        "eventType": event_type,
        "description": description,
        "status": status,
    }


def get_project_timeline(snapshot: GraphSnapshot, project_name: str, today: date) -> dict:
    """
    Events with a parseable date, sorted chronologically (stable), with
    day deltas to their neighbours.

    Raises ProjectNotFoundError.
    """
    project = snapshot.require_project(project_name)
    info = snapshot.fields(project)

    events = []
    if info.start is not None:
        events.append(_event(info.start, info.start_date, project, "project_start", "Project Start"))
    if info.end is not None:
        events.append(_event(info.end, info.end_date, project, "project_end", "Project End"))

    for milestone in snapshot.part_of(project_name, "milestone"):
        fields = snapshot.fields(milestone)
        if fields.when is not None:
            events.append(_event(fields.when, fields.date, milestone, "milestone",
                                 fields.description, fields.status))

    for task in snapshot.part_of(project_name, "task"):
        fields = snapshot.fields(task)
        if fields.due is not None:
            events.append(_event(fields.due, fields.due_date, task, "task",
                                 fields.description, fields.status))

    events.sort(key=lambda e: e["date"])
    dates = [date.fromisoformat(e["date"]) for e in events]

    for i, event in enumerate(events):
        event["daysFromPrevious"] = (dates[i] - dates[i - 1]).days if i > 0 else 0
        event["daysToNext"] = (dates[i + 1] - dates[i]).days if i < len(events) - 1 else 0

    current = next((i for i, d in enumerate(dates) if d >= today), len(events) - 1)

    progress = 0
    duration = 0
    if len(dates) >= 2:
        duration = (dates[-1] - dates[0]).days
        if duration > 0:
            elapsed = (today - dates[0]).days
            progress = min(100, max(0, round(elapsed / duration * 100)))

    return {
        "project": project,
        "timeline": events,
        "currentPosition": current,
        "progressPercentage": progress,
        "projectDuration": duration,
        "upcomingEvents": [e for e, d in zip(events, dates) if d >= today][:UPCOMING_EVENT_LIMIT],
    }
