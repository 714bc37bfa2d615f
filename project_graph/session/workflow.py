"""
Staged session workflow.

A session collects stage records one call at a time. Submitting the
assembly stage with no further stage needed applies the gathered batch to
the graph and appends a completion marker.
"""

import logging
import time
from datetime import date
from typing import Callable

from ..analytics import (
    get_project_overview,
    get_task_dependencies,
    get_team_member_assignments,
)
from ..analytics.milestones import milestone_progress
from ..analytics.resources import resource_allocation
from ..core import (
    PRIORITY_VALUES,
    PRIORITY_KIND,
    RECENT_SESSION_LIMIT,
    STATUS_ALIASES,
    KGError,
    InvalidValueError,
    ProjectNotFoundError,
    SessionCompletedError,
    SessionNotFoundError,
    UnknownEntityError,
    generate_session_id,
    utc_timestamp,
)
from ..graph import GraphSnapshot, GraphStore, StatusIndex
from .models import (
    AssemblyData,
    AssemblyStage,
    ContextLoaded,
    SessionCompleted,
    SummaryStage,
    build_stage,
    parse_record,
)
from .store import SessionStore

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 60
HIGH_PRIORITY_TASK_LIMIT = 10
UPCOMING_MILESTONE_LIMIT = 8
HIGH_PRIORITY_RISK_LIMIT = 5
UPCOMING_MILESTONE_STATUSES = ("planned", "approaching")


def normalize_status(value: str) -> str:
    """Map free-text statuses ("done", "ongoing", ...) onto the status vocabulary."""
    return STATUS_ALIASES.get(value.strip().lower(), value)


def preview(entity: dict) -> str:
    observations = entity.get("observations") or []
    if not observations:
        return "No description"
    text = observations[0]
    return text[:PREVIEW_LENGTH] + ("..." if len(text) > PREVIEW_LENGTH else "")


class SessionWorkflow:
    """Session start, context loading, stage submission and finalization."""

    def __init__(self, graph: GraphStore, status_index: StatusIndex,
                 sessions: SessionStore, today: Callable[[], date]):
        self.graph = graph
        self.status_index = status_index
        self.sessions = sessions
        self.today = today

    # ========================================================================
    # Start and Context
    # ========================================================================

    def start_session(self) -> dict:
        """Create an empty session and return a digest of what needs attention."""
        previous = self.sessions.ids()
        session_id = generate_session_id()
        self.sessions.put(session_id, [])
        logger.info(f"Started session {session_id}")

        snapshot = self.graph.snapshot()
        statuses = snapshot.statuses

        def project_name(entity: dict) -> str | None:
            project = snapshot.project_of(entity["name"])
            return project["name"] if project else None

        projects = [
            {
                "name": p["name"],
                "status": statuses.status(p["name"]),
                "priority": statuses.priority(p["name"]),
                "preview": preview(p),
            }
            for p in snapshot.of_type("project")
            if statuses.status(p["name"]) == "active"
        ]

        tasks = [
            {"name": t["name"], "project": project_name(t), "preview": preview(t)}
            for t in snapshot.of_type("task")
            if statuses.status(t["name"]) == "active" and statuses.priority(t["name"]) == "high"
        ][:HIGH_PRIORITY_TASK_LIMIT]

        milestones = [
            {
                "name": m["name"],
                "project": project_name(m),
                "status": snapshot.fields(m).status,
                "date": snapshot.fields(m).date,
                "preview": preview(m),
            }
            for m in snapshot.of_type("milestone")
            if snapshot.fields(m).status in UPCOMING_MILESTONE_STATUSES
        ][:UPCOMING_MILESTONE_LIMIT]

        risks = [
            {"name": r["name"], "project": project_name(r), "preview": preview(r)}
            for r in snapshot.of_type("risk")
            if statuses.priority(r["name"]) == "high"
        ][:HIGH_PRIORITY_RISK_LIMIT]

        return {
            "sessionId": session_id,
            "recentSessions": self._recent_sessions(previous),
            "activeProjects": projects,
            "highPriorityTasks": tasks,
            "upcomingMilestones": milestones,
            "highPriorityRisks": risks,
        }

    def _recent_sessions(self, session_ids: list[str]) -> list[dict]:
        recent = []
        for session_id in reversed(session_ids[-RECENT_SESSION_LIMIT:]):
            records = [parse_record(r) for r in self.sessions.get(session_id) or []]
            summary = next((r for r in records if isinstance(r, SummaryStage)), None)
            recent.append({
                "id": session_id,
                "project": (summary and summary.stage_data.project) or "Unknown project",
                "summary": (summary and summary.stage_data.summary) or "No summary available",
            })
        return recent

    def load_context(self, entity_name: str, entity_type: str = "project",
                     session_id: str | None = None) -> dict:
        """
        Structured context for one entity, shaped by entity_type.

        Raises UnknownEntityError when the entity is absent. An unknown
        session id is created rather than rejected.
        """
        snapshot = self.graph.snapshot()
        entity = snapshot.require(entity_name)

        if session_id:
            self._record_context_load(session_id, entity_name, entity_type)

        context = {
            "entityType": entity_type,
            "entity": entity,
            "status": snapshot.statuses.status(entity_name),
            "priority": snapshot.statuses.priority(entity_name),
        }
        context.update(self._typed_context(snapshot, entity, entity_type))
        return context

    def _typed_context(self, snapshot: GraphSnapshot, entity: dict, entity_type: str) -> dict:
        name = entity["name"]
        today = self.today()

        if entity_type == "project":
            return {"overview": get_project_overview(snapshot, name, today)}

        if entity_type == "task":
            dependencies = get_task_dependencies(snapshot, name)
            return {
                "dependencies": dependencies,
                "precedes": [r["to"] for r in snapshot.outgoing(name, "precedes")],
                "follows": [r["from"] for r in snapshot.incoming(name, "precedes")],
                "onCriticalPath": name in dependencies["criticalPath"],
            }

        if entity_type == "milestone":
            project = snapshot.project_of(name)
            return {
                "projectName": project["name"] if project else None,
                "progress": milestone_progress(snapshot, entity, today),
            }

        if entity_type == "teamMember":
            return {"assignments": get_team_member_assignments(snapshot, name, today)}

        if entity_type == "resource":
            project = snapshot.project_of(name)
            return {
                "projectName": project["name"] if project else None,
                "allocation": resource_allocation(snapshot, entity),
            }

        return {
            "outgoing": snapshot.outgoing(name),
            "incoming": snapshot.incoming(name),
        }

    def _record_context_load(self, session_id: str, entity_name: str, entity_type: str) -> None:
        records = self.sessions.get(session_id)
        if records is None:
            logger.warning(f"Session {session_id} not found, creating it for context load")
            records = []
        event = ContextLoaded(timestamp=utc_timestamp(), entity_name=entity_name, entity_type=entity_type)
        records.append(event.dump())
        self.sessions.put(session_id, records)

    # ========================================================================
    # Stages
    # ========================================================================

    def submit_stage(self, session_id: str, stage: str, stage_number: int,
                     analysis: str | None = None, stage_data: dict | None = None,
                     next_stage_needed: bool = True, is_revision: bool = False,
                     revises_stage: int | None = None) -> dict:
        """
        Record one stage. Assembly with next_stage_needed=False finalizes.

        Raises SessionNotFoundError, InvalidStageError, ValidationError for
        malformed stageData, SessionCompletedError when finalizing twice,
        and ProjectNotFoundError when the batch needs a project that does
        not exist. All of these are raised before anything is written.
        """
        records = self.sessions.get(session_id)
        if records is None:
            raise SessionNotFoundError(session_id)

        finalizing = stage == "assembly" and not next_stage_needed
        if stage == "assembly":
            if finalizing and self._is_completed(records):
                raise SessionCompletedError(session_id)
            record = AssemblyStage(
                stage_number=stage_number,
                analysis="Final assembly of end-session arguments",
                stage_data=self._assemble(records),
                completed=True,
            )
            if finalizing:
                self._check_batch(record.stage_data)
        else:
            record = build_stage(stage, stage_number, analysis, stage_data,
                                 completed=not next_stage_needed)

        if is_revision and revises_stage is not None:
            records = self._revise(session_id, records, record.dump(), revises_stage)
        else:
            records.append(record.dump())
        self.sessions.put(session_id, records)

        result = {
            "stageCompleted": stage,
            "nextStageNeeded": next_stage_needed,
            "stageResult": record.dump(),
        }
        if stage == "assembly" and not finalizing:
            result["endSessionArgs"] = record.stage_data.dump()
        if finalizing:
            result["sessionRecorded"] = True
            result["summaryMessage"] = self._finalize(session_id, records, record.stage_data)
        return result

    @staticmethod
    def _is_completed(records: list[dict]) -> bool:
        return any(isinstance(parse_record(r), SessionCompleted) for r in records)

    @staticmethod
    def _revise(session_id: str, records: list[dict], record: dict, revises_stage: int) -> list[dict]:
        """Replace the revises_stage-th analysis stage in place, or append if there is none."""
        positions = [i for i, r in enumerate(records) if r.get("type") == "analysis_stage"]
        if 1 <= revises_stage <= len(positions):
            records[positions[revises_stage - 1]] = record
        else:
            logger.warning(
                f"Session {session_id}: revision of stage {revises_stage} "
                f"but only {len(positions)} stages recorded, appending"
            )
            records.append(record)
        return records

    @staticmethod
    def _assemble(records: list[dict]) -> AssemblyData:
        """Batch built from the most recent record of each earlier stage."""
        latest = {}
        for raw in records:
            record = parse_record(raw)
            stage = getattr(record, "stage", None)
            if stage is not None and stage != "assembly":
                latest[stage] = record.stage_data

        summary = latest.get("summary")
        status = latest.get("projectStatus")
        return AssemblyData(
            summary=summary.summary if summary else "",
            duration=(summary.duration if summary else "") or "unknown",
            project=summary.project if summary else "",
            achievements=latest["achievements"].achievements if "achievements" in latest else [],
            task_updates=latest["taskUpdates"].updates if "taskUpdates" in latest else [],
            project_status=status.project_status if status else "",
            project_observation=status.project_observation if status else "",
            new_tasks=latest["newTasks"].tasks if "newTasks" in latest else [],
            risk_updates=latest["riskUpdates"].risks if "riskUpdates" in latest else [],
        )

    def _check_batch(self, data: AssemblyData) -> None:
        needs_project = data.achievements or data.new_tasks or data.risk_updates
        if needs_project and self.graph.snapshot().get(data.project, "project") is None:
            raise ProjectNotFoundError(data.project)

    # ========================================================================
    # Finalization
    # ========================================================================

    def _finalize(self, session_id: str, records: list[dict], data: AssemblyData) -> str:
        """
        Apply the batch. Task updates, new tasks and risk updates are
        applied one item at a time; a failing item is logged and skipped.
        """
        achievements = self._record_achievements(data)
        failures: list[str] = []

        completed_tasks = []
        for update in data.task_updates:
            try:
                status = normalize_status(update.status)
                self.status_index.set_entity_status(update.name, status)
                if update.progress:
                    self.graph.add_observations(update.name, [f"Progress: {update.progress}"])
                if status == "completed":
                    completed_tasks.append(update.name)
            except KGError as e:
                logger.error(f"Error updating task {update.name}: {e}")
                failures.append(f"task update {update.name}: {e}")

        if data.project and data.project_status:
            try:
                self.status_index.set_entity_status(data.project, normalize_status(data.project_status))
                if data.project_observation:
                    self.graph.add_observations(data.project, [data.project_observation])
            except KGError as e:
                logger.error(f"Error updating project {data.project}: {e}")
                failures.append(f"project {data.project}: {e}")

        created_tasks = []
        for task in data.new_tasks:
            try:
                self._create_task(data.project, task)
                created_tasks.append(task.name)
            except KGError as e:
                logger.error(f"Error creating task {task.name}: {e}")
                failures.append(f"new task {task.name}: {e}")

        for risk in data.risk_updates:
            try:
                self._update_risk(data.project, risk)
            except KGError as e:
                logger.error(f"Error updating risk {risk.name}: {e}")
                failures.append(f"risk {risk.name}: {e}")

        marker = SessionCompleted(
            timestamp=utc_timestamp(),
            summary=data.summary,
            project=data.project,
            achievements=achievements,
            completed_tasks=completed_tasks,
            created_tasks=created_tasks,
            failures=failures,
        )
        records.append(marker.dump())
        self.sessions.put(session_id, records)
        logger.info(
            f"Finalized session {session_id}: {len(achievements)} achievements, "
            f"{len(completed_tasks)} completed tasks, {len(created_tasks)} new tasks, "
            f"{len(failures)} failures"
        )

        return summary_message(data, failures)

    def _record_achievements(self, data: AssemblyData) -> list[str]:
        if not data.achievements:
            return []
        stamp = int(time.time() * 1000)
        names = [f"achievement_{stamp}_{i}" for i in range(len(data.achievements))]
        self.graph.create_entities([
            {"name": name, "entityType": "decision", "observations": [text]}
            for name, text in zip(names, data.achievements)
        ])
        self.graph.create_relations([
            {"from": name, "to": data.project, "relationType": "part_of"}
            for name in names
        ])
        return names

    def _create_task(self, project: str, task) -> None:
        if task.priority and task.priority not in PRIORITY_VALUES:
            raise InvalidValueError(PRIORITY_KIND, task.priority, PRIORITY_VALUES)
        for neighbour in (task.precedes, task.follows):
            if neighbour and self.graph.snapshot().get(neighbour) is None:
                raise UnknownEntityError(neighbour)

        description = f"Description: {task.description}" if task.description else "No description"
        self.graph.create_entities([
            {"name": task.name, "entityType": "task", "observations": [description]}
        ])
        if task.priority:
            self.status_index.set_entity_priority(task.name, task.priority)
        self.status_index.set_entity_status(task.name, "active")

        relations = [{"from": task.name, "to": project, "relationType": "part_of"}]
        if task.precedes:
            relations.append({"from": task.name, "to": task.precedes, "relationType": "precedes"})
        if task.follows:
            relations.append({"from": task.follows, "to": task.name, "relationType": "precedes"})
        self.graph.create_relations(relations)

    def _update_risk(self, project: str, risk) -> None:
        if self.graph.snapshot().get(risk.name, "risk") is None:
            self.graph.create_entities([{"name": risk.name, "entityType": "risk", "observations": []}])
            self.graph.create_relations([{"from": risk.name, "to": project, "relationType": "part_of"}])

        self.status_index.set_entity_status(risk.name, normalize_status(risk.status))

        observations = []
        if risk.impact:
            observations.append(f"Impact: {risk.impact}")
        if risk.probability:
            observations.append(f"Probability: {risk.probability}")
        if observations:
            self.graph.add_observations(risk.name, observations)


def summary_message(data: AssemblyData, failures: list[str]) -> str:
    """Markdown summary of a finalized session."""

    def bullets(lines: list[str], empty: str) -> str:
        return "\n".join(f"- {line}" for line in lines) or empty

    task_lines = [
        f"{t.name}: {t.status}" + (f" (Progress: {t.progress})" if t.progress else "")
        for t in data.task_updates
    ]
    new_task_lines = [
        f"{t.name}: {t.description or 'No description'} (Priority: {t.priority or 'N/A'})"
        for t in data.new_tasks
    ]
    risk_lines = [
        f"{r.name}: Status {r.status} (Impact: {r.impact or 'N/A'}, Probability: {r.probability or 'N/A'})"
        for r in data.risk_updates
    ]
    if data.project and data.project_status:
        project_line = f"Project {data.project} has been updated to: {data.project_status}"
    else:
        project_line = "Project status unchanged."

    sections = [
        "# Project Session Recorded",
        f"Recorded the project session for {data.project or 'no project'}.",
        "## Decisions Documented\n" + bullets(data.achievements, "No decisions recorded."),
        "## Task Updates\n" + bullets(task_lines, "No task updates."),
        "## Project Status\n" + project_line,
        "## New Tasks Added\n" + bullets(new_task_lines, "No new tasks added."),
        "## Risk Updates\n" + bullets(risk_lines, "No risk updates."),
    ]
    if failures:
        sections.append("## Skipped Items\n" + bullets(failures, ""))
    sections.append("## Session Summary\n" + (data.summary or "No summary provided."))
    return "\n\n".join(sections)
