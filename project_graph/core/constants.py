"""Constants for project graph operations."""

# Entity and relation vocabularies
ENTITY_TYPES = (
    "project",
    "task",
    "milestone",
    "resource",
    "teamMember",
    "note",
    "document",
    "issue",
    "risk",
    "decision",
    "dependency",
    "component",
    "stakeholder",
    "change",
    "status",
    "priority",
)

RELATION_TYPES = (
    "part_of",
    "depends_on",
    "assigned_to",
    "created_by",
    "modified_by",
    "related_to",
    "blocks",
    "manages",
    "contributes_to",
    "documents",
    "scheduled_for",
    "responsible_for",
    "reports_to",
    "categorized_as",
    "required_for",
    "discovered_in",
    "resolved_by",
    "impacted_by",
    "stakeholder_of",
    "prioritized_as",
    "has_status",
    "has_priority",
    "precedes",
)

# Status/priority encoded as relations to synthetic entities
STATUS_VALUES = ("active", "completed", "pending", "blocked", "cancelled")
PRIORITY_VALUES = ("high", "low")

STATUS_KIND = "status"
PRIORITY_KIND = "priority"
KIND_RELATIONS = {STATUS_KIND: "has_status", PRIORITY_KIND: "has_priority"}
KIND_VALUES = {STATUS_KIND: STATUS_VALUES, PRIORITY_KIND: PRIORITY_VALUES}

# Free-text session statuses mapped onto STATUS_VALUES
STATUS_ALIASES = {
    "completed": "completed",
    "done": "completed",
    "finished": "completed",
    "in_progress": "active",
    "ongoing": "active",
    "started": "active",
    "active": "active",
    "not_started": "pending",
    "planned": "pending",
    "upcoming": "pending",
    "pending": "pending",
    "blocked": "blocked",
    "on_hold": "blocked",
    "cancelled": "cancelled",
    "canceled": "cancelled",
    "abandoned": "cancelled",
}

# Team membership relations pointing at a project
TEAM_RELATIONS = ("assigned_to", "manages", "contributes_to")

# Read by resource allocation; not creatable through the store
RESOURCE_TASK_RELATION = "requires"
RESOURCE_MEMBER_RELATION = "uses"

# Analytics thresholds
DEFAULT_DEPENDENCY_DEPTH = 2
DEFAULT_RELATED_DEPTH = 1
UPCOMING_WINDOW_DAYS = 7
HIGH_RISK_SCORE = 15
OVERALLOCATED_PERCENT = 90
UNDERUTILIZED_PERCENT = 20
SCHEDULE_SLIP_POINTS = 15
NEUTRAL_FACTOR = 50
ON_SCHEDULE_FACTOR = 70
BEHIND_SCHEDULE_FACTOR = 30

# Session
SESSION_ID_PREFIX = "proj"
SESSION_STAGES = (
    "summary",
    "achievements",
    "taskUpdates",
    "newTasks",
    "projectStatus",
    "riskUpdates",
    "assembly",
)
RECENT_SESSION_LIMIT = 3

# Backup retention
MAX_RECENT_BACKUPS = 3
BACKUP_INTERVAL_SECONDS = 3600
