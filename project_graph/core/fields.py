"""
Typed views over "Key: value" observations.

Each entity kind gets a frozen struct parsed once from its observations,
so analytics read attributes instead of scanning strings.
"""

from dataclasses import dataclass, field
import datetime as dt

from .utils import observation_value, parse_date


@dataclass(frozen=True)
class EntityFields:
    """Fields shared by every kind."""
    description: str | None = None


@dataclass(frozen=True)
class ProjectFields(EntityFields):
    start_date: str | None = None
    end_date: str | None = None
    priority: str | None = None
    status: str = "planning"
    goal: str | None = None
    budget: str | None = None

    @property
    def start(self) -> dt.date | None:
        return parse_date(self.start_date)

    @property
    def end(self) -> dt.date | None:
        return parse_date(self.end_date)


@dataclass(frozen=True)
class TaskFields(EntityFields):
    status: str = "not_started"
    due_date: str | None = None
    priority: str | None = None

    @property
    def due(self) -> dt.date | None:
        return parse_date(self.due_date)


@dataclass(frozen=True)
class MilestoneFields(EntityFields):
    date: str | None = None
    status: str = "planned"
    criteria: str | None = None

    @property
    def when(self) -> dt.date | None:
        return parse_date(self.date)


@dataclass(frozen=True)
class TeamMemberFields(EntityFields):
    role: str | None = None
    skills: str | None = None
    availability: str | None = None


@dataclass(frozen=True)
class ResourceFields(EntityFields):
    type: str | None = None
    availability: str | None = None
    capacity: str | None = None
    cost: str | None = None


@dataclass(frozen=True)
class RiskFields(EntityFields):
    likelihood: str | None = None
    impact: str | None = None
    status: str = "identified"
    mitigation: str | None = None


@dataclass(frozen=True)
class IssueFields(EntityFields):
    status: str = "identified"
    priority: str | None = None


@dataclass(frozen=True)
class DecisionFields(EntityFields):
    date: str | None = None
    status: str = "proposed"
    rationale: str | None = None
    alternatives: str | None = None

    @property
    def when(self) -> dt.date | None:
        return parse_date(self.date)


@dataclass(frozen=True)
class _FieldMap:
    cls: type
    keys: dict[str, str] = field(default_factory=dict)


# attribute -> observation prefix
_FIELD_MAPS = {
    "project": _FieldMap(ProjectFields, {
        "description": "Description", "start_date": "StartDate", "end_date": "EndDate",
        "priority": "Priority", "status": "Status", "goal": "Goal", "budget": "Budget",
    }),
    "task": _FieldMap(TaskFields, {
        "description": "Description", "status": "Status", "due_date": "DueDate",
        "priority": "Priority",
    }),
    "milestone": _FieldMap(MilestoneFields, {
        "description": "Description", "date": "Date", "status": "Status",
        "criteria": "Criteria",
    }),
    "teamMember": _FieldMap(TeamMemberFields, {
        "role": "Role", "skills": "Skills", "availability": "Availability",
    }),
    "resource": _FieldMap(ResourceFields, {
        "type": "Type", "availability": "Availability", "capacity": "Capacity",
        "cost": "Cost",
    }),
    "risk": _FieldMap(RiskFields, {
        "description": "Description", "likelihood": "Likelihood", "impact": "Impact",
        "status": "Status", "mitigation": "Mitigation",
    }),
    "issue": _FieldMap(IssueFields, {
        "description": "Description", "status": "Status", "priority": "Priority",
    }),
    "decision": _FieldMap(DecisionFields, {
        "description": "Description", "date": "Date", "status": "Status",
        "rationale": "Rationale", "alternatives": "Alternatives",
    }),
}
_GENERIC = _FieldMap(EntityFields, {"description": "Description"})


def parse_fields(entity: dict) -> EntityFields:
    """Build the field struct matching entity["entityType"]."""
    field_map = _FIELD_MAPS.get(entity.get("entityType"), _GENERIC)
    observations = entity.get("observations", [])
    values = {}
    for attr, key in field_map.keys.items():
        value = observation_value(observations, key)
        # Empty values fall back to the kind's default
        if value:
            values[attr] = value
    return field_map.cls(**values)
