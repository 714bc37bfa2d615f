"""
Session record models.

A session is an ordered list of records tagged by `type`. Analysis stage
records are further tagged by `stage`, each carrying its own typed
stageData. Everything is stored in its camelCase JSON form.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..core import InvalidStageError, ValidationError


class SessionModel(BaseModel):
    """Base for session payloads: camelCase on the wire, snake_case in code."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Stage payload items
# ============================================================================

class TaskUpdate(SessionModel):
    name: str
    status: str
    progress: str | None = None


class NewTask(SessionModel):
    name: str
    description: str = ""
    priority: str | None = None
    precedes: str | None = None
    follows: str | None = None


class RiskUpdate(SessionModel):
    name: str
    status: str
    impact: str | None = None
    probability: str | None = None


# ============================================================================
# Stage data
# ============================================================================

class SummaryData(SessionModel):
    summary: str = ""
    duration: str = ""
    project: str = ""


class AchievementsData(SessionModel):
    achievements: list[str] = Field(default_factory=list)


class TaskUpdatesData(SessionModel):
    updates: list[TaskUpdate] = Field(default_factory=list)


class NewTasksData(SessionModel):
    tasks: list[NewTask] = Field(default_factory=list)


class ProjectStatusData(SessionModel):
    project_status: str = ""
    project_observation: str = ""


class RiskUpdatesData(SessionModel):
    risks: list[RiskUpdate] = Field(default_factory=list)


class AssemblyData(SessionModel):
    """The mutation batch gathered from the earlier stages."""
    summary: str = ""
    duration: str = "unknown"
    project: str = ""
    achievements: list[str] = Field(default_factory=list)
    task_updates: list[TaskUpdate] = Field(default_factory=list)
    project_status: str = ""
    project_observation: str = ""
    new_tasks: list[NewTask] = Field(default_factory=list)
    risk_updates: list[RiskUpdate] = Field(default_factory=list)


# ============================================================================
# Records
# ============================================================================

class _StageRecord(SessionModel):
    type: Literal["analysis_stage"] = "analysis_stage"
    stage_number: int
    analysis: str = ""
    completed: bool = False


class SummaryStage(_StageRecord):
    stage: Literal["summary"] = "summary"
    stage_data: SummaryData = Field(default_factory=SummaryData)


class AchievementsStage(_StageRecord):
    stage: Literal["achievements"] = "achievements"
    stage_data: AchievementsData = Field(default_factory=AchievementsData)


class TaskUpdatesStage(_StageRecord):
    stage: Literal["taskUpdates"] = "taskUpdates"
    stage_data: TaskUpdatesData = Field(default_factory=TaskUpdatesData)


class NewTasksStage(_StageRecord):
    stage: Literal["newTasks"] = "newTasks"
    stage_data: NewTasksData = Field(default_factory=NewTasksData)


class ProjectStatusStage(_StageRecord):
    stage: Literal["projectStatus"] = "projectStatus"
    stage_data: ProjectStatusData = Field(default_factory=ProjectStatusData)


class RiskUpdatesStage(_StageRecord):
    stage: Literal["riskUpdates"] = "riskUpdates"
    stage_data: RiskUpdatesData = Field(default_factory=RiskUpdatesData)


class AssemblyStage(_StageRecord):
    stage: Literal["assembly"] = "assembly"
    stage_data: AssemblyData = Field(default_factory=AssemblyData)


StageRecord = Annotated[
    Union[
        SummaryStage,
        AchievementsStage,
        TaskUpdatesStage,
        NewTasksStage,
        ProjectStatusStage,
        RiskUpdatesStage,
        AssemblyStage,
    ],
    Field(discriminator="stage"),
]


class ContextLoaded(SessionModel):
    type: Literal["context_loaded"] = "context_loaded"
    timestamp: str
    entity_name: str
    entity_type: str


class SessionCompleted(SessionModel):
    """Completion marker appended when a session is finalized."""
    type: Literal["session_completed"] = "session_completed"
    timestamp: str
    summary: str = ""
    project: str = ""
    achievements: list[str] = Field(default_factory=list)
    completed_tasks: list[str] = Field(default_factory=list)
    created_tasks: list[str] = Field(default_factory=list)
    failures: list[str] = Field(default_factory=list)


SessionRecord = Annotated[
    Union[StageRecord, ContextLoaded, SessionCompleted],
    Field(discriminator="type"),
]

_record_adapter = TypeAdapter(SessionRecord)

STAGE_MODELS: dict[str, type[_StageRecord]] = {
    "summary": SummaryStage,
    "achievements": AchievementsStage,
    "taskUpdates": TaskUpdatesStage,
    "newTasks": NewTasksStage,
    "projectStatus": ProjectStatusStage,
    "riskUpdates": RiskUpdatesStage,
    "assembly": AssemblyStage,
}


def build_stage(stage: str, stage_number: int, analysis: str | None,
                stage_data: dict | None, completed: bool) -> _StageRecord:
    """
    Validate one submitted stage.
    Raises InvalidStageError for an unknown stage name and ValidationError
    for stageData that does not fit the stage.
    """
    model = STAGE_MODELS.get(stage)
    if model is None:
        raise InvalidStageError(stage)

    payload = {"stageNumber": stage_number, "analysis": analysis or "", "completed": completed}
    if stage_data:
        payload["stageData"] = stage_data
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid stageData for stage '{stage}': {e}") from e


def parse_record(raw: dict):
    """Parse a stored record. Returns None for records of unknown shape."""
    try:
        return _record_adapter.validate_python(raw)
    except PydanticValidationError:
        return None
