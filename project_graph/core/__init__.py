"""Core project graph components."""

from .types import Entity, Relation, KnowledgeGraph, ObservationDeletion
from .constants import *
from .exceptions import *
from .fields import (
    EntityFields,
    ProjectFields,
    TaskFields,
    MilestoneFields,
    TeamMemberFields,
    ResourceFields,
    RiskFields,
    IssueFields,
    DecisionFields,
    parse_fields,
)
from .persistence import JsonDocument, GraphPersistence, SessionPersistence
from .utils import (
    relation_key,
    validate_entity_type,
    validate_relation_type,
    observation_value,
    parse_date,
    parse_int_prefix,
    percent,
    date_sort_key,
    generate_session_id,
    utc_timestamp,
)

__all__ = [
    # Types
    "Entity",
    "Relation",
    "KnowledgeGraph",
    "ObservationDeletion",
    # Constants
    "ENTITY_TYPES",
    "RELATION_TYPES",
    "STATUS_VALUES",
    "PRIORITY_VALUES",
    "STATUS_KIND",
    "PRIORITY_KIND",
    "KIND_RELATIONS",
    "KIND_VALUES",
    "STATUS_ALIASES",
    "TEAM_RELATIONS",
    "SESSION_STAGES",
    "DEFAULT_DEPENDENCY_DEPTH",
    "DEFAULT_RELATED_DEPTH",
    "MAX_RECENT_BACKUPS",
    "BACKUP_INTERVAL_SECONDS",
    # Exceptions
    "KGError",
    "ValidationError",
    "InvalidTypeError",
    "InvalidRelationTypeError",
    "InvalidValueError",
    "InvalidStageError",
    "NotFoundError",
    "UnknownEntityError",
    "ProjectNotFoundError",
    "TaskNotFoundError",
    "TeamMemberNotFoundError",
    "MilestoneNotFoundError",
    "ResourceNotFoundError",
    "SessionNotFoundError",
    "ConflictError",
    "DuplicateNameError",
    "DuplicateRelationError",
    "SessionCompletedError",
    "StorageError",
    # Fields
    "EntityFields",
    "ProjectFields",
    "TaskFields",
    "MilestoneFields",
    "TeamMemberFields",
    "ResourceFields",
    "RiskFields",
    "IssueFields",
    "DecisionFields",
    "parse_fields",
    # Persistence
    "JsonDocument",
    "GraphPersistence",
    "SessionPersistence",
    # Utils
    "relation_key",
    "validate_entity_type",
    "validate_relation_type",
    "observation_value",
    "parse_date",
    "parse_int_prefix",
    "percent",
    "date_sort_key",
    "generate_session_id",
    "utc_timestamp",
]
