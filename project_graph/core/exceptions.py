"""Custom exceptions for project graph operations."""


class KGError(Exception):
    """Base exception for project graph operations."""
    pass


# ----------------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------------

class ValidationError(KGError):
    """Raised when input is outside a closed vocabulary."""
    pass


class InvalidTypeError(ValidationError):
    """Raised for an unknown entity type."""
    def __init__(self, entity_type: str, valid: tuple):
        self.entity_type = entity_type
        super().__init__(
            f"Invalid entity type: {entity_type}. Valid types are: {', '.join(valid)}"
        )


class InvalidRelationTypeError(ValidationError):
    """Raised for an unknown relation type."""
    def __init__(self, relation_type: str, valid: tuple):
        self.relation_type = relation_type
        super().__init__(
            f"Invalid relation type: {relation_type}. Valid types are: {', '.join(valid)}"
        )


class InvalidValueError(ValidationError):
    """Raised for a status or priority value outside its enumeration."""
    def __init__(self, kind: str, value: str, valid: tuple):
        self.kind = kind
        self.value = value
        super().__init__(
            f"Invalid {kind} value: {value}. Valid values are: {', '.join(valid)}"
        )


class InvalidStageError(ValidationError):
    """Raised for an unknown session stage name."""
    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Unknown stage: {stage}")


# ----------------------------------------------------------------------------
# Not found
# ----------------------------------------------------------------------------

class NotFoundError(KGError):
    """Raised when a referenced entity or session is absent."""
    pass


class UnknownEntityError(NotFoundError):
    """Raised when an entity is not found."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Entity '{name}' not found")


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is not found."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Project '{name}' not found")


class TaskNotFoundError(NotFoundError):
    """Raised when a task is not found."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Task '{name}' not found")


class TeamMemberNotFoundError(NotFoundError):
    """Raised when a team member is not found."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Team member '{name}' not found")


class MilestoneNotFoundError(NotFoundError):
    """Raised when a milestone is not part of a project."""
    def __init__(self, name: str, project: str):
        self.name = name
        self.project = project
        super().__init__(f"Milestone '{name}' not found in project '{project}'")


class ResourceNotFoundError(NotFoundError):
    """Raised when a resource is not part of a project."""
    def __init__(self, name: str, project: str):
        self.name = name
        self.project = project
        super().__init__(f"Resource '{name}' not found in project '{project}'")


class SessionNotFoundError(NotFoundError):
    """Raised when a session is not found."""
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            f"Session with ID {session_id} not found. Please start a new session with startsession."
        )


# ----------------------------------------------------------------------------
# Conflicts
# ----------------------------------------------------------------------------

class ConflictError(KGError):
    """Raised when a write collides with existing state."""
    pass


class DuplicateNameError(ConflictError):
    """Raised when an entity name is already taken."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Entity with name {name} already exists")


class DuplicateRelationError(ConflictError):
    """Raised when a relation triple already exists."""
    def __init__(self, from_ref: str, to_ref: str, relation_type: str):
        self.from_ref = from_ref
        self.to_ref = to_ref
        self.relation_type = relation_type
        super().__init__(
            f"Relation from '{from_ref}' to '{to_ref}' with type '{relation_type}' already exists"
        )


class SessionCompletedError(ConflictError):
    """Raised when finalizing a session that was already finalized."""
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} has already been completed")


# ----------------------------------------------------------------------------
# Storage
# ----------------------------------------------------------------------------

class StorageError(KGError):
    """Raised when a persisted document cannot be written."""
    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")
