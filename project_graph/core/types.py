"""Type definitions for the project graph."""

from typing import TypedDict, NotRequired

# 'from' is a keyword, so Relation uses the functional syntax
Relation = TypedDict(
    "Relation",
    {
        "from": str,
        "to": str,
        "relationType": str,
        "observations": NotRequired[list[str]],
    },
)


class Entity(TypedDict):
    """Entity in the project graph."""
    name: str
    entityType: str
    observations: list[str]
    embedding: NotRequired[list[float]]


class KnowledgeGraph(TypedDict):
    """Complete persisted graph."""
    entities: list[Entity]
    relations: list[Relation]


class ObservationDeletion(TypedDict):
    """Observations to remove from one entity."""
    entityName: str
    observations: list[str]
