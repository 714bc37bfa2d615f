"""Indexed, read-only view of one loaded graph."""

from collections import defaultdict

from ..core import (
    Entity,
    Relation,
    KnowledgeGraph,
    EntityFields,
    ProjectNotFoundError,
    UnknownEntityError,
    parse_fields,
)
from .status_index import StatusTable


class GraphSnapshot:
    """
    Name and adjacency indexes over a graph loaded for a single call.

    Field structs are parsed lazily and cached per entity. The snapshot is
    discarded at the end of the call, so nothing here is ever invalidated.
    """

    def __init__(self, graph: KnowledgeGraph):
        self.entities: list[Entity] = graph["entities"]
        self.relations: list[Relation] = graph["relations"]

        self._by_name: dict[str, Entity] = {}
        for entity in self.entities:
            self._by_name.setdefault(entity["name"], entity)

        self._outgoing: dict[str, list[Relation]] = defaultdict(list)
        self._incoming: dict[str, list[Relation]] = defaultdict(list)
        for relation in self.relations:
            self._outgoing[relation["from"]].append(relation)
            self._incoming[relation["to"]].append(relation)

        self._fields: dict[str, EntityFields] = {}
        self.statuses = StatusTable.from_relations(self.relations)

    # ========================================================================
    # Lookup
    # ========================================================================

    def get(self, name: str, entity_type: str | None = None) -> Entity | None:
        entity = self._by_name.get(name)
        if entity is None:
            return None
        if entity_type is not None and entity["entityType"] != entity_type:
            return None
        return entity

    def require(self, name: str, entity_type: str | None = None, error=UnknownEntityError) -> Entity:
        """Like get(), but raises error(name) when absent."""
        entity = self.get(name, entity_type)
        if entity is None:
            raise error(name)
        return entity

    def require_project(self, name: str) -> Entity:
        return self.require(name, "project", ProjectNotFoundError)

    def fields(self, entity: Entity) -> EntityFields:
        """Typed observation fields for an entity."""
        name = entity["name"]
        if name not in self._fields:
            self._fields[name] = parse_fields(entity)
        return self._fields[name]

    def of_type(self, entity_type: str) -> list[Entity]:
        return [e for e in self.entities if e["entityType"] == entity_type]

    # ========================================================================
    # Adjacency
    # ========================================================================

    def outgoing(self, name: str, relation_type: str | None = None) -> list[Relation]:
        return [
            r for r in self._outgoing.get(name, [])
            if relation_type is None or r["relationType"] == relation_type
        ]

    def incoming(self, name: str, relation_type: str | None = None) -> list[Relation]:
        return [
            r for r in self._incoming.get(name, [])
            if relation_type is None or r["relationType"] == relation_type
        ]

    def sources(self, to: str, relation_types, entity_type: str | None = None) -> list[Entity]:
        """
        Entities with a relation of one of relation_types pointing at `to`,
        in relation order, without duplicates.
        """
        if isinstance(relation_types, str):
            relation_types = (relation_types,)
        found: dict[str, Entity] = {}
        for relation in self._incoming.get(to, []):
            if relation["relationType"] not in relation_types:
                continue
            entity = self.get(relation["from"], entity_type)
            if entity is not None:
                found.setdefault(entity["name"], entity)
        return list(found.values())

    def targets(self, frm: str, relation_types, entity_type: str | None = None) -> list[Entity]:
        """Entities that `frm` points at through relation_types, in relation order."""
        if isinstance(relation_types, str):
            relation_types = (relation_types,)
        found: dict[str, Entity] = {}
        for relation in self._outgoing.get(frm, []):
            if relation["relationType"] not in relation_types:
                continue
            entity = self.get(relation["to"], entity_type)
            if entity is not None:
                found.setdefault(entity["name"], entity)
        return list(found.values())

    def part_of(self, project: str, entity_type: str) -> list[Entity]:
        """Entities of entity_type linked part_of the project, in entity order."""
        members = {r["from"] for r in self.incoming(project, "part_of")}
        return [
            e for e in self.entities
            if e["entityType"] == entity_type and e["name"] in members
        ]

    def project_of(self, name: str) -> Entity | None:
        """First project the entity is part_of."""
        projects = self.targets(name, "part_of", "project")
        return projects[0] if projects else None

    def assignee_of(self, task: str) -> str | None:
        members = self.targets(task, "assigned_to", "teamMember")
        return members[0]["name"] if members else None
