"""File-backed graph store: validated CRUD, search and lookup."""

import logging

from ..core import (
    Entity,
    Relation,
    KnowledgeGraph,
    ObservationDeletion,
    GraphPersistence,
    DuplicateNameError,
    DuplicateRelationError,
    UnknownEntityError,
    ValidationError,
    relation_key,
    validate_entity_type,
    validate_relation_type,
)
from .snapshot import GraphSnapshot

logger = logging.getLogger(__name__)


class GraphStore:
    """
    Canonical owner of entities and relations.

    Every call reloads the document and every mutation writes the whole
    graph back; nothing is cached between calls.
    """

    def __init__(self, persistence: GraphPersistence):
        self.persistence = persistence

    # ========================================================================
    # Loading and Saving
    # ========================================================================

    def load(self) -> KnowledgeGraph:
        """Read the persisted graph. Never raises."""
        return self.persistence.load()

    def save(self, graph: KnowledgeGraph) -> None:
        """Overwrite the persisted graph. Raises StorageError on failure."""
        self.persistence.save(graph)

    def snapshot(self) -> GraphSnapshot:
        """Fresh indexed read view of the persisted graph."""
        return GraphSnapshot(self.load())

    # ========================================================================
    # Reads
    # ========================================================================

    def read_graph(self) -> KnowledgeGraph:
        return self.load()

    def search_nodes(self, query: str) -> KnowledgeGraph:
        """
        Case-insensitive substring search.

        Matches entity names, types and observations, plus relations whose
        type or observations match. Endpoints of matching relations are
        added to the entity set so the result is a closed subgraph.
        """
        graph = self.load()
        needle = query.lower()

        entities = [
            e for e in graph["entities"]
            if needle in e["name"].lower()
            or needle in e["entityType"].lower()
            or any(needle in o.lower() for o in e.get("observations", []))
        ]
        names = {e["name"] for e in entities}

        relations = [r for r in graph["relations"] if r["from"] in names and r["to"] in names]
        seen = {relation_key(r) for r in relations}
        by_name = {e["name"]: e for e in graph["entities"]}

        for relation in graph["relations"]:
            key = relation_key(relation)
            if key in seen:
                continue
            matches = (
                needle in relation["relationType"].lower()
                or any(needle in o.lower() for o in relation.get("observations") or [])
            )
            if not matches:
                continue

            relation_entities = [by_name.get(relation["from"]), by_name.get(relation["to"])]
            if None in relation_entities:
                # Dangling endpoint; keep the subgraph closed
                continue

            seen.add(key)
            relations.append(relation)
            for entity in relation_entities:
                if entity["name"] not in names:
                    names.add(entity["name"])
                    entities.append(entity)

        return {"entities": entities, "relations": relations}

    def open_nodes(self, names: list[str]) -> KnowledgeGraph:
        """Exact-name lookup plus relations among the requested names."""
        graph = self.load()
        wanted = set(names)
        return {
            "entities": [e for e in graph["entities"] if e["name"] in wanted],
            "relations": [
                r for r in graph["relations"]
                if r["from"] in wanted and r["to"] in wanted
            ],
        }

    # ========================================================================
    # Writes
    # ========================================================================

    def create_entities(self, entities: list[Entity]) -> list[Entity]:
        """
        Append new entities. The whole batch is validated first.
        Raises DuplicateNameError or InvalidTypeError.
        """
        graph = self.load()
        taken = {e["name"] for e in graph["entities"]}

        new_entities = []
        for entity in entities:
            name = entity.get("name")
            if not isinstance(name, str) or not name:
                raise ValidationError("Entity name must be a non-empty string")
            if name in taken:
                raise DuplicateNameError(name)
            validate_entity_type(entity.get("entityType"))
            taken.add(name)

            new_entity: Entity = {
                "name": name,
                "entityType": entity["entityType"],
                "observations": list(entity.get("observations") or []),
            }
            if entity.get("embedding") is not None:
                new_entity["embedding"] = list(entity["embedding"])
            new_entities.append(new_entity)

        graph["entities"].extend(new_entities)
        self.save(graph)

        logger.debug(f"Created {len(new_entities)} entities")
        return new_entities

    def create_relations(self, relations: list[Relation]) -> list[Relation]:
        """
        Append new relations. The whole batch is validated first.
        Raises UnknownEntityError, InvalidRelationTypeError or DuplicateRelationError.
        """
        graph = self.load()
        names = {e["name"] for e in graph["entities"]}
        existing = {relation_key(r) for r in graph["relations"]}

        new_relations = []
        for relation in relations:
            if relation.get("from") not in names:
                raise UnknownEntityError(relation.get("from"))
            if relation.get("to") not in names:
                raise UnknownEntityError(relation.get("to"))
            validate_relation_type(relation.get("relationType"))

            key = relation_key(relation)
            if key in existing:
                raise DuplicateRelationError(*key)
            existing.add(key)

            new_relation: Relation = {
                "from": relation["from"],
                "to": relation["to"],
                "relationType": relation["relationType"],
            }
            if relation.get("observations"):
                new_relation["observations"] = list(relation["observations"])
            new_relations.append(new_relation)

        graph["relations"].extend(new_relations)
        self.save(graph)

        logger.debug(f"Created {len(new_relations)} relations")
        return new_relations

    def add_observations(self, entity_name: str, observations: list[str]) -> Entity:
        """Append observations to an entity. Raises UnknownEntityError."""
        graph = self.load()
        entity = next((e for e in graph["entities"] if e["name"] == entity_name), None)
        if entity is None:
            raise UnknownEntityError(entity_name)

        entity.setdefault("observations", []).extend(observations)
        self.save(graph)

        logger.debug(f"Added {len(observations)} observations to '{entity_name}'")
        return entity

    def delete_entities(self, entity_names: list[str]) -> dict:
        """Delete entities and every relation touching them. Unknown names are ignored."""
        graph = self.load()
        doomed = set(entity_names)

        before_entities = len(graph["entities"])
        before_relations = len(graph["relations"])
        graph["entities"] = [e for e in graph["entities"] if e["name"] not in doomed]
        graph["relations"] = [
            r for r in graph["relations"]
            if r["from"] not in doomed and r["to"] not in doomed
        ]
        self.save(graph)

        result = {
            "deletedEntities": before_entities - len(graph["entities"]),
            "deletedRelations": before_relations - len(graph["relations"]),
        }
        logger.debug(f"Deleted entities {sorted(doomed)}: {result}")
        return result

    def delete_observations(self, deletions: list[ObservationDeletion]) -> int:
        """
        Remove observations by exact match.
        Returns the number of observations removed.
        """
        graph = self.load()
        by_name = {e["name"]: e for e in graph["entities"]}

        removed = 0
        for deletion in deletions:
            entity = by_name.get(deletion["entityName"])
            if entity is None:
                continue
            doomed = set(deletion["observations"])
            kept = [o for o in entity.get("observations", []) if o not in doomed]
            removed += len(entity.get("observations", [])) - len(kept)
            entity["observations"] = kept

        self.save(graph)
        return removed

    def delete_relations(self, relations: list[Relation]) -> int:
        """Remove relations matching exact (from, to, relationType) triples."""
        graph = self.load()
        doomed = {relation_key(r) for r in relations}

        before = len(graph["relations"])
        graph["relations"] = [r for r in graph["relations"] if relation_key(r) not in doomed]
        self.save(graph)
        return before - len(graph["relations"])
