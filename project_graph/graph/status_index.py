"""
Status and priority encoded as relations.

Each subject carries at most one has_status and one has_priority relation,
pointing at a synthetic entity named "status:<value>" or
"priority:<value>". In memory the current values live in a side-table
keyed (entityName, kind), rebuilt for every loaded graph.
"""

import logging

from ..core import (
    Relation,
    KnowledgeGraph,
    KIND_RELATIONS,
    KIND_VALUES,
    STATUS_KIND,
    PRIORITY_KIND,
    InvalidValueError,
    UnknownEntityError,
)

logger = logging.getLogger(__name__)


def synthetic_name(kind: str, value: str) -> str:
    return f"{kind}:{value}"


def synthetic_value(name: str) -> str:
    """Value part of a synthetic entity name ("status:active" -> "active")."""
    _, sep, value = name.partition(":")
    return value if sep else name


class StatusTable:
    """(entityName, kind) -> value side-table."""

    def __init__(self):
        self._values: dict[tuple[str, str], str] = {}

    @classmethod
    def from_relations(cls, relations: list[Relation]) -> "StatusTable":
        """Build from has_status/has_priority relations. The first one per subject wins."""
        table = cls()
        kinds = {rel: kind for kind, rel in KIND_RELATIONS.items()}
        for relation in relations:
            kind = kinds.get(relation["relationType"])
            if kind is not None:
                table._values.setdefault((relation["from"], kind), synthetic_value(relation["to"]))
        return table

    def get(self, name: str, kind: str) -> str | None:
        return self._values.get((name, kind))

    def status(self, name: str) -> str | None:
        return self.get(name, STATUS_KIND)

    def priority(self, name: str) -> str | None:
        return self.get(name, PRIORITY_KIND)


class StatusIndex:
    """Reads and replaces the status/priority of entities through a GraphStore."""

    def __init__(self, store):
        self.store = store

    def initialize_status_and_priority(self) -> int:
        """
        Ensure one synthetic entity exists per status and priority value.
        Idempotent. Returns the number of entities created.
        """
        graph = self.store.load()
        created = sum(
            self._ensure_synthetic(graph, kind, value)
            for kind, values in KIND_VALUES.items()
            for value in values
        )
        if created:
            self.store.save(graph)
            logger.info(f"Created {created} status/priority entities")
        return created

    def get_entity_status(self, entity_name: str) -> str | None:
        return self.store.snapshot().statuses.status(entity_name)

    def get_entity_priority(self, entity_name: str) -> str | None:
        return self.store.snapshot().statuses.priority(entity_name)

    def set_entity_status(self, entity_name: str, value: str) -> None:
        self._set(entity_name, STATUS_KIND, value)

    def set_entity_priority(self, entity_name: str, value: str) -> None:
        self._set(entity_name, PRIORITY_KIND, value)

    def _set(self, entity_name: str, kind: str, value: str) -> None:
        """
        Replace the subject's relation of this kind.
        Raises InvalidValueError or UnknownEntityError before any write.
        """
        if value not in KIND_VALUES[kind]:
            raise InvalidValueError(kind, value, KIND_VALUES[kind])

        graph = self.store.load()
        if not any(e["name"] == entity_name for e in graph["entities"]):
            raise UnknownEntityError(entity_name)

        self._ensure_synthetic(graph, kind, value)

        relation_type = KIND_RELATIONS[kind]
        graph["relations"] = [
            r for r in graph["relations"]
            if not (r["from"] == entity_name and r["relationType"] == relation_type)
        ]
        graph["relations"].append({
            "from": entity_name,
            "to": synthetic_name(kind, value),
            "relationType": relation_type,
        })
        self.store.save(graph)

        logger.debug(f"Set {kind} of '{entity_name}' to {value}")

    @staticmethod
    def _ensure_synthetic(graph: KnowledgeGraph, kind: str, value: str) -> bool:
        name = synthetic_name(kind, value)
        if any(e["name"] == name for e in graph["entities"]):
            return False
        graph["entities"].append({
            "name": name,
            "entityType": kind,
            "observations": [f"A {value} {kind} value"],
        })
        return True
