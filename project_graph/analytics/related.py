"""Connections between projects through shared people, resources and dependencies."""

from ..core import DEFAULT_RELATED_DEPTH, TEAM_RELATIONS
from ..graph import GraphSnapshot

TEAM_WEIGHT = 2
RESOURCE_WEIGHT = 1.5
DEPENDENCY_WEIGHT = 3
STAKEHOLDER_WEIGHT = 1

CONNECTION_TYPES = ("dependency", "shared_team", "shared_resources", "shared_stakeholders")


def _shared(current: list[dict], other: list[dict]) -> list[dict]:
    names = {e["name"] for e in current}
    return [e for e in other if e["name"] in names]


def project_connection(snapshot: GraphSnapshot, current: str, other: dict) -> dict:
    """Shared entities between two projects and the resulting strength."""
    other_name = other["name"]

    team = _shared(
        snapshot.sources(current, TEAM_RELATIONS, "teamMember"),
        snapshot.sources(other_name, TEAM_RELATIONS, "teamMember"),
    )
    resources = _shared(
        snapshot.part_of(current, "resource"),
        snapshot.part_of(other_name, "resource"),
    )
    stakeholders = _shared(
        snapshot.sources(current, "stakeholder_of", "stakeholder"),
        snapshot.sources(other_name, "stakeholder_of", "stakeholder"),
    )

    dependencies = []
    for relation in snapshot.relations:
        if relation["relationType"] != "depends_on":
            continue
        if relation["from"] == current and relation["to"] == other_name:
            dependencies.append(other)
        elif relation["from"] == other_name and relation["to"] == current:
            dependencies.append(snapshot.get(current))

    strength = (
        len(team) * TEAM_WEIGHT
        + len(resources) * RESOURCE_WEIGHT
        + len(dependencies) * DEPENDENCY_WEIGHT
        + len(stakeholders) * STAKEHOLDER_WEIGHT
    )

    # First non-empty kind in priority order
    kinds = (dependencies, team, resources, stakeholders)
    connection_type = next(
        (t for t, shared in zip(CONNECTION_TYPES, kinds) if shared), "related"
    )

    return {
        "project": other,
        "connectionType": connection_type,
        "connectionStrength": strength,
        "sharedEntities": {
            "teamMembers": team,
            "dependencies": dependencies,
            "resources": resources,
            "stakeholders": stakeholders,
        },
    }


def find_related_projects(snapshot: GraphSnapshot, project_name: str,
                          depth: int = DEFAULT_RELATED_DEPTH) -> dict:
    """
    Projects connected to the seed, explored up to depth hops.

    A project is reported once, at the first hop that connects it, and is
    only expanded from there. Raises ProjectNotFoundError.
    """
    project = snapshot.require_project(project_name)
    projects = snapshot.of_type("project")

    visited = {project_name}
    related = []

    def explore(current: str, level: int) -> None:
        if level > depth:
            return
        for other in projects:
            if other["name"] == current or other["name"] in visited:
                continue
            connection = project_connection(snapshot, current, other)
            if connection["connectionStrength"] <= 0:
                continue
            visited.add(other["name"])
            connection["depth"] = level
            connection["via"] = current
            related.append(connection)
            explore(other["name"], level + 1)

    explore(project_name, 1)
    related.sort(key=lambda c: c["connectionStrength"], reverse=True)

    return {
        "project": project,
        "relatedProjects": related,
        "summary": {
            "totalRelated": len(related),
            "byConnectionType": {
                kind: sum(1 for c in related if c["connectionType"] == kind)
                for kind in CONNECTION_TYPES
            },
            "maxDepth": depth,
        },
    }
