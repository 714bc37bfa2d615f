"""Bounded-depth task dependency graph and critical path estimate."""

from dataclasses import dataclass, field

from ..core import DEFAULT_DEPENDENCY_DEPTH, TaskNotFoundError
from ..graph import GraphSnapshot

UPSTREAM = "dependsOn"
DOWNSTREAM = "dependedOnBy"
ROOT = "root"


@dataclass
class DependencyNode:
    name: str
    level: int
    direction: str
    depends_on: list[str] = field(default_factory=list)
    depended_on_by: list[str] = field(default_factory=list)


class DependencyMap:
    """
    Task name -> node, with both dependency directions kept consistent.

    Levels are the minimum distance from the root at which a task was
    reached in either direction.
    """

    def __init__(self, snapshot: GraphSnapshot, depth: int):
        self.snapshot = snapshot
        self.depth = depth
        self.nodes: dict[str, DependencyNode] = {}
        self._reached: dict[tuple[str, str], int] = {}

    def build(self, root: str) -> "DependencyMap":
        self.nodes[root] = DependencyNode(root, 0, ROOT)
        self._expand(root, 0, UPSTREAM)
        self._expand(root, 0, DOWNSTREAM)

        # Frontier nodes are not expanded; link the edges among reported nodes
        for relation in self.snapshot.relations:
            if (relation["relationType"] == "depends_on"
                    and relation["from"] in self.nodes and relation["to"] in self.nodes):
                self._link(relation["to"], relation["from"])
        return self

    def _record(self, name: str, level: int, direction: str) -> None:
        node = self.nodes.get(name)
        if node is None:
            self.nodes[name] = DependencyNode(name, level, direction)
        elif level < node.level:
            node.level = level

    def _link(self, prerequisite: str, dependent: str) -> None:
        """dependent depends_on prerequisite."""
        if prerequisite not in self.nodes[dependent].depends_on:
            self.nodes[dependent].depends_on.append(prerequisite)
        if dependent not in self.nodes[prerequisite].depended_on_by:
            self.nodes[prerequisite].depended_on_by.append(dependent)

    def _expand(self, name: str, level: int, direction: str) -> None:
        # Re-expand only when reached at a strictly lower level; this also ends cycles
        key = (name, direction)
        if key in self._reached and self._reached[key] <= level:
            return
        self._reached[key] = level
        self._record(name, level, direction)

        if level >= self.depth:
            return

        if direction == UPSTREAM:
            for task in self.snapshot.targets(name, "depends_on", "task"):
                self._expand(task["name"], level + 1, direction)
                self._link(task["name"], name)
        else:
            for task in self.snapshot.sources(name, "depends_on", "task"):
                self._expand(task["name"], level + 1, direction)
                self._link(name, task["name"])


def critical_path(entries: list[dict]) -> list[str]:
    """
    Longest simple chain from a task with no prerequisites to a task with
    no dependents. Ties go to the path found first. Task durations are
    ignored.
    """
    adjacency: dict[str, list[str]] = {e["task"]["name"]: [] for e in entries}
    for entry in entries:
        for prerequisite in entry["dependsOn"]:
            adjacency.setdefault(prerequisite, []).append(entry["task"]["name"])

    starts = [e["task"]["name"] for e in entries if not e["dependsOn"]]
    ends = {e["task"]["name"] for e in entries if not e["dependedOnBy"]}

    longest: list[str] = []

    def walk(current: str, path: list[str]) -> None:
        nonlocal longest
        path = path + [current]
        if current in ends:
            if len(path) > len(longest):
                longest = path
            return
        for following in adjacency.get(current, []):
            if following not in path:
                walk(following, path)

    for start in starts:
        walk(start, [])
    return longest


def get_task_dependencies(snapshot: GraphSnapshot, task_name: str,
                          depth: int = DEFAULT_DEPENDENCY_DEPTH) -> dict:
    """
    Dependency graph around a task, expanded depth levels in both
    directions, with a critical path estimate.

    Raises TaskNotFoundError if no task has that name.
    """
    task = snapshot.require(task_name, "task", TaskNotFoundError)
    depth = max(0, depth)
    dependency_map = DependencyMap(snapshot, depth).build(task_name)

    entries = []
    for node in dependency_map.nodes.values():
        entity = snapshot.get(node.name)
        fields = snapshot.fields(entity)
        entries.append({
            "task": entity,
            "level": node.level,
            "direction": node.direction,
            "dependsOn": list(node.depends_on),
            "dependedOnBy": list(node.depended_on_by),
            "status": fields.status,
            "dueDate": fields.due_date,
            "assignee": snapshot.assignee_of(node.name),
        })
    entries.sort(key=lambda e: e["level"])

    project = snapshot.project_of(task_name)
    task_done = snapshot.fields(task).status == "completed"
    blocked_by = 0 if task_done else sum(
        1 for e in entries
        if e["direction"] == UPSTREAM and e["status"] != "completed"
    )

    return {
        "task": task,
        "projectName": project["name"] if project else None,
        "dependencies": entries,
        "criticalPath": critical_path(entries),
        "summary": {
            "totalDependencies": len(entries) - 1,
            "maxDepth": depth,
            "blockedBy": blocked_by,
        },
    }
