"""
Graph model for task dependencies.
Task snapshots are immutable; TaskGraph wraps a networkx DiGraph whose edges run
prerequisite -> dependent (inverted relative to storage, scheduling flows forward).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple, Union

import networkx as nx


def parse_due(value: Any) -> date:
    """Accept date, datetime or ISO string ('2024-05-01' or '2024-05-01T00:00:00Z')."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValueError("Due date is required")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"Invalid due date: {value!r}") from None


def _parse_created_at(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _dependency_ids(raw: Any) -> FrozenSet[int]:
    """Dependencies come as [2, 3] or as read-model objects [{"id": 2}, ...]."""
    ids: Set[int] = set()
    for dep in raw or []:
        dep_id = dep.get("id") if isinstance(dep, dict) else dep
        if isinstance(dep_id, bool):
            continue
        if isinstance(dep_id, int):
            ids.add(dep_id)
        elif isinstance(dep_id, str) and dep_id.strip().isdigit():
            ids.add(int(dep_id))
    return frozenset(ids)


@dataclass(frozen=True)
class Task:
    """One task of a snapshot. `dependencies` holds the ids of its prerequisites."""

    id: int
    title: str
    due: date
    created_at: Optional[datetime] = None
    dependencies: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=int(data["id"]),
            title=str(data.get("title") or ""),
            due=parse_due(data.get("due")),
            created_at=_parse_created_at(data.get("createdAt") or data.get("created_at")),
            dependencies=_dependency_ids(data.get("dependencies")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "due": self.due.isoformat(),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "dependencies": sorted(self.dependencies),
        }


def index_tasks(tasks: Iterable[Task]) -> Dict[int, Task]:
    return {t.id: t for t in tasks}


TaskIndex = Union[Dict[int, Task], Iterable[Task]]


def as_index(tasks: TaskIndex) -> Dict[int, Task]:
    """Accept either {id: Task} or any iterable of Task."""
    return tasks if isinstance(tasks, dict) else index_tasks(tasks)


class TaskGraph:
    """
    Adjacency (prerequisite -> dependents) and in-degree (number of prerequisites)
    over a snapshot. References to ids outside the snapshot produce no edge.
    """

    def __init__(self, tasks: Iterable[Task]):
        self.tasks: Dict[int, Task] = index_tasks(tasks)
        self._g = nx.DiGraph()

        for tid in self.tasks:
            self._g.add_node(tid)

        for task in self.tasks.values():
            for dep in task.dependencies:
                if dep in self.tasks:
                    self._g.add_edge(dep, task.id)

    @property
    def digraph(self) -> nx.DiGraph:
        return self._g

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.tasks

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.tasks))

    def dependents(self, task_id: int) -> List[int]:
        """Forward neighbours: tasks that depend on task_id, ascending."""
        return sorted(self._g.successors(task_id))

    def prerequisites(self, task_id: int) -> List[int]:
        return sorted(self._g.predecessors(task_id))

    def in_degree(self, task_id: int) -> int:
        return self._g.in_degree(task_id)

    def in_degrees(self) -> Dict[int, int]:
        return {tid: self._g.in_degree(tid) for tid in self.tasks}

    def adjacency(self) -> Dict[int, Set[int]]:
        return {tid: set(self._g.successors(tid)) for tid in self.tasks}

    def edges(self) -> List[Tuple[int, int]]:
        """(prerequisite, dependent) pairs, sorted."""
        return sorted(self._g.edges())

    def roots(self) -> List[int]:
        """Tasks with no prerequisites."""
        return [tid for tid in self if self._g.in_degree(tid) == 0]


def build_graph(tasks: Iterable[Task]) -> TaskGraph:
    return TaskGraph(tasks)
