from datetime import date

import pytest

from depgraph import Task, build_graph
from depgraph.model import parse_due

from .conftest import make_task


def test_adjacency_runs_prerequisite_to_dependent(design_build_test):
    graph = build_graph(design_build_test)
    assert graph.adjacency() == {1: {2}, 2: {3}, 3: set()}
    assert graph.dependents(1) == [2]
    assert graph.prerequisites(3) == [2]


def test_in_degree_counts_prerequisites():
    tasks = [make_task(1), make_task(2), make_task(3, [1, 2]), make_task(4)]
    graph = build_graph(tasks)
    assert graph.in_degrees() == {1: 0, 2: 0, 3: 2, 4: 0}
    assert graph.roots() == [1, 2, 4]
    assert graph.edges() == [(1, 3), (2, 3)]


def test_dangling_reference_adds_no_edge_or_node():
    graph = build_graph([make_task(1, [99])])
    assert len(graph) == 1
    assert 99 not in graph
    assert graph.in_degree(1) == 0
    assert graph.edges() == []


def test_self_reference_is_kept_as_loop():
    graph = build_graph([make_task(1, [1])])
    assert graph.in_degree(1) == 1


def test_task_from_dict_accepts_read_model_dependencies():
    task = Task.from_dict({
        "id": 5,
        "title": "Ship",
        "due": "2025-04-02T00:00:00.000Z",
        "createdAt": "2025-03-01T12:00:00Z",
        "dependencies": [{"id": 2}, 3, "4"],
    })
    assert task.due == date(2025, 4, 2)
    assert task.dependencies == frozenset({2, 3, 4})
    assert task.created_at is not None
    assert task.to_dict()["dependencies"] == [2, 3, 4]


def test_task_from_dict_requires_due():
    with pytest.raises(ValueError):
        Task.from_dict({"id": 1, "title": "x"})


@pytest.mark.parametrize("raw", ["2025-03-01garbage", "2025-03-01 and then", "2025-13-01", "soon"])
def test_parse_due_rejects_trailing_or_bad_text(raw):
    with pytest.raises(ValueError):
        parse_due(raw)


def test_parse_due_accepts_date_and_datetime_strings():
    assert parse_due("2025-03-01") == date(2025, 3, 1)
    assert parse_due(" 2025-03-01T23:00:00Z ") == date(2025, 3, 1)
    assert parse_due("2025-03-01T00:00:00.000+02:00") == date(2025, 3, 1)
