import random

import pytest

from depgraph import GraphInvalidError, analyze, build_graph, topological_order

from .conftest import make_task


def _analyze(tasks, target=None):
    graph = build_graph(tasks)
    return analyze(graph, topological_order(graph), target)


def test_design_build_test(design_build_test):
    result = _analyze(design_build_test, target=3)
    assert result.earliest_start == {1: 0, 2: 1, 3: 2}
    assert result.predecessor == {1: None, 2: 1, 3: 2}
    assert result.critical_nodes == {1, 2, 3}
    assert result.critical_edges == {(1, 2), (2, 3)}
    assert result.length == 3


def test_isolated_task_starts_at_zero_and_is_not_critical(design_build_test):
    tasks = design_build_test + [make_task(4)]
    result = _analyze(tasks, target=3)
    assert result.earliest_start[4] == 0
    assert 4 not in result.critical_nodes

    only_four = _analyze(tasks, target=4)
    assert only_four.critical_nodes == {4}
    assert only_four.critical_edges == frozenset()


def test_longest_incoming_chain_wins():
    # 1 -> 2 -> 3 -> 5 and 4 -> 5: task 5 follows the longer branch
    tasks = [make_task(1), make_task(2, [1]), make_task(3, [2]), make_task(4), make_task(5, [3, 4])]
    result = _analyze(tasks, target=5)
    assert result.earliest_start[5] == 3
    assert result.predecessor[5] == 3
    assert result.critical_nodes == {1, 2, 3, 5}
    assert (4, 5) not in result.critical_edges


def test_equal_length_branches_keep_first_relaxed_predecessor():
    tasks = [make_task(1), make_task(2), make_task(3, [1, 2])]
    result = _analyze(tasks, target=3)
    # strict improvement only: 1 is relaxed first in topological order
    assert result.predecessor[3] == 1
    assert result.critical_nodes == {1, 3}


def test_no_target_gives_empty_critical_sets(design_build_test):
    result = _analyze(design_build_test)
    assert result.critical_nodes == frozenset()
    assert result.critical_edges == frozenset()


def test_unknown_target_is_not_an_error(design_build_test):
    assert _analyze(design_build_test, target=99).critical_nodes == frozenset()


def test_max_earliest_start_is_longest_chain_minus_one():
    rng = random.Random(3)
    tasks = [make_task(1)]
    for i in range(2, 30):
        tasks.append(make_task(i, {rng.randrange(1, i) for _ in range(rng.randrange(0, 3))}))
    result = _analyze(tasks)

    longest = {}
    for t in sorted(tasks, key=lambda t: t.id):  # ids only point backwards here
        longest[t.id] = 1 + max((longest[d] for d in t.dependencies), default=0)
    assert max(result.earliest_start.values()) == max(longest.values()) - 1
    for t in tasks:
        for d in t.dependencies:
            assert result.earliest_start[t.id] > result.earliest_start[d]


def test_order_not_covering_graph_is_graph_invalid(design_build_test):
    graph = build_graph(design_build_test)
    with pytest.raises(GraphInvalidError):
        analyze(graph, [1, 2], target_id=3)
