"""Unit tests for graph derivation from thought records."""

from __future__ import annotations

from collections import Counter

from tests.helpers import SCENARIO_A, SCENARIO_B, SCENARIO_C, thought
from thoughtgraph.graph.builder import GraphBuilder, build_graph, make_edge_id
from thoughtgraph.models.schemas import validate_record


def _records(raws):
    return [validate_record(r) for r in raws]


def _edge_ids(store):
    return [e.id for e in store.snapshot()[1]]


def test_scenario_a_main_line():
    store = build_graph(_records(SCENARIO_A))
    nodes, edges = store.snapshot()

    assert [n.id for n in nodes] == ["main-1", "main-2", "main-3"]
    assert all(n.kind == "main" for n in nodes)
    assert [(e.source, e.target, e.kind) for e in edges] == [
        ("main-1", "main-2", "linear"),
        ("main-2", "main-3", "linear"),
    ]


def test_scenario_b_branch_suppresses_linear_link():
    store = build_graph(_records(SCENARIO_A + SCENARIO_B))
    nodes, edges = store.snapshot()

    branch = store.get_node("B1-4")
    assert branch is not None
    assert branch.kind == "branch"
    assert len(nodes) == 4
    assert [(e.source, e.target, e.kind) for e in edges[2:]] == [("main-2", "B1-4", "branch")]


def test_scenario_c_revision_without_same_line_predecessor():
    store = build_graph(_records(SCENARIO_A + SCENARIO_B + SCENARIO_C))
    nodes, edges = store.snapshot()

    assert len(nodes) == 5
    assert store.get_node("main-5").kind == "revision"
    assert make_edge_id("main-4", "main-5", "linear") not in _edge_ids(store)
    assert edges[-1].source == "main-5"
    assert edges[-1].target == "main-3"
    assert edges[-1].kind == "revision"
    assert Counter(e.kind for e in edges) == {"linear": 2, "branch": 1, "revision": 1}


def test_nested_branch_forks_from_branch_thought():
    raws = SCENARIO_A + SCENARIO_B + [thought(5, branchFromThought=4, branchId="B2")]
    store = build_graph(_records(raws))

    assert store.get_node("B2-5") is not None
    assert make_edge_id("B1-4", "B2-5", "branch") in _edge_ids(store)


def test_reused_number_resolves_to_latest_occurrence():
    raws = SCENARIO_A + SCENARIO_B + [
        thought(4),  # main-4 now exists alongside B1-4
        thought(5, branchFromThought=4, branchId="B3"),
    ]
    store = build_graph(_records(raws))
    edge_ids = _edge_ids(store)

    assert make_edge_id("main-3", "main-4", "linear") in edge_ids
    assert make_edge_id("main-4", "B3-5", "branch") in edge_ids
    assert make_edge_id("B1-4", "B3-5", "branch") not in edge_ids


def test_unresolved_references_omit_only_their_edge():
    raws = [
        thought(1),
        thought(2, isRevision=True, revisesThought=9),
        thought(3, branchFromThought=8, branchId="lost"),
    ]
    store = build_graph(_records(raws))
    nodes, edges = store.snapshot()

    assert [n.id for n in nodes] == ["main-1", "main-2", "lost-3"]
    assert [e.id for e in edges] == [make_edge_id("main-1", "main-2", "linear")]


def test_revision_and_linear_edges_together():
    store = build_graph(_records([thought(1), thought(2, isRevision=True, revisesThought=1)]))
    kinds = {e.kind: (e.source, e.target) for e in store.snapshot()[1]}

    assert kinds == {"linear": ("main-1", "main-2"), "revision": ("main-2", "main-1")}


def test_self_reference_is_not_linked():
    raws = [thought(1), thought(1, isRevision=True, revisesThought=1)]
    store = build_graph(_records(raws))
    nodes, edges = store.snapshot()

    assert [n.id for n in nodes] == ["main-1"]
    assert edges == []


def test_build_does_not_mutate_resolver():
    builder = GraphBuilder()
    record = validate_record(thought(1))
    builder.build(record)
    assert builder.resolver.resolve(1) is None

    builder.observe(record)
    assert builder.resolver.resolve(1) == "main-1"


def test_rebuilding_same_history_reproduces_keys():
    raws = SCENARIO_A + SCENARIO_B + SCENARIO_C + [thought(6), thought(6, branchFromThought=5, branchId="x")]
    first = build_graph(_records(raws)).snapshot()
    second = build_graph(_records(raws)).snapshot()

    assert [n.model_dump() for n in first[0]] == [n.model_dump() for n in second[0]]
    assert [e.model_dump() for e in first[1]] == [e.model_dump() for e in second[1]]


def test_node_label_and_tooltip():
    builder = GraphBuilder()
    node = builder.build_node(
        validate_record(thought(4, total=6, text="Try another angle", branchFromThought=2, branchId="alpha"))
    )

    assert node.label == "T4 (alp)"
    assert node.tooltip == (
        "Thought 4/6\nBranch: alpha\nType: branch\nRevises: N/A\nFrom: 2\n\nTry another angle"
    )


def test_edge_totals_match_record_properties():
    raws = [
        thought(1),
        thought(2),
        thought(3, branchFromThought=1, branchId="a"),
        thought(4, branchFromThought=3, branchId="a"),
        thought(3, isRevision=True, revisesThought=2),
        thought(4),
        thought(7),  # no predecessor numbered 6
        thought(2, branchFromThought=99, branchId="b"),  # unresolvable
    ]
    store = build_graph(_records(raws))
    counts = Counter(e.kind for e in store.snapshot()[1])

    # linear: main 2 (from 1), main 3 revision (from 2), main 4 (from 3)
    assert counts["linear"] == 3
    assert counts["branch"] == 2
    assert counts["revision"] == 1
