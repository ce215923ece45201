from dataclasses import dataclass
from datetime import date

from jobcrm.domain.hierarchy import build_process_tree, build_interaction_tree, display_order


@dataclass
class Item:
    id: str
    parent_interaction_id: str | None = None
    date_sent: date | None = None


@dataclass
class Pipeline:
    id: str
    source_process_id: str | None = None


def _flat(nodes) -> list[tuple[str, int]]:
    return [(node.item.id, node.depth) for node in nodes]


def test_empty_input() -> None:
    assert build_interaction_tree([]) == []


def test_flat_input_keeps_order() -> None:
    items = [Item("c"), Item("a"), Item("b")]
    assert _flat(build_interaction_tree(items)) == [("c", 0), ("a", 0), ("b", 0)]


def test_chain() -> None:
    items = [Item("c", "b"), Item("a"), Item("b", "a")]
    assert _flat(build_interaction_tree(items)) == [("a", 0), ("b", 1), ("c", 2)]


def test_children_follow_their_parent_in_input_order() -> None:
    items = [Item("r1"), Item("r2"), Item("x", "r1"), Item("y", "r2"), Item("z", "r1")]
    assert _flat(build_interaction_tree(items)) == [
        ("r1", 0),
        ("x", 1),
        ("z", 1),
        ("r2", 0),
        ("y", 1),
    ]


def test_dangling_parent_is_root() -> None:
    items = [Item("a", "missing"), Item("b", "a")]
    assert _flat(build_interaction_tree(items)) == [("a", 0), ("b", 1)]


def test_self_parent_emitted_once() -> None:
    items = [Item("a"), Item("loop", "loop")]
    assert _flat(build_interaction_tree(items)) == [("a", 0), ("loop", 0)]


def test_cycle_emits_every_item_once() -> None:
    items = [Item("a", "c"), Item("b", "a"), Item("c", "b"), Item("d")]
    nodes = build_interaction_tree(items)

    ids = [node.item.id for node in nodes]
    assert sorted(ids) == ["a", "b", "c", "d"]
    assert len(nodes) == len(items)
    assert _flat(nodes) == [("d", 0), ("a", 0), ("b", 1), ("c", 2)]


def test_display_order_sorts_roots_and_replies() -> None:
    items = [
        Item("late", date_sent=date(2026, 2, 1)),
        Item("early", date_sent=date(2026, 1, 1)),
        Item("reply-1", "early", date(2026, 1, 5)),
        Item("reply-2", "early", date(2026, 1, 9)),
    ]
    assert _flat(display_order(items)) == [
        ("early", 0),
        ("reply-2", 1),
        ("reply-1", 1),
        ("late", 0),
    ]


def test_process_tree_uses_source_process() -> None:
    pipelines = [Pipeline("child", "origin"), Pipeline("origin")]
    assert _flat(build_process_tree(pipelines)) == [("origin", 0), ("child", 1)]


def test_repeated_ids_are_all_emitted() -> None:
    first, second = Item("a", date_sent=date(2026, 1, 1)), Item("a", date_sent=date(2026, 1, 2))
    reply = Item("b", "a")
    nodes = build_interaction_tree([first, second, reply])

    assert len(nodes) == 3
    assert [node.item for node in nodes] == [first, reply, second]
    assert [node.depth for node in nodes] == [0, 1, 0]
    assert nodes[0].item is first and nodes[2].item is second
