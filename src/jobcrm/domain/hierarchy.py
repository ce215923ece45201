"""Flatten parent-linked records into display order.

Each root is followed by its descendants, depth first, and every node carries
its depth. A parent id that is not in the input is ignored and the record is
treated as a root.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class TreeNode(Generic[T]):
    item: T
    depth: int


def build_tree(
    items: Iterable[T], parent_attr: str, id_attr: str = "id"
) -> list[TreeNode[T]]:
    items = list(items)
    if not items:
        return []

    # Positions, not ids, identify records so repeated ids are all emitted.
    ids = [getattr(item, id_attr) for item in items]
    known: set[Hashable] = set(ids)

    def parent_of(index: int) -> Hashable | None:
        parent_id = getattr(items[index], parent_attr)
        if parent_id is None or parent_id not in known:
            return None
        return parent_id

    roots = [index for index in range(len(items)) if parent_of(index) is None]
    children: dict[Hashable, list[int]] = {}
    for index in range(len(items)):
        parent_id = parent_of(index)
        if parent_id is not None:
            children.setdefault(parent_id, []).append(index)

    result: list[TreeNode[T]] = []
    emitted: set[int] = set()

    def walk(root: int) -> None:
        stack: list[tuple[int, int]] = [(root, 0)]
        while stack:
            index, depth = stack.pop()
            if index in emitted:
                continue
            emitted.add(index)
            result.append(TreeNode(item=items[index], depth=depth))
            for child in reversed(children.get(ids[index], [])):
                stack.append((child, depth + 1))

    for root in roots:
        walk(root)

    # Records caught in a parent cycle have no root above them.
    for index in range(len(items)):
        if index not in emitted:
            walk(index)

    return result


def build_interaction_tree(interactions: Iterable[T]) -> list[TreeNode[T]]:
    return build_tree(interactions, parent_attr="parent_interaction_id")


def build_process_tree(processes: Iterable[T]) -> list[TreeNode[T]]:
    return build_tree(processes, parent_attr="source_process_id")


def display_order(interactions: Sequence[T]) -> list[TreeNode[T]]:
    """Roots oldest first, replies under each parent newest first."""
    known = {item.id for item in interactions}

    def is_child(item) -> bool:
        return item.parent_interaction_id is not None and item.parent_interaction_id in known

    roots = sorted((item for item in interactions if not is_child(item)), key=_sent_key)
    replies = sorted((item for item in interactions if is_child(item)), key=_sent_key, reverse=True)
    return build_interaction_tree(roots + replies)


def _sent_key(item) -> date:
    return item.date_sent or date.min
