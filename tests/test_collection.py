from dataclasses import dataclass, field
from typing import List

from collection import CollectionMap, fold


@dataclass
class Entity:
    id: str
    tags: List[str] = field(default_factory=list)


def _attach(e, t):
    e.tags.append(t)


def test_fold_groups_children_in_first_seen_order():
    rows = [(Entity("A"), "tag1"), (Entity("A"), "tag2"), (Entity("B"), None)]
    out = fold(rows, key=lambda e: e.id, attach=_attach)
    assert out == [Entity("A", ["tag1", "tag2"]), Entity("B", [])]


def test_fold_keeps_first_seen_position_for_interleaved_rows():
    rows = [(Entity("B"), "x"), (Entity("A"), None), (Entity("B"), "y")]
    out = fold(rows, key=lambda e: e.id, attach=_attach)
    assert [e.id for e in out] == ["B", "A"]
    assert out[0].tags == ["x", "y"]


def test_fold_empty():
    assert fold([], key=lambda e: e.id, attach=_attach) == []


def test_collection_map_mutation_is_visible_without_restore():
    cm = CollectionMap()
    cm.get_or_add(1, Entity("A"))
    cm.get_or_add(1, Entity("A-dup")).tags.append("t")
    assert cm.all() == [Entity("A", ["t"])]
