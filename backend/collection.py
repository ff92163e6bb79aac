# collection.py — フラットな JOIN 行を「親 + 子リスト」に畳む
from typing import Callable, Dict, Generic, Hashable, Iterable, List, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
C = TypeVar("C")


class CollectionMap(Generic[K, V]):
    """
    初出順を保つ id -> エンティティの保管庫。
    エンティティは参照で保持するので、取り出して子を追加すればそのまま反映される。
    """

    def __init__(self):
        self._items: Dict[K, V] = {}

    def get_or_add(self, key: K, entity: V) -> V:
        return self._items.setdefault(key, entity)

    def all(self) -> List[V]:
        return list(self._items.values())


def fold(
    rows: Iterable[Tuple[V, Optional[C]]],
    key: Callable[[V], K],
    attach: Callable[[V, C], None],
) -> List[V]:
    """
    [(A, tag1), (A, tag2), (B, None)] -> [A(tags=[tag1, tag2]), B(tags=[])]

    同じキーの 2 行目以降のエンティティ断片は捨て、最初の 1 つに子を積む。
    """
    collection: CollectionMap[K, V] = CollectionMap()
    for entity, child in rows:
        owner = collection.get_or_add(key(entity), entity)
        if child is not None:
            attach(owner, child)
    return collection.all()
