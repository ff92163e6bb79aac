# querybuilder.py — 宣言順を保つクエリ組み立て
#
# 出力順は常に  base -> WHERE -> GROUP BY -> HAVING -> ORDER BY -> LIMIT
# 引数順は      WHERE の宣言順 -> HAVING の宣言順 -> LIMIT
# 呼び出し順（order_by / group_by / limit をいつ呼んだか）には依存しない

from typing import Any, List, Optional, Tuple

from errors import ValidationError

DIRECTIONS = ("ASC", "DESC")


class QueryBuilder:
    """
    1 クエリにつき 1 インスタンス。使い回さない。

    >>> q, args = (QueryBuilder("SELECT * FROM t")
    ...            .where("a = ?", 1).where("b IS NULL").limit(5).render())
    >>> q
    'SELECT * FROM t WHERE a = ? AND b IS NULL LIMIT ?'
    >>> args
    [1, 5]
    """

    def __init__(self, base: str):
        self.base = base.strip()
        self.predicates: List[Tuple[str, Tuple[Any, ...]]] = []
        self.orderings: List[Tuple[str, str]] = []
        self.group_column: Optional[str] = None
        self.group_predicates: List[Tuple[str, Tuple[Any, ...]]] = []
        self.limit_value: Optional[int] = None

    def where(self, predicate: str, *args: Any) -> "QueryBuilder":
        # 引数なし（IS NULL など）でも述語は残す
        self.predicates.append((predicate, args))
        return self

    def order_by(self, column: str, direction: str = "ASC") -> "QueryBuilder":
        d = direction.strip().upper()
        if d not in DIRECTIONS:
            raise ValidationError(f"invalid order direction: {direction!r}")
        self.orderings.append((column, d))
        return self

    def group_by(self, column: str) -> "QueryBuilder":
        self.group_column = column
        return self

    def having(self, predicate: str, *args: Any) -> "QueryBuilder":
        self.group_predicates.append((predicate, args))
        return self

    def limit(self, n: int) -> "QueryBuilder":
        if n < 0:
            raise ValidationError(f"limit must not be negative: {n}")
        # 0 は上限なし
        self.limit_value = n or None
        return self

    def render(self) -> Tuple[str, List[Any]]:
        parts = [self.base]
        args: List[Any] = []

        if self.predicates:
            parts.append("WHERE " + " AND ".join(p for p, _ in self.predicates))
            for _, a in self.predicates:
                args.extend(a)

        if self.group_column:
            parts.append(f"GROUP BY {self.group_column}")

        if self.group_predicates:
            parts.append("HAVING " + " AND ".join(p for p, _ in self.group_predicates))
            for _, a in self.group_predicates:
                args.extend(a)

        if self.orderings:
            parts.append("ORDER BY " + ", ".join(f"{c} {d}" for c, d in self.orderings))

        if self.limit_value is not None:
            parts.append("LIMIT ?")
            args.append(self.limit_value)

        return " ".join(parts), args
