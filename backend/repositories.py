# repositories.py — repositories / tags の読み書き
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from collection import fold
from config import DATE_FMT, DATETIME_FMT, now as _now
from db import Store
from querybuilder import QueryBuilder
from timewindow import TimeWindow

WITH_TAGS_SQL = """
SELECT repositories.*, tags.id AS tag_id, tags.name AS tag_name
FROM repositories
LEFT JOIN repositories_tags ON repositories.id = repositories_tags.repository_id
LEFT JOIN tags ON repositories_tags.tag_id = tags.id
"""

TRENDING_SQL = """
SELECT repositories.*,
       COUNT(*) AS featured_count,
       MIN(trending_repositories.rank) AS best_ranking
FROM repositories
JOIN trending_repositories ON repositories.full_name = trending_repositories.repo_full_name
"""


# ===========================
# モデル
# ===========================
@dataclass
class Tag:
    id: int
    name: str


@dataclass
class Repository:
    full_name: str
    id: Optional[int] = None
    ghr_id: int = 0
    stars: int = 0
    forks: int = 0
    language: Optional[str] = None
    owner: str = ""
    owner_avatar_url: str = ""
    description: Optional[str] = None
    default_branch: str = "main"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tags: List[Tag] = field(default_factory=list)


@dataclass
class TrendingRanking:
    repository: Repository
    featured_count: int
    best_ranking: int


def _parse_ts(v: Any) -> Optional[datetime]:
    if v is None or isinstance(v, datetime):
        return v
    return datetime.strptime(str(v), DATETIME_FMT)


def _fmt_ts(v: Optional[datetime]) -> Optional[str]:
    return v.strftime(DATETIME_FMT) if v is not None else None


def row_to_repository(row: Dict[str, Any]) -> Repository:
    return Repository(
        id=row["id"],
        ghr_id=row["ghr_id"],
        stars=row["stars"],
        forks=row["forks"],
        full_name=row["full_name"],
        language=row["language"],
        owner=row["owner"],
        owner_avatar_url=row["owner_avatar_url"],
        description=row["description"],
        default_branch=row["default_branch"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


def _attach_tag(repo: Repository, tag: Tag):
    repo.tags.append(tag)


class RepositoryRepo:
    def __init__(self, store: Store):
        self.store = store

    # ===========================
    # 読み出し
    # ===========================
    def find_by_id(self, repo_id: int) -> Optional[Repository]:
        row = self.store.find_by_key("repositories", "id", repo_id)
        return row_to_repository(row) if row else None

    def find_by_name(self, full_name: str) -> Optional[Repository]:
        row = self.store.find_by_key("repositories", "full_name", full_name)
        return row_to_repository(row) if row else None

    def find_all(self, window: TimeWindow) -> List[Repository]:
        """updated_at が (start, end] にあるものを id 順に"""
        qb = QueryBuilder("SELECT * FROM repositories")
        if window.start:
            qb.where("updated_at > ?", window.start)
        if window.end:
            qb.where("updated_at <= ?", window.end)
        qb.order_by("id", "ASC")
        if window.limit > 0:
            qb.limit(window.limit)

        q, args = qb.render()
        return [row_to_repository(r) for r in self.store.execute(q, args)]

    def find_all_with_tags(self, filter: str = "", now: Optional[datetime] = None) -> List[Repository]:
        qb = QueryBuilder(WITH_TAGS_SQL)
        if filter == "today":
            today = (now or _now()).strftime(DATE_FMT)
            qb.where(
                "repositories.full_name IN "
                "(SELECT repo_full_name FROM trending_repositories WHERE trend_date = ?)",
                today,
            )
        qb.order_by("repositories.id", "ASC").order_by("tags.id", "ASC")

        q, args = qb.render()
        rows = self.store.execute(q, args)

        pairs = []
        for r in rows:
            tag = Tag(id=r["tag_id"], name=r["tag_name"]) if r["tag_id"] is not None else None
            pairs.append((row_to_repository(r), tag))
        return fold(pairs, key=lambda repo: repo.id, attach=_attach_tag)

    def find_trending_repositories(
        self,
        language: Optional[str] = None,
        limit: int = 0,
        date_range: int = 0,
        now: Optional[datetime] = None,
    ) -> List[TrendingRanking]:
        """
        期間内に何回トレンド入りしたか / 最高順位 で並べる。
        同数・同順位は repositories.id 昇順で確定させる。
        """
        lang = (language or "").strip().lower()

        qb = QueryBuilder(TRENDING_SQL)
        qb.order_by("featured_count", "DESC")
        qb.order_by("best_ranking", "ASC")
        qb.order_by("repositories.id", "ASC")

        if lang:
            qb.where("trending_repositories.language = ?", lang)
        else:
            qb.where("trending_repositories.language IS NULL")

        if date_range > 0:
            since = (now or _now()) - timedelta(days=date_range)
            qb.where("trending_repositories.trend_date > ?", since.strftime(DATE_FMT))

        if limit > 0:
            qb.limit(limit)

        qb.group_by("repositories.id")

        q, args = qb.render()
        return [
            TrendingRanking(
                repository=row_to_repository(r),
                featured_count=r["featured_count"],
                best_ranking=r["best_ranking"],
            )
            for r in self.store.execute(q, args)
        ]

    def find_by_names(self, names: Iterable[str]) -> List[Repository]:
        names = list(names)
        if not names:
            return []
        marks = ", ".join("?" for _ in names)
        q, args = QueryBuilder("SELECT * FROM repositories").where(
            f"full_name IN ({marks})", *names
        ).render()
        return [row_to_repository(r) for r in self.store.execute(q, args)]

    # ===========================
    # 書き込み
    # ===========================
    def _values(self, repo: Repository) -> Dict[str, Any]:
        return {
            "full_name": repo.full_name,
            "ghr_id": repo.ghr_id,
            "stars": repo.stars,
            "forks": repo.forks,
            "language": repo.language,
            "owner": repo.owner,
            "owner_avatar_url": repo.owner_avatar_url,
            "description": repo.description,
            "default_branch": repo.default_branch,
        }

    def save(self, repo: Repository) -> int:
        ts = _now().replace(tzinfo=None, microsecond=0)
        values = self._values(repo)
        values["created_at"] = _fmt_ts(ts)
        values["updated_at"] = _fmt_ts(ts)
        repo.id = self.store.insert("repositories", values)
        repo.created_at = repo.updated_at = ts
        return repo.id

    def update(self, repo: Repository):
        ts = _now().replace(tzinfo=None, microsecond=0)
        values = self._values(repo)
        values["updated_at"] = _fmt_ts(ts)
        self.store.update("repositories", "id", repo.id, values)
        repo.updated_at = ts

    def find_or_create_tags(self, names: Iterable[str]) -> List[Tag]:
        tags: List[Tag] = []
        seen = set()
        for name in names:
            n = (name or "").strip().lower()
            if not n or n in seen:
                continue
            seen.add(n)
            row = self.store.find_by_key("tags", "name", n)
            tag_id = row["id"] if row else self.store.insert("tags", {"name": n})
            tags.append(Tag(id=tag_id, name=n))
        return tags

    def save_tags(self, repo: Repository, tags: List[Tag]):
        """タグ付けを総入れ替え。途中で失敗したら元のタグのまま"""
        with self.store.transaction():
            self.store.delete("repositories_tags", "repository_id", repo.id)
            for tag in tags:
                self.store.insert("repositories_tags", {"repository_id": repo.id, "tag_id": tag.id})
        repo.tags = list(tags)
