# trending.py — trending_repositories（日付・言語・順位のスロット）の読み書き
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from config import DATE_FMT, DATETIME_FMT
from db import Store
from querybuilder import QueryBuilder


@dataclass
class TrendingRecord:
    repo_full_name: str
    rank: int
    trend_date: date
    scraped_at: datetime
    language: Optional[str] = None   # None = 全言語
    id: Optional[int] = None


def normalize_language(language: Optional[str]) -> Optional[str]:
    lang = (language or "").strip().lower()
    return lang or None


def _row_to_record(row: Dict[str, Any]) -> TrendingRecord:
    return TrendingRecord(
        id=row["id"],
        repo_full_name=row["repo_full_name"],
        rank=row["rank"],
        language=row["language"],
        trend_date=datetime.strptime(str(row["trend_date"]), DATE_FMT).date(),
        scraped_at=datetime.strptime(str(row["scraped_at"]), DATETIME_FMT),
    )


def _slot_query(base: str, trend_date: date, language: Optional[str]) -> QueryBuilder:
    qb = QueryBuilder(base).where("trend_date = ?", trend_date.strftime(DATE_FMT))
    if language is None:
        qb.where("language IS NULL")
    else:
        qb.where("language = ?", language)
    return qb


class TrendingRepo:
    def __init__(self, store: Store):
        self.store = store

    def find_ranked_by_date(self, trend_date: date, language: Optional[str]) -> Dict[int, TrendingRecord]:
        """rank -> その日・その言語のレコード"""
        qb = _slot_query("SELECT * FROM trending_repositories", trend_date, normalize_language(language))
        q, args = qb.order_by("rank", "ASC").order_by("id", "ASC").render()

        ranked: Dict[int, TrendingRecord] = {}
        for row in self.store.execute(q, args):
            # 重複があれば最初の 1 件をスロットの持ち主とみなす
            ranked.setdefault(row["rank"], _row_to_record(row))
        return ranked

    def find_duplicate_ranks(self, trend_date: date, language: Optional[str]) -> List[int]:
        qb = _slot_query("SELECT rank FROM trending_repositories", trend_date, normalize_language(language))
        q, args = qb.group_by("rank").having("COUNT(*) > ?", 1).order_by("rank", "ASC").render()
        return [r["rank"] for r in self.store.execute(q, args)]

    def _values(self, record: TrendingRecord) -> Dict[str, Any]:
        return {
            "repo_full_name": record.repo_full_name,
            "rank": record.rank,
            "language": normalize_language(record.language),
            "trend_date": record.trend_date.strftime(DATE_FMT),
            "scraped_at": record.scraped_at.strftime(DATETIME_FMT),
        }

    def save(self, record: TrendingRecord) -> int:
        record.id = self.store.insert("trending_repositories", self._values(record))
        return record.id

    def update(self, record: TrendingRecord):
        self.store.update("trending_repositories", "id", record.id, self._values(record))
