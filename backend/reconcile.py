# reconcile.py — トレンドのスナップショットを順位スロットに反映する
#
# - 突き合わせのキーは (trend_date, language, rank) だけ
#   同じリポジトリが順位を移動しても「移動」とは扱わず、2 つのスロットの書き換えになる
# - 同じ日に同じスナップショットで再実行しても行は増えない（scraped_at が更新されるだけ）
# - 最初のエラーで打ち切る。書き込み済みのスロットは戻さない（次回の実行で収束する）
# - 同じ (trend_date, language) への同時実行は呼び出し側で直列化すること

import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional

from cancel import CancelToken, check
from config import SLEEP_SEC, now as _now
from errors import ValidationError
from github_client import GitHubClient, RepositoryNotFound, apply_repository_data
from repositories import Repository, RepositoryRepo
from scraper import TrendingPageSource
from trending import TrendingRecord, TrendingRepo, normalize_language


def _log(*s):
    print("[reconcile]", *s)


@dataclass
class ReconcileResult:
    created: int = 0
    updated: int = 0


class Reconciler:
    def __init__(self, trending_repo: TrendingRepo):
        self.trending_repo = trending_repo

    def reconcile(
        self,
        snapshot: Iterable[str],
        trend_date: date,
        language: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ReconcileResult:
        items = list(snapshot)
        result = ReconcileResult()
        if not items:
            return result

        lang = normalize_language(language)
        ts = (now or _now()).replace(microsecond=0)

        check(cancel)
        ranked = self.trending_repo.find_ranked_by_date(trend_date, lang)

        for rank, item_key in enumerate(items, start=1):
            check(cancel)
            record = ranked.get(rank)
            if record is not None:
                record.repo_full_name = item_key
                record.scraped_at = ts
                record.trend_date = trend_date
                self.trending_repo.update(record)
                result.updated += 1
            else:
                self.trending_repo.save(TrendingRecord(
                    repo_full_name=item_key,
                    rank=rank,
                    language=lang,
                    trend_date=trend_date,
                    scraped_at=ts,
                ))
                result.created += 1

        check(cancel)
        dups = self.trending_repo.find_duplicate_ranks(trend_date, lang)
        if dups:
            raise ValidationError(
                f"duplicate ranks {dups} for trend_date={trend_date} language={lang}"
            )

        _log(f"date={trend_date} language={lang} created={result.created} updated={result.updated}")
        return result


class ScrapeHandler:
    """
    言語ごとに: trending 取得 -> スロット反映 -> 未登録リポジトリを GitHub API から補完
    """

    def __init__(
        self,
        trending_repo: TrendingRepo,
        repository_repo: RepositoryRepo,
        source: TrendingPageSource,
        github: GitHubClient,
        sleep_sec: float = SLEEP_SEC,
    ):
        self.reconciler = Reconciler(trending_repo)
        self.repository_repo = repository_repo
        self.source = source
        self.github = github
        self.sleep_sec = sleep_sec

    def handle(
        self,
        languages: Iterable[Optional[str]] = ("",),
        *,
        now: Optional[datetime] = None,
        cancel: Optional[CancelToken] = None,
    ) -> dict:
        ts = now or _now()
        total = ReconcileResult()
        saved = 0
        for language in languages:
            check(cancel)
            items = self.source.fetch(language)
            r = self.reconciler.reconcile(items, ts.date(), language, now=ts, cancel=cancel)
            total.created += r.created
            total.updated += r.updated
            saved += self.ensure_repositories(items, cancel=cancel)
        return {"ok": True, "created": total.created, "updated": total.updated, "repositories": saved}

    def ensure_repositories(self, names: List[str], cancel: Optional[CancelToken] = None) -> int:
        check(cancel)
        known = {r.full_name for r in self.repository_repo.find_by_names(names)}
        saved = 0
        for name in dict.fromkeys(names):
            if name in known:
                continue
            check(cancel)
            try:
                data = self.github.get_repository(name)
            except RepositoryNotFound:
                _log(f"[github] not found: {name} -> skip")
                continue

            repo = apply_repository_data(Repository(full_name=name), data)
            check(cancel)
            self.repository_repo.save(repo)
            self.repository_repo.save_tags(repo, self.repository_repo.find_or_create_tags(data.get("topics") or []))
            saved += 1
            time.sleep(self.sleep_sec)
        return saved
