# sync.py — 保存済みリポジトリを GitHub API から取り直す（期間・件数で絞る）
#
# cron で毎時 `sync --end=-2d --limit=500` のように回すと、
# 2 日以上更新していないものだけを少しずつ取り直せる（全件の再取得をしない）

import time
from typing import Optional

from cancel import CancelToken, check
from config import SLEEP_SEC
from github_client import GitHubClient, RepositoryNotFound, apply_repository_data
from repositories import RepositoryRepo
from timewindow import TimeWindow


def _log(*s):
    print("[sync]", *s)


class SyncHandler:
    def __init__(self, repository_repo: RepositoryRepo, github: GitHubClient, sleep_sec: float = SLEEP_SEC):
        self.repository_repo = repository_repo
        self.github = github
        self.sleep_sec = sleep_sec

    def handle(self, window: TimeWindow, cancel: Optional[CancelToken] = None) -> dict:
        check(cancel)
        repos = self.repository_repo.find_all(window)
        _log(f"start={window.start} end={window.end} limit={window.limit} targets={len(repos)}")

        synced = skipped = 0
        for repo in repos:
            check(cancel)
            try:
                data = self.github.get_repository(repo.full_name)
            except RepositoryNotFound:
                _log(f"not found: {repo.full_name} -> skip")
                skipped += 1
                continue

            apply_repository_data(repo, data)
            check(cancel)
            self.repository_repo.update(repo)
            self.repository_repo.save_tags(repo, self.repository_repo.find_or_create_tags(data.get("topics") or []))
            synced += 1
            time.sleep(self.sleep_sec)

        _log(f"synced={synced} skipped={skipped}")
        return {"ok": True, "synced": synced, "skipped": skipped}
