# github_client.py — GitHub REST API（リポジトリ詳細の取得だけ）
from typing import Any, Dict, Optional

import requests

from config import GITHUB_API, GITHUB_TOKEN, HTTP_TIMEOUT, USER_AGENT


class RepositoryNotFound(Exception):
    pass


class GitHubClient:
    def __init__(
        self,
        token: str = GITHUB_TOKEN,
        api: str = GITHUB_API,
        session: Optional[requests.Session] = None,
    ):
        self.api = api.rstrip("/")
        self.http = session or requests.Session()
        self.headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def get_repository(self, full_name: str) -> Dict[str, Any]:
        r = self.http.get(
            f"{self.api}/repos/{full_name}",
            headers=self.headers,
            timeout=HTTP_TIMEOUT,
        )
        if r.status_code == 404:
            raise RepositoryNotFound(full_name)
        r.raise_for_status()
        return r.json()


def apply_repository_data(repo, data: Dict[str, Any]):
    """API のレスポンスを Repository に書き写す（full_name は呼び出し側のキーを保つ）"""
    owner = data.get("owner") or {}
    repo.ghr_id = int(data.get("id") or 0)
    repo.stars = int(data.get("stargazers_count") or 0)
    repo.forks = int(data.get("forks_count") or 0)
    repo.language = data.get("language") or None
    repo.owner = owner.get("login") or ""
    repo.owner_avatar_url = owner.get("avatar_url") or ""
    repo.description = data.get("description")
    repo.default_branch = data.get("default_branch") or "main"
    return repo
