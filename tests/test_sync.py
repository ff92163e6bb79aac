from unittest.mock import MagicMock

import pytest
import requests

from cancel import CancelToken
from errors import Cancelled
from github_client import RepositoryNotFound
from sync import SyncHandler
from timewindow import TimeWindow


def _payload(stars, topics):
    return {
        "id": 1,
        "stargazers_count": stars,
        "forks_count": 0,
        "owner": {"login": "o"},
        "topics": topics,
    }


def test_sync_updates_repositories_in_window(store, repository_repo, add_repo):
    old = add_repo("o/old")
    add_repo("o/fresh")
    store.update("repositories", "id", old.id, {"updated_at": "2024-01-01 00:00:00"})

    github = MagicMock()
    github.get_repository.return_value = _payload(42, ["rust"])

    result = SyncHandler(repository_repo, github, sleep_sec=0).handle(
        TimeWindow(end="2024-01-08 00:00:00")
    )

    assert result == {"ok": True, "synced": 1, "skipped": 0}
    github.get_repository.assert_called_once_with("o/old")
    synced = repository_repo.find_by_id(old.id)
    assert synced.stars == 42
    assert synced.updated_at.year > 2024
    [with_tags] = [r for r in repository_repo.find_all_with_tags() if r.id == old.id]
    assert [t.name for t in with_tags.tags] == ["rust"]


def test_sync_skips_missing_and_respects_limit(repository_repo, add_repo):
    add_repo("o/a")
    add_repo("o/b")
    add_repo("o/c")
    github = MagicMock()
    github.get_repository.side_effect = [RepositoryNotFound("o/a"), _payload(1, [])]

    result = SyncHandler(repository_repo, github, sleep_sec=0).handle(TimeWindow(limit=2))
    assert result == {"ok": True, "synced": 1, "skipped": 1}


def test_sync_propagates_upstream_errors(repository_repo, add_repo):
    add_repo("o/a")
    add_repo("o/b")
    github = MagicMock()
    github.get_repository.side_effect = requests.HTTPError("403 rate limited")

    with pytest.raises(requests.HTTPError):
        SyncHandler(repository_repo, github, sleep_sec=0).handle(TimeWindow())
    assert github.get_repository.call_count == 1


def test_sync_cancelled(repository_repo, add_repo):
    add_repo("o/a")
    token = CancelToken()
    token.cancel()
    github = MagicMock()
    with pytest.raises(Cancelled):
        SyncHandler(repository_repo, github, sleep_sec=0).handle(TimeWindow(), cancel=token)
    github.get_repository.assert_not_called()
