from datetime import date, datetime

import pytest

from db import Store
from repositories import Repository, RepositoryRepo
from trending import TrendingRecord, TrendingRepo


@pytest.fixture
def store(tmp_path):
    s = Store.open(str(tmp_path / "trend.db"))
    yield s
    s.close()


@pytest.fixture
def repository_repo(store):
    return RepositoryRepo(store)


@pytest.fixture
def trending_repo(store):
    return TrendingRepo(store)


@pytest.fixture
def add_repo(repository_repo):
    def _add(full_name, **kw):
        repo = Repository(full_name=full_name, owner=full_name.split("/")[0], **kw)
        repository_repo.save(repo)
        return repo
    return _add


@pytest.fixture
def add_trend(trending_repo):
    def _add(full_name, rank, day, language=None):
        record = TrendingRecord(
            repo_full_name=full_name,
            rank=rank,
            language=language,
            trend_date=date.fromisoformat(day),
            scraped_at=datetime.fromisoformat(day + " 12:00:00"),
        )
        trending_repo.save(record)
        return record
    return _add
