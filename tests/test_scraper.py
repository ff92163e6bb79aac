from unittest.mock import MagicMock

import requests

from github_client import GitHubClient, RepositoryNotFound, apply_repository_data
from repositories import Repository
from scraper import TrendingPageSource, parse_trending_page

import pytest

PAGE = """
<article class="Box-row">
  <h2 class="h3 lh-condensed">
    <a data-hydro-click="{&quot;event_type&quot;:&quot;explore.click&quot;}" data-view-component="true" class="Link" href="/ollama/ollama">
      <span class="text-normal">ollama /</span> ollama
    </a>
  </h2>
  <a href="/ollama/ollama/stargazers">stars</a>
</article>
<article class="Box-row">
  <h2 class="h3 lh-condensed">
    <a href="/astral-sh/uv" class="Link">uv</a>
  </h2>
  <a href="/login?return_to=%2Fastral-sh%2Fuv">Star</a>
</article>
<article class="Box-row">
  <h1 class="h3 lh-condensed"><a href="/someone">developer</a></h1>
</article>
"""


def _response(status, text="", payload=None):
    r = MagicMock()
    r.status_code = status
    r.text = text
    r.json.return_value = payload
    return r


def test_parse_trending_page_keeps_page_order():
    assert parse_trending_page(PAGE) == ["ollama/ollama", "astral-sh/uv"]
    assert parse_trending_page("<html></html>") == []


def test_page_url():
    source = TrendingPageSource(url="https://github.com/trending/")
    assert source.page_url("") == "https://github.com/trending"
    assert source.page_url(None) == "https://github.com/trending"
    assert source.page_url("c++") == "https://github.com/trending/c%2B%2B?since=daily"


def test_fetch():
    session = MagicMock()
    session.get.return_value = _response(200, PAGE)
    source = TrendingPageSource(url="https://github.com/trending", session=session)
    assert source.fetch("go") == ["ollama/ollama", "astral-sh/uv"]
    assert session.get.call_args.args[0] == "https://github.com/trending/go?since=daily"


def test_fetch_failures_yield_empty_snapshot():
    session = MagicMock()
    session.get.return_value = _response(503)
    assert TrendingPageSource(session=session).fetch() == []

    session.get.side_effect = requests.ConnectionError("down")
    assert TrendingPageSource(session=session).fetch() == []


def test_github_client():
    session = MagicMock()
    session.get.return_value = _response(200, payload={"id": 1})
    client = GitHubClient(token="secret", api="https://api.example.com/", session=session)
    assert client.get_repository("a/b") == {"id": 1}
    args, kwargs = session.get.call_args
    assert args[0] == "https://api.example.com/repos/a/b"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"

    session.get.return_value = _response(404)
    with pytest.raises(RepositoryNotFound):
        client.get_repository("a/b")


def test_github_client_without_token():
    client = GitHubClient(token="", session=MagicMock())
    assert "Authorization" not in client.headers


def test_apply_repository_data_tolerates_missing_fields():
    repo = apply_repository_data(Repository(full_name="a/b"), {"owner": None, "language": ""})
    assert repo.full_name == "a/b"
    assert repo.language is None
    assert repo.owner == ""
    assert repo.default_branch == "main"
