import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client(store):
    app.state.store = store
    return TestClient(app)


def test_trending_repositories(client, add_repo, add_trend):
    add_repo("a/a")
    add_repo("b/b")
    add_trend("b/b", 1, "2024-01-08")
    add_trend("a/a", 2, "2024-01-08")
    add_trend("a/a", 1, "2024-01-09")
    add_trend("b/b", 5, "2024-01-09", language="go")

    response = client.get("/api/trending-repositories")
    assert response.status_code == 200
    data = response.json()
    assert [(d["full_name"], d["featured_count"], d["best_ranking"]) for d in data] == [
        ("a/a", 2, 1),
        ("b/b", 1, 1),
    ]

    data = client.get("/api/trending-repositories", params={"language": "go"}).json()
    assert [d["full_name"] for d in data] == ["b/b"]

    assert client.get("/api/trending-repositories", params={"limit": -1}).status_code == 422


def test_repositories_with_tags(client, repository_repo, add_repo):
    repo = add_repo("a/a")
    repository_repo.save_tags(repo, repository_repo.find_or_create_tags(["cli"]))

    data = client.get("/api/repositories").json()
    assert data[0]["full_name"] == "a/a"
    assert data[0]["tags"] == [{"id": 1, "name": "cli"}]

    assert client.get("/api/repositories", params={"filter": "today"}).json() == []
    assert client.get("/api/repositories", params={"filter": "week"}).status_code == 422


def test_repository_detail(client, add_repo):
    add_repo("a/a", stars=5)
    response = client.get("/api/repositories/a/a")
    assert response.status_code == 200
    assert response.json()["stars"] == 5
    assert client.get("/api/repositories/no/such").status_code == 404
