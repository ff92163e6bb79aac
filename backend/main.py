# main.py — 読み出し API
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from config import DB_PATH
from db import Store
from repositories import RepositoryRepo


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = Store.open(DB_PATH)
    try:
        yield
    finally:
        app.state.store.close()


app = FastAPI(title="TrendRank API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)


def get_repository_repo(request: Request) -> RepositoryRepo:
    return RepositoryRepo(request.app.state.store)


@app.get("/api/trending-repositories")
def trending_repositories(
    language: str = "",
    limit: int = Query(0, ge=0, le=1000),
    date_range: int = Query(0, ge=0, le=3650, alias="dateRange"),
    repo: RepositoryRepo = Depends(get_repository_repo),
):
    rankings = repo.find_trending_repositories(language=language, limit=limit, date_range=date_range)
    return [
        {**asdict(r.repository), "featured_count": r.featured_count, "best_ranking": r.best_ranking}
        for r in rankings
    ]


@app.get("/api/repositories")
def repositories(
    filter: str = Query("all", pattern="^(today|all)$"),
    repo: RepositoryRepo = Depends(get_repository_repo),
):
    return repo.find_all_with_tags(filter)


@app.get("/api/repositories/{full_name:path}")
def repository_detail(full_name: str, repo: RepositoryRepo = Depends(get_repository_repo)):
    found = repo.find_by_name(full_name)
    if found is None:
        raise HTTPException(status_code=404, detail=f"repository not found: {full_name}")
    return found
