from sqlalchemy import (create_engine, func, Column, Date, DateTime, ForeignKey, Index,
                        Integer, String, Text)
from sqlalchemy.orm import declarative_base

from config import DB_PATH

Base = declarative_base()


class Repository(Base):
    __tablename__ = "repositories"
    id = Column(Integer, primary_key=True, autoincrement=True)
    ghr_id = Column(Integer, nullable=False, default=0)             # GitHub 側の id
    stars = Column(Integer, nullable=False, default=0)
    forks = Column(Integer, nullable=False, default=0)
    full_name = Column(String, nullable=False, unique=True)         # "owner/name"
    language = Column(String, nullable=True)
    owner = Column(String, nullable=False, default="")
    owner_avatar_url = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=True)
    default_branch = Column(String, nullable=False, default="main")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False, index=True)


class Tag(Base):
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)


class RepositoryTag(Base):
    __tablename__ = "repositories_tags"
    repository_id = Column(Integer, ForeignKey("repositories.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)


class TrendingRepository(Base):
    __tablename__ = "trending_repositories"
    id = Column(Integer, primary_key=True, autoincrement=True)
    repo_full_name = Column(String, nullable=False, index=True)
    rank = Column(Integer, nullable=False)
    language = Column(String, nullable=True)                        # NULL = 全言語
    trend_date = Column(Date, nullable=False)
    scraped_at = Column(DateTime, nullable=False)


# 1 日・1 言語・1 順位につき 1 行。NULL 同士は UNIQUE で衝突しないので COALESCE で揃える
Index(
    "uq_trending_slot",
    TrendingRepository.trend_date,
    func.coalesce(TrendingRepository.language, ""),
    TrendingRepository.rank,
    unique=True,
)


def init_db(db_path: str = DB_PATH):
    engine = create_engine(f"sqlite:///{db_path}", future=True)
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()
