"""
Shared pytest fixtures: in-memory database, catalog factories, API client.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta
from typing import Iterable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gameshare.db import Base, get_db
from gameshare.models import Comment, Game, Like, PlayHistory, Tag, User
from gameshare.routers.auth import create_access_token

BASE_DATE = datetime(2024, 1, 1)


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """TestClient wired to the test session."""
    from gameshare.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# Helper functions for tests


def make_user(db, username: str, role: str = "USER") -> User:
    user = User(username=username, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_tag(db, name: str) -> Tag:
    tag = Tag(name=name)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return tag


def make_game(
    db,
    title: str,
    tags: Iterable[Tag] = (),
    likes: int = 0,
    day: int = 0,
    creator: Optional[User] = None,
) -> Game:
    game = Game(
        title=title,
        likes=likes,
        creation_date=BASE_DATE + timedelta(days=day),
        creator_id=creator.id if creator else None,
    )
    game.tags = list(tags)
    db.add(game)
    db.commit()
    db.refresh(game)
    return game


def add_like(db, user: User, game: Game) -> Like:
    row = Like(user_id=user.id, game_id=game.id)
    game.likes = (game.likes or 0) + 1
    db.add(row)
    db.commit()
    return row


def add_comment(db, user: User, game: Game, content: str = "nice") -> Comment:
    row = Comment(user_id=user.id, game_id=game.id, content=content)
    db.add(row)
    db.commit()
    return row


def add_play(db, user: User, game: Game, seconds: int) -> PlayHistory:
    row = PlayHistory(user_id=user.id, game_id=game.id, play_time=seconds)
    db.add(row)
    db.commit()
    return row


def auth_headers(user: User) -> dict:
    token = create_access_token({"user_id": user.id, "username": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}
