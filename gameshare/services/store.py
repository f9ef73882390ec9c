# gameshare/services/store.py
"""
Data access for games and user interactions.

GameStore is built around an explicit Session (one per request).
Reads used by the recommender return ORM rows with tags loaded.
Writes return a StoreResult so callers branch on an Outcome instead of
catching driver exceptions.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, selectinload

from ..models import Comment, Game, Like, PlayHistory, Tag

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNAVAILABLE = "UNAVAILABLE"


@dataclass
class StoreResult:
    outcome: Outcome
    value: Any = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def success(cls, value=None) -> "StoreResult":
        return cls(Outcome.OK, value)

    @classmethod
    def not_found(cls, detail: str) -> "StoreResult":
        return cls(Outcome.NOT_FOUND, detail=detail)

    @classmethod
    def conflict(cls, detail: str) -> "StoreResult":
        return cls(Outcome.CONFLICT, detail=detail)

    @classmethod
    def unavailable(cls, detail: str) -> "StoreResult":
        return cls(Outcome.UNAVAILABLE, detail=detail)


_GAME_WITH_TAGS = selectinload(Game.tags)


class GameStore:
    def __init__(self, db: Session):
        self.db = db

    # ---------------- interaction reads ----------------
    def find_liked(self, user_id: int) -> List[Like]:
        return (
            self.db.query(Like)
            .options(selectinload(Like.game).selectinload(Game.tags))
            .filter(Like.user_id == user_id)
            .order_by(Like.id.asc())
            .all()
        )

    def find_commented(self, user_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .options(selectinload(Comment.game).selectinload(Game.tags))
            .filter(Comment.user_id == user_id)
            .order_by(Comment.id.asc())
            .all()
        )

    def find_played(self, user_id: int) -> List[PlayHistory]:
        return (
            self.db.query(PlayHistory)
            .options(selectinload(PlayHistory.game).selectinload(Game.tags))
            .filter(PlayHistory.user_id == user_id)
            .order_by(PlayHistory.id.asc())
            .all()
        )

    # ---------------- catalog reads ----------------
    def find_games_excluding(self, ids: Iterable[int]) -> List[Game]:
        ids = list(ids)
        q = self.db.query(Game).options(_GAME_WITH_TAGS)
        if ids:
            q = q.filter(~Game.id.in_(ids))
        return q.order_by(Game.id.asc()).all()

    def find_top_by_likes(self, n: int) -> List[Game]:
        return (
            self.db.query(Game)
            .options(_GAME_WITH_TAGS)
            .order_by(Game.likes.desc(), Game.id.asc())
            .limit(n)
            .all()
        )

    def find_top_by_play_count(self, n: int) -> List[Game]:
        plays = (
            self.db.query(
                PlayHistory.game_id,
                func.count(PlayHistory.id).label("plays"),
            )
            .group_by(PlayHistory.game_id)
            .subquery()
        )
        rows = (
            self.db.query(Game)
            .options(_GAME_WITH_TAGS)
            .join(plays, plays.c.game_id == Game.id)
            .order_by(plays.c.plays.desc(), Game.id.asc())
            .limit(n)
            .all()
        )
        return rows

    def find_by_creation(self, order: str, n: int) -> List[Game]:
        if order not in ("asc", "desc"):
            raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")
        if order == "desc":
            ordering = (Game.creation_date.desc(), Game.id.desc())
        else:
            ordering = (Game.creation_date.asc(), Game.id.asc())
        return (
            self.db.query(Game)
            .options(_GAME_WITH_TAGS)
            .order_by(*ordering)
            .limit(n)
            .all()
        )

    def count_games(self) -> int:
        return self.db.query(func.count(Game.id)).scalar() or 0

    def get_game(self, game_id: int) -> Optional[Game]:
        return self.db.get(Game, game_id)

    def list_games(self, page: int, per_page: int):
        q = self.db.query(Game).options(_GAME_WITH_TAGS)
        total = q.count()
        rows = (
            q.order_by(Game.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return total, rows

    # ---------------- likes ----------------
    def has_liked(self, user_id: int, game_id: int) -> bool:
        return (
            self.db.query(Like.id)
            .filter(Like.user_id == user_id, Like.game_id == game_id)
            .first()
            is not None
        )

    def count_likes(self, game_id: int) -> int:
        return self.db.query(func.count(Like.id)).filter(Like.game_id == game_id).scalar() or 0

    def add_like(self, user_id: int, game_id: int) -> StoreResult:
        game = self.get_game(game_id)
        if not game:
            return StoreResult.not_found("Game not found")
        if self.has_liked(user_id, game_id):
            return StoreResult.conflict("You have already liked this game")

        like = Like(user_id=user_id, game_id=game_id)
        self.db.add(like)
        game.likes = (game.likes or 0) + 1
        return self._commit(like)

    def remove_like(self, user_id: int, game_id: int) -> StoreResult:
        like = (
            self.db.query(Like)
            .filter(Like.user_id == user_id, Like.game_id == game_id)
            .first()
        )
        if not like:
            return StoreResult.conflict("You have not liked this game")

        game = self.get_game(game_id)
        self.db.delete(like)
        if game and game.likes:
            game.likes -= 1
        return self._commit()

    # ---------------- comments ----------------
    def list_comments(self, game_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.game_id == game_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )

    def count_comments(self, game_id: int) -> int:
        return self.db.query(func.count(Comment.id)).filter(Comment.game_id == game_id).scalar() or 0

    def get_comment(self, comment_id: int) -> Optional[Comment]:
        return self.db.get(Comment, comment_id)

    def add_comment(self, user_id: int, game_id: int, content: str) -> StoreResult:
        if not self.get_game(game_id):
            return StoreResult.not_found("Game not found")
        comment = Comment(user_id=user_id, game_id=game_id, content=content)
        self.db.add(comment)
        return self._commit(comment)

    def update_comment(self, comment_id: int, content: str) -> StoreResult:
        comment = self.get_comment(comment_id)
        if not comment:
            return StoreResult.not_found("Comment not found")
        comment.content = content
        return self._commit(comment)

    def delete_comment(self, comment_id: int) -> StoreResult:
        comment = self.get_comment(comment_id)
        if not comment:
            return StoreResult.not_found("Comment not found")
        self.db.delete(comment)
        return self._commit()

    # ---------------- play history ----------------
    def record_play_time(self, user_id: int, game_id: int, seconds: int) -> StoreResult:
        if not self.get_game(game_id):
            return StoreResult.not_found("Game not found")
        row = PlayHistory(user_id=user_id, game_id=game_id, play_time=int(seconds))
        self.db.add(row)
        return self._commit(row)

    # ---------------- tags ----------------
    def list_tags(self) -> List[Tag]:
        return self.db.query(Tag).order_by(Tag.name.asc()).all()

    def create_tag(self, name: str) -> StoreResult:
        if self.db.query(Tag).filter(Tag.name == name).first():
            return StoreResult.conflict(f'A tag with the name "{name}" already exists.')
        tag = Tag(name=name)
        self.db.add(tag)
        return self._commit(tag)

    def update_tag(self, tag_id: int, name: str) -> StoreResult:
        tag = self.db.get(Tag, tag_id)
        if not tag:
            return StoreResult.not_found("Tag not found")
        clash = self.db.query(Tag).filter(Tag.name == name, Tag.id != tag_id).first()
        if clash:
            return StoreResult.conflict(f'A tag with the name "{name}" already exists.')
        tag.name = name
        return self._commit(tag)

    def delete_tag(self, tag_id: int) -> StoreResult:
        tag = self.db.get(Tag, tag_id)
        if not tag:
            return StoreResult.not_found("Tag not found")
        self.db.delete(tag)
        return self._commit()

    # ---------------- helpers ----------------
    def _commit(self, row=None) -> StoreResult:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info("integrity conflict: %s", e.orig)
            return StoreResult.conflict("Conflicts with an existing record")
        except OperationalError:
            self.db.rollback()
            logger.exception("store unavailable during commit")
            return StoreResult.unavailable("Storage unavailable")
        if row is not None:
            self.db.refresh(row)
        return StoreResult.success(row)
