from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text,
    Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .db import Base

# ============================================================
# Mixins & helpers
# ============================================================

class TimeStampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

# ============================================================
# Users
# ============================================================

class User(TimeStampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(80), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default="USER")  # ADMIN/USER

    games = relationship("Game", back_populates="creator")
    likes = relationship("Like", back_populates="user", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="user", cascade="all, delete-orphan")
    play_histories = relationship("PlayHistory", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("role in ('ADMIN','USER')", name="ck_users_role"),
    )

# ============================================================
# Games / Tags
# ============================================================

class Tag(TimeStampMixin, Base):
    __tablename__ = "tag"

    id = Column(Integer, primary_key=True)
    name = Column(String(80), unique=True, nullable=False, index=True)

    games = relationship("Game", secondary="taggable", back_populates="tags")


class Taggable(Base):
    __tablename__ = "taggable"

    id = Column(Integer, primary_key=True)
    game_id = Column(Integer, ForeignKey("game.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("tag.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("game_id", "tag_id", name="uq_taggable_game_tag"),
    )


class Game(TimeStampMixin, Base):
    __tablename__ = "game"

    id = Column(Integer, primary_key=True)
    title = Column(String(150), nullable=False, unique=True, index=True)
    # JSON content lives in object storage, only the URLs are kept here
    game_url = Column(String(255))
    thumbnail_url = Column(String(255))
    game_type = Column(String(50))
    likes = Column(Integer, default=0, nullable=False)
    creation_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    creator = relationship("User", back_populates="games")
    tags = relationship("Tag", secondary="taggable", back_populates="games", lazy="selectin")
    like_rows = relationship("Like", back_populates="game", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="game", cascade="all, delete-orphan")
    play_histories = relationship("PlayHistory", back_populates="game", cascade="all, delete-orphan")

    @property
    def tag_ids(self):
        return [t.id for t in self.tags]

    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_game_likes_nonneg"),
        Index("ix_game_creation_date", "creation_date"),
    )

# ============================================================
# Interactions (like / comment / play history)
# ============================================================

class Like(TimeStampMixin, Base):
    __tablename__ = "like"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("game.id"), nullable=False, index=True)

    user = relationship("User", back_populates="likes")
    game = relationship("Game", back_populates="like_rows")

    __table_args__ = (
        UniqueConstraint("user_id", "game_id", name="uq_like_user_game"),
    )


class Comment(TimeStampMixin, Base):
    __tablename__ = "comment"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("game.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)

    user = relationship("User", back_populates="comments")
    game = relationship("Game", back_populates="comments")


class PlayHistory(TimeStampMixin, Base):
    __tablename__ = "play_history"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("game.id"), nullable=False, index=True)
    play_time = Column(Integer, default=0, nullable=False)  # seconds, one row per session

    user = relationship("User", back_populates="play_histories")
    game = relationship("Game", back_populates="play_histories")

    __table_args__ = (
        CheckConstraint("play_time >= 0", name="ck_playhistory_nonneg"),
    )
