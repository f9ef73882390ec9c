from __future__ import annotations
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field, ConfigDict, field_validator

# =========================================================
# Helpers (generic pagination + response envelope)
# =========================================================
T = TypeVar("T")


class PageOut(BaseModel, Generic[T]):
    total: int
    page: int
    per_page: int
    last_page: int
    items: List[T]


def response_request(
    status: str,
    message: str,
    data=None,
    error: Optional[str] = None,
) -> dict:
    """
    Build the `{status, message, data, timestamp}` envelope every route returns.
    `error` is only included when given.
    """
    if status not in ("success", "faild"):
        raise ValueError("Invalid status: must be 'success' or 'faild'")
    if not message:
        raise ValueError("Message is required")

    out = {
        "status": status,
        "message": message,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if error:
        out["error"] = error
    return out

# =========================================================
# TAG
# =========================================================

class TagIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class TagOut(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)

# =========================================================
# GAME
# =========================================================

class GameOut(BaseModel):
    id: int
    title: str
    game_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    game_type: Optional[str] = None
    likes: int = 0
    creation_date: datetime
    creator_id: Optional[int] = None
    tags: List[TagOut] = []
    has_liked: Optional[bool] = None
    comments_count: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


class PageGameOut(PageOut[GameOut]):
    pass


class PlayTimeIn(BaseModel):
    play_time: int = Field(..., ge=0, description="Seconds played in this session")


class PlayHistoryOut(BaseModel):
    id: int
    user_id: int
    game_id: int
    play_time: int
    model_config = ConfigDict(from_attributes=True)

# =========================================================
# RECOMMENDATION
# =========================================================

class RecommendationRequest(BaseModel):
    user_id: int
    limit: Optional[int] = None


class RecommendationResult(BaseModel):
    games: List[GameOut]

# =========================================================
# LIKE / COMMENT
# =========================================================

class LikeIn(BaseModel):
    game_id: int


class CommentIn(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content", mode="before")
    @classmethod
    def _strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


class CommentOut(BaseModel):
    id: int
    user_id: int
    game_id: int
    content: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
