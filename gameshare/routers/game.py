# gameshare/routers/game.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Game, User
from ..recommender.engine import recommend_for_user
from ..schemas import GameOut, PageGameOut, PlayHistoryOut, PlayTimeIn, response_request
from ..services.store import GameStore
from .auth import get_current_user
from .errors import raise_for_result

router = APIRouter(prefix="/game", tags=["Games"])

# ---------------- Helpers ----------------
def _decorate(store: GameStore, game: GameOut, user: Optional[User] = None) -> Dict[str, Any]:
    out = game.model_dump(mode="json")
    out["has_liked"] = store.has_liked(user.id, game.id) if user else False
    out["comments_count"] = store.count_comments(game.id)
    return out

def _serialize_game(store: GameStore, g: Game, user: Optional[User] = None) -> Dict[str, Any]:
    return _decorate(store, GameOut.model_validate(g), user)

def _get_game(store: GameStore, game_id: int) -> Game:
    game = store.get_game(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return game

# ---------------- Endpoints ----------------
@router.get("")
def list_games(
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    store = GameStore(db)
    total, rows = store.list_games(page, per_page)
    data = PageGameOut(
        total=total,
        page=page,
        per_page=per_page,
        last_page=max((total + per_page - 1) // per_page, 1),
        items=[_serialize_game(store, g, user) for g in rows],
    )
    return response_request("success", "Games found", data.model_dump(mode="json"))


@router.get("/recommendation")
def get_recommendations(
    limit: Optional[int] = Query(None, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = recommend_for_user(db, user.id, limit)
    store = GameStore(db)
    return response_request(
        "success",
        "Recommendations found",
        [_decorate(store, g, user) for g in result.games],
    )


@router.get("/{game_id}")
def get_game(
    game_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    store = GameStore(db)
    game = _get_game(store, game_id)
    return response_request("success", "Game found", _serialize_game(store, game, user))


@router.post("/{game_id}/playtime")
def record_play_time(
    game_id: int,
    body: PlayTimeIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = GameStore(db).record_play_time(user.id, game_id, body.play_time)
    raise_for_result(result)
    data = PlayHistoryOut.model_validate(result.value).model_dump()
    return response_request("success", "Playtime recorded", data)
