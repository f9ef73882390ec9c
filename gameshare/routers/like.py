# gameshare/routers/like.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from ..schemas import LikeIn, response_request
from ..services.store import GameStore
from .auth import get_current_user
from .errors import raise_for_result

router = APIRouter(prefix="/like", tags=["Likes"])


@router.get("/count/{game_id}")
def count_likes(game_id: int, db: Session = Depends(get_db)):
    store = GameStore(db)
    if not store.get_game(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    return response_request("success", "Likes counted", {"game_id": game_id, "count": store.count_likes(game_id)})


@router.post("")
def like_game(
    body: LikeIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # liking twice is forbidden, not a conflict
    raise_for_result(GameStore(db).add_like(user.id, body.game_id), conflict_status=403)
    return response_request("success", "Game liked", {"game_id": body.game_id})


@router.delete("/{game_id}")
def unlike_game(
    game_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    raise_for_result(GameStore(db).remove_like(user.id, game_id), conflict_status=403)
    return response_request("success", "Game unliked", {"game_id": game_id})
