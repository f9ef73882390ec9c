# gameshare/routers/comment.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Comment, User
from ..schemas import CommentIn, CommentOut, response_request
from ..services.store import GameStore
from .auth import get_current_user
from .errors import raise_for_result

router = APIRouter(prefix="/comment", tags=["Comments"])


def _owned_comment(store: GameStore, comment_id: int, user: User) -> Comment:
    comment = store.get_comment(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    if comment.user_id != user.id:
        raise HTTPException(status_code=403, detail="You are not the owner of this comment")
    return comment


def _out(comment: Comment) -> dict:
    return CommentOut.model_validate(comment).model_dump(mode="json")


@router.get("/game/{game_id}")
def list_comments(game_id: int, db: Session = Depends(get_db)):
    store = GameStore(db)
    if not store.get_game(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    return response_request("success", "Comments found", [_out(c) for c in store.list_comments(game_id)])


@router.post("/{game_id}")
def create_comment(
    game_id: int,
    body: CommentIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = raise_for_result(GameStore(db).add_comment(user.id, game_id, body.content))
    return response_request("success", "Comment created", _out(result.value))


@router.put("/{comment_id}")
def update_comment(
    comment_id: int,
    body: CommentIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    store = GameStore(db)
    _owned_comment(store, comment_id, user)
    result = raise_for_result(store.update_comment(comment_id, body.content))
    return response_request("success", "Comment updated", _out(result.value))


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    store = GameStore(db)
    _owned_comment(store, comment_id, user)
    raise_for_result(store.delete_comment(comment_id))
    return response_request("success", "Comment deleted", {"id": comment_id})
