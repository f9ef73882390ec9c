# gameshare/routers/tag.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import TagIn, TagOut, response_request
from ..services.store import GameStore
from .auth import require_roles
from .errors import raise_for_result

router = APIRouter(prefix="/tag", tags=["Tags"])


def _out(tag) -> dict:
    return TagOut.model_validate(tag).model_dump()


@router.get("")
def list_tags(db: Session = Depends(get_db)):
    return response_request("success", "Tags found", [_out(t) for t in GameStore(db).list_tags()])


@router.post("", dependencies=[Depends(require_roles("ADMIN"))])
def create_tag(body: TagIn, db: Session = Depends(get_db)):
    result = raise_for_result(GameStore(db).create_tag(body.name), conflict_status=403)
    return response_request("success", "Tag created", _out(result.value))


@router.put("/{tag_id}", dependencies=[Depends(require_roles("ADMIN"))])
def update_tag(tag_id: int, body: TagIn, db: Session = Depends(get_db)):
    result = raise_for_result(GameStore(db).update_tag(tag_id, body.name), conflict_status=403)
    return response_request("success", "Tag updated", _out(result.value))


@router.delete("/{tag_id}", dependencies=[Depends(require_roles("ADMIN"))])
def delete_tag(tag_id: int, db: Session = Depends(get_db)):
    raise_for_result(GameStore(db).delete_tag(tag_id))
    return response_request("success", "Tag deleted", {"id": tag_id})
