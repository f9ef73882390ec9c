# gameshare/routers/errors.py
from fastapi import HTTPException

from ..services.store import Outcome, StoreResult

_STATUS = {
    Outcome.NOT_FOUND: 404,
    Outcome.CONFLICT: 409,
    Outcome.UNAVAILABLE: 503,
}


def raise_for_result(result: StoreResult, conflict_status: int = 409) -> StoreResult:
    """Turn a non-OK StoreResult into the matching HTTPException."""
    if result.ok:
        return result
    status = conflict_status if result.outcome is Outcome.CONFLICT else _STATUS[result.outcome]
    raise HTTPException(status_code=status, detail=result.detail)
