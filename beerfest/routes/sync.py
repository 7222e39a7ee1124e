"""
POST /sync endpoint.

Runs a feed update in the request thread. Failed syncs are reported with
the SyncResponse body and a status code for the failure kind. A store
that cannot even be read to decide whether an update is due is a 503.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from ..errors import StoreError
from ..models.enums import FailureKind
from ..models.response import SyncResponse
from ..services.sync_engine import SyncResult
from .dependencies import get_update_service

logger = logging.getLogger(__name__)
router = APIRouter()

FAILURE_STATUS_CODES = {
    FailureKind.SYNC_ALREADY_IN_PROGRESS: 409,
    FailureKind.FETCH_ERROR: 502,
    FailureKind.PARSE_ERROR: 422,
    FailureKind.STORE_ERROR: 503,
}


def _to_response(result: Optional[SyncResult]) -> SyncResponse:
    if result is None:
        return SyncResponse(state="idle", skipped_update=True)
    return SyncResponse(**result.to_dict())


@router.post("/sync", response_model=SyncResponse)
def run_sync(
    force: bool = Query(default=False, description="Sync even if no update is due"),
    timeout: Optional[float] = Query(default=None, gt=0, description="Fetch timeout in seconds"),
):
    """
    Update the beer list from the festival feed.

    Without ``force`` the feed is only fetched when an update is due, and an
    unchanged feed is not re-applied.
    """
    try:
        result = get_update_service().run(force=force, timeout=timeout)
    except StoreError as e:
        logger.error(f"Sync request failed, beer store unavailable: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Beer database unavailable")
    response = _to_response(result)

    if result is not None and result.failure is not None:
        status_code = FAILURE_STATUS_CODES[result.failure.kind]
        logger.warning(f"Sync request failed: {result.failure.kind.value} ({status_code})")
        return JSONResponse(status_code=status_code, content=response.model_dump())
    return response
