from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from deps.auth import require_admin
from storage import get_rankings

logger = logging.getLogger("math-explorer.admin")

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/rankings/reset", dependencies=[Depends(require_admin)])
def reset_rankings():
    get_rankings().reset()
    logger.info("rankings reset by admin")
    return {"ok": True}
