from typing import Literal

from fastapi import APIRouter, HTTPException, Query

from schemas.rankings import RankingsOut, TierRankingOut
from scoring import CHALLENGE_TIMES
from storage import get_rankings

router = APIRouter(prefix="/rankings", tags=["rankings"])


@router.get("", response_model=RankingsOut)
def list_rankings():
    return {"tiers": get_rankings().load()}


@router.get("/{tier}", response_model=TierRankingOut)
def tier_rankings(
    tier: int,
    view: Literal["score", "count"] = Query(default="score", description="Sort key"),
):
    if tier not in CHALLENGE_TIMES:
        raise HTTPException(status_code=404, detail="unknown time tier")
    return {"tier": tier, "view": view, "items": get_rankings().top(tier, view)}
