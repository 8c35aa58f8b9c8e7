from typing import Dict, List

from pydantic import BaseModel

from storage import HistoryRecord


class RankingsOut(BaseModel):
    tiers: Dict[int, List[HistoryRecord]]


class TierRankingOut(BaseModel):
    tier: int
    view: str
    items: List[HistoryRecord]
