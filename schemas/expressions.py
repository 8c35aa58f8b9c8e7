# services/comparison/schemas/expressions.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from expressions import Difficulty

Relation = Literal["<", "=", ">"]

# ---------- Generate ----------


class ExpressionOut(BaseModel):
    text: str
    value: int


class PairOut(BaseModel):
    left: ExpressionOut
    right: ExpressionOut
    relation: Relation


# ---------- Compare ----------


class CompareRequest(BaseModel):
    left: float
    right: float


class CompareResponse(BaseModel):
    relation: Relation


# ---------- Evaluate ----------


class EvaluateRequest(BaseModel):
    expr: str


class EvaluateResponse(BaseModel):
    ok: bool
    value: Optional[int] = None
    exact: Optional[str] = None
    feedback: Optional[str] = None


# ---------- Points ----------


class PointsRequest(BaseModel):
    is_correct: bool
    difficulty: Difficulty
    time_budget: Literal[3, 5, 8] = 5
    inner_difficulty: Difficulty = Difficulty.ADDITIVE
    term_count: int = Field(default=2, ge=1, le=4)


class PointsResponse(BaseModel):
    points: int
