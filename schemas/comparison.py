# services/comparison/schemas/comparison.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from expressions import Difficulty
from schemas.expressions import ExpressionOut, Relation


class StartRequest(BaseModel):
    difficulty: Difficulty
    challenge_time: Literal[3, 5, 8] = 5
    inner_difficulty: Difficulty = Difficulty.ADDITIVE
    term_count: int = Field(default=2, ge=2, le=4)

    @field_validator("inner_difficulty")
    @classmethod
    def _inner_is_expression_tier(cls, v: Difficulty) -> Difficulty:
        if v == Difficulty.CHALLENGE:
            raise ValueError("inner_difficulty must be bare, additive or multiplicative")
        return v


class SessionOut(BaseModel):
    id: str
    state: Literal["selecting", "playing", "results"]
    difficulty: Difficulty
    challenge_time: int
    inner_difficulty: Difficulty
    term_count: int
    left: Optional[ExpressionOut] = None
    right: Optional[ExpressionOut] = None
    score: int
    # None outside timed challenge: unlimited lives
    lives: Optional[int] = None
    correct_count: int
    streak: int
    message: str
    time_left: Optional[float] = None


class AnswerRequest(BaseModel):
    sign: Relation


class AnswerResponse(BaseModel):
    correct: bool
    relation: Relation
    points: int
    left: ExpressionOut
    right: ExpressionOut
    session: SessionOut
