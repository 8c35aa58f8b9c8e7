from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from expressions import (
    EXPRESSION_TIERS,
    Difficulty,
    compare,
    compare_values,
    evaluate_text,
    generate_expression,
    generate_pair,
    validate_text,
)
from schemas.expressions import (
    CompareRequest,
    CompareResponse,
    EvaluateRequest,
    EvaluateResponse,
    ExpressionOut,
    PairOut,
    PointsRequest,
    PointsResponse,
)
from scoring import points

router = APIRouter(tags=["expressions"])


def _check_tier(tier: Difficulty) -> None:
    if tier not in EXPRESSION_TIERS:
        raise HTTPException(
            status_code=422, detail="tier must be bare, additive or multiplicative"
        )


@router.get("/expressions", response_model=ExpressionOut)
def get_expression(
    tier: Difficulty = Difficulty.BARE,
    terms: int = Query(default=2, ge=1, le=4),
):
    _check_tier(tier)
    return generate_expression(tier, terms).to_dict()


@router.get("/expressions/pair", response_model=PairOut)
def get_pair(
    tier: Difficulty = Difficulty.BARE,
    terms: int = Query(default=2, ge=1, le=4),
):
    _check_tier(tier)
    left, right = generate_pair(tier, terms)
    return {"left": left.to_dict(), "right": right.to_dict(), "relation": compare(left, right)}


@router.post("/compare", response_model=CompareResponse)
def compare_sides(req: CompareRequest):
    return {"relation": compare_values(req.left, req.right)}


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate(req: EvaluateRequest):
    err = validate_text(req.expr)
    if err:
        return {"ok": False, "value": None, "feedback": err}
    try:
        val = evaluate_text(req.expr)
    except ValueError as e:
        return {"ok": False, "value": None, "feedback": str(e)}

    if val.q != 1:
        return {"ok": True, "value": None, "exact": f"{val.p}/{val.q}"}
    return {"ok": True, "value": int(val), "exact": str(int(val))}


@router.post("/points", response_model=PointsResponse)
def score_answer(req: PointsRequest):
    return {
        "points": points(
            req.is_correct, req.difficulty, req.time_budget, req.inner_difficulty, req.term_count
        )
    }
