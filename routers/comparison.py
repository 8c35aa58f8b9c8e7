# services/comparison/routers/comparison.py

from fastapi import APIRouter, HTTPException

from game import ComparisonGame, GameOverError, SessionRegistry
from schemas.comparison import AnswerRequest, AnswerResponse, SessionOut, StartRequest
from storage import get_rankings, get_wrong_questions

router = APIRouter(prefix="/comparison", tags=["comparison"])

registry = SessionRegistry()


def _get_game(session_id: str) -> ComparisonGame:
    game = registry.get(session_id)
    if not game:
        raise HTTPException(status_code=404, detail="Session not found")
    return game


@router.post("/sessions", response_model=SessionOut)
def start_session(req: StartRequest):
    game = ComparisonGame(get_rankings(), get_wrong_questions())
    game.start(req.difficulty, req.challenge_time, req.inner_difficulty, req.term_count)
    registry.add(game)
    return game.snapshot()


@router.get("/sessions/{session_id}", response_model=SessionOut)
def get_session(session_id: str):
    game = _get_game(session_id)
    game.check_timeout()
    return game.snapshot()


@router.post("/sessions/{session_id}/answer", response_model=AnswerResponse)
def answer(session_id: str, req: AnswerRequest):
    game = _get_game(session_id)
    try:
        result = game.answer(req.sign)
    except GameOverError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {**result, "session": game.snapshot()}


@router.post("/sessions/{session_id}/end", response_model=SessionOut)
def end_session(session_id: str):
    game = _get_game(session_id)
    game.end()
    snapshot = game.snapshot()
    registry.remove(session_id)
    return snapshot
