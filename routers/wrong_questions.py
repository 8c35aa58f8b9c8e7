from typing import Optional

from fastapi import APIRouter, HTTPException

from schemas.wrong_questions import WrongQuestionList
from storage import get_wrong_questions

router = APIRouter(prefix="/wrong-questions", tags=["wrong-questions"])


@router.get("", response_model=WrongQuestionList)
def list_wrong_questions(view_type: Optional[str] = None):
    items = get_wrong_questions().list(view_type)
    return {"ok": True, "count": len(items), "items": items}


@router.delete("/{question_id}")
def delete_wrong_question(question_id: str):
    if not get_wrong_questions().remove(question_id):
        raise HTTPException(status_code=404, detail="question not found")
    return {"ok": True}


@router.delete("")
def clear_wrong_questions():
    get_wrong_questions().clear()
    return {"ok": True}
