from typing import List

from pydantic import BaseModel

from storage import WrongQuestion


class WrongQuestionList(BaseModel):
    ok: bool
    count: int
    items: List[WrongQuestion]
