# services/comparison/storage.py

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from typing import Any, Dict, List, Optional, Protocol, Union

from pydantic import BaseModel, ValidationError

from db import SessionLocal
from expressions import Difficulty
from models import KeyValue
from scoring import CHALLENGE_TIMES

logger = logging.getLogger("math-explorer.storage")

RANKS_KEY = "math_comparison_v12_ranks"
WRONG_QUESTIONS_KEY = "math_explorer_wrong_questions"

MAX_RANKS_PER_TIER = 15
MAX_WRONG_QUESTIONS = 100
DUPLICATE_WINDOW_MS = 10_000


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SqlKeyValueStore:
    """Key-value blobs in the ``kv_store`` table."""

    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            if row is None:
                db.add(KeyValue(key=key, value=value))
            else:
                row.value = value
            db.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as db:
            row = db.get(KeyValue, key)
            if row is not None:
                db.delete(row)
                db.commit()


def _load_json(store: KeyValueStore, key: str) -> Any:
    raw = store.get(key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        # Treat a broken blob as empty
        logger.warning("discarding unreadable blob under %s", key)
        return None


# ---------- Rankings ----------


class HistoryRecord(BaseModel):
    score: int
    correct_count: int
    date: str
    time_tier: int
    inner_difficulty: Difficulty
    term_count: int


Rankings = Dict[int, List[HistoryRecord]]


def _empty_rankings() -> Rankings:
    return {t: [] for t in CHALLENGE_TIMES}


class RankingStore:
    def __init__(self, store: KeyValueStore, key: str = RANKS_KEY) -> None:
        self._store = store
        self._key = key
        self._lock = threading.Lock()

    def load(self) -> Rankings:
        rankings = _empty_rankings()
        data = _load_json(self._store, self._key)
        if not isinstance(data, dict):
            return rankings

        for tier_key, rows in data.items():
            try:
                tier = int(tier_key)
            except (TypeError, ValueError):
                continue
            if tier not in rankings or not isinstance(rows, list):
                continue
            for raw in rows:
                try:
                    rankings[tier].append(HistoryRecord(**raw))
                except (TypeError, ValidationError):
                    # Skip invalid records
                    continue
        return rankings

    def save(self, tier: int, record: HistoryRecord) -> List[HistoryRecord]:
        if tier not in CHALLENGE_TIMES:
            raise ValueError(f"unknown time tier {tier}")
        with self._lock:
            rankings = self.load()
            tier_ranks = rankings[tier] + [record]
            tier_ranks.sort(key=lambda r: r.score, reverse=True)
            rankings[tier] = tier_ranks[:MAX_RANKS_PER_TIER]
            self._write(rankings)
        logger.info("saved %s-second ranking: score=%d", tier, record.score)
        return rankings[tier]

    def top(self, tier: int, view: str = "score") -> List[HistoryRecord]:
        rows = list(self.load().get(tier, []))
        if view == "count":
            rows.sort(key=lambda r: r.correct_count, reverse=True)
        else:
            rows.sort(key=lambda r: r.score, reverse=True)
        return rows

    def reset(self) -> None:
        with self._lock:
            self._store.delete(self._key)

    def _write(self, rankings: Rankings) -> None:
        payload = {
            str(tier): [r.model_dump(mode="json") for r in rows] for tier, rows in rankings.items()
        }
        self._store.set(self._key, json.dumps(payload))


# ---------- Wrong-question notebook ----------


class WrongQuestion(BaseModel):
    id: str
    view_type: str
    category_name: str
    question_display: str
    correct_answer: Union[str, int, float]
    user_answer: Union[str, int, float]
    timestamp: int


def _now_ms() -> int:
    return int(time.time() * 1000)


class WrongQuestionStore:
    def __init__(self, store: KeyValueStore, key: str = WRONG_QUESTIONS_KEY, clock=_now_ms):
        self._store = store
        self._key = key
        self._clock = clock
        self._lock = threading.Lock()

    def list(self, view_type: Optional[str] = None) -> List[WrongQuestion]:
        data = _load_json(self._store, self._key)
        if not isinstance(data, list):
            return []
        out: List[WrongQuestion] = []
        for raw in data:
            try:
                q = WrongQuestion(**raw)
            except (TypeError, ValidationError):
                continue
            if view_type is None or q.view_type == view_type:
                out.append(q)
        return out

    def save(
        self,
        view_type: str,
        category_name: str,
        question_display: str,
        correct_answer: Union[str, int, float],
        user_answer: Union[str, int, float],
    ) -> Optional[WrongQuestion]:
        """
        Record a wrong answer, newest first. Returns None when the same
        question was already recorded within the last ten seconds.
        """
        with self._lock:
            existing = self.list()
            now = self._clock()
            for q in existing:
                if q.question_display == question_display and now - q.timestamp < DUPLICATE_WINDOW_MS:
                    return None

            question = WrongQuestion(
                id=uuid.uuid4().hex[:9],
                view_type=view_type,
                category_name=category_name,
                question_display=question_display,
                correct_answer=correct_answer,
                user_answer=user_answer,
                timestamp=now,
            )
            self._write(([question] + existing)[:MAX_WRONG_QUESTIONS])
        return question

    def remove(self, question_id: str) -> bool:
        with self._lock:
            existing = self.list()
            kept = [q for q in existing if q.id != question_id]
            if len(kept) == len(existing):
                return False
            self._write(kept)
        return True

    def clear(self) -> None:
        with self._lock:
            self._store.delete(self._key)

    def _write(self, questions: List[WrongQuestion]) -> None:
        self._store.set(self._key, json.dumps([q.model_dump() for q in questions]))


# Public API
_kv: KeyValueStore = SqlKeyValueStore()
_rankings = RankingStore(_kv)
_wrong_questions = WrongQuestionStore(_kv)


def get_rankings() -> RankingStore:
    return _rankings


def get_wrong_questions() -> WrongQuestionStore:
    return _wrong_questions
