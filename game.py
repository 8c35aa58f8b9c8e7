# services/comparison/game.py

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from expressions import Difficulty, ExpressionSide, compare, generate_pair
from scoring import CHALLENGE_TIMES, points
from storage import HistoryRecord, RankingStore, WrongQuestionStore

logger = logging.getLogger("math-explorer.game")

START_LIVES = 3
STREAK_BONUS_EVERY = 5
TERM_COUNTS = (2, 3, 4)
MAX_SESSIONS = 1000

CATEGORY_NAMES = {
    Difficulty.BARE: "Plain numbers",
    Difficulty.ADDITIVE: "Addition & subtraction",
    Difficulty.MULTIPLICATIVE: "Multiplication & division",
    Difficulty.CHALLENGE: "Timed challenge",
}


class GameState(str, Enum):
    SELECTING = "selecting"
    PLAYING = "playing"
    RESULTS = "results"


class GameOverError(Exception):
    """Raised when an answer arrives for a game that is no longer playing."""


class QuestionTimer:
    """Per-question countdown. Expiry is observed lazily through ``expired()``."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._deadline: Optional[float] = None

    def start(self, seconds: float) -> None:
        self._deadline = self._clock() + seconds

    def cancel(self) -> None:
        self._deadline = None

    @property
    def active(self) -> bool:
        return self._deadline is not None

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline


class ComparisonGame:
    def __init__(
        self,
        rankings: RankingStore,
        wrong_questions: WrongQuestionStore,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.id = uuid.uuid4().hex
        self.state = GameState.SELECTING
        self.difficulty = Difficulty.BARE
        self.challenge_time = 5
        self.inner_difficulty = Difficulty.ADDITIVE
        self.term_count = 2

        self.left: Optional[ExpressionSide] = None
        self.right: Optional[ExpressionSide] = None
        self.score = 0
        self.lives = START_LIVES
        self.correct_count = 0
        self.streak = 0
        self.message = ""

        self._rankings = rankings
        self._wrong_questions = wrong_questions
        self._rng = rng or random.Random()
        self.timer = QuestionTimer(clock)
        self._lock = threading.RLock()

    # --- lifecycle ------------------------------------------------------------

    def start(
        self,
        difficulty: Difficulty,
        challenge_time: int = 5,
        inner_difficulty: Difficulty = Difficulty.ADDITIVE,
        term_count: int = 2,
    ) -> None:
        difficulty = Difficulty(difficulty)
        inner_difficulty = Difficulty(inner_difficulty)
        if challenge_time not in CHALLENGE_TIMES:
            raise ValueError(f"challenge_time must be one of {CHALLENGE_TIMES}")
        if inner_difficulty == Difficulty.CHALLENGE:
            raise ValueError("inner_difficulty must be an expression tier")
        if term_count not in TERM_COUNTS:
            raise ValueError(f"term_count must be one of {TERM_COUNTS}")

        with self._lock:
            self.timer.cancel()
            self.difficulty = difficulty
            self.challenge_time = challenge_time
            self.inner_difficulty = inner_difficulty
            self.term_count = term_count
            self.score = 0
            self.lives = START_LIVES
            self.correct_count = 0
            self.streak = 0
            self.message = ""
            self.state = GameState.PLAYING
            self._next_question()

    def end(self) -> None:
        """Leave the game screen without recording a result."""
        with self._lock:
            self.timer.cancel()
            self.state = GameState.SELECTING
            self.message = ""

    @property
    def is_challenge(self) -> bool:
        return self.difficulty == Difficulty.CHALLENGE

    def effective_tier(self) -> tuple:
        tier = self.inner_difficulty if self.is_challenge else self.difficulty
        terms = 1 if tier == Difficulty.BARE else self.term_count
        return tier, terms

    def _next_question(self) -> None:
        tier, terms = self.effective_tier()
        self.left, self.right = generate_pair(tier, terms, self._rng)
        if self.is_challenge:
            self.timer.start(self.challenge_time)

    def _game_over(self) -> None:
        """End a timed challenge and record it in the rankings."""
        self.timer.cancel()
        _, terms = self.effective_tier()
        record = HistoryRecord(
            score=self.score,
            correct_count=self.correct_count,
            date=datetime.now().strftime("%m/%d"),
            time_tier=self.challenge_time,
            inner_difficulty=self.inner_difficulty,
            term_count=terms,
        )
        self._rankings.save(self.challenge_time, record)
        self.state = GameState.RESULTS
        logger.info(
            "game %s over: score=%d correct=%d tier=%ss",
            self.id,
            self.score,
            self.correct_count,
            self.challenge_time,
        )

    def check_timeout(self) -> bool:
        with self._lock:
            if self.state == GameState.PLAYING and self.is_challenge and self.timer.expired():
                self.message = "Time's up!"
                self._game_over()
                return True
            return False

    # --- answering --------------------------------------------------------------

    def answer(self, sign: str) -> Dict[str, Any]:
        if sign not in ("<", "=", ">"):
            raise ValueError(f"invalid sign {sign!r}")

        with self._lock:
            self.check_timeout()
            if self.state != GameState.PLAYING:
                raise GameOverError("game is not in progress")

            self.timer.cancel()
            left, right = self.left, self.right
            relation = compare(left, right)
            correct = sign == relation
            awarded = points(
                correct,
                self.difficulty,
                self.challenge_time,
                self.inner_difficulty,
                self.term_count,
            )

            if correct:
                self.score += awarded
                self.correct_count += 1
                self.streak += 1
                if self.is_challenge and self.streak % STREAK_BONUS_EVERY == 0:
                    self.lives += 1
                    self.message = "Streak bonus: +1 life!"
                else:
                    self.message = f"+{awarded} Great job!"
                self._next_question()
            else:
                self.streak = 0
                self._wrong_questions.save(
                    view_type="COMPARISON",
                    category_name=CATEGORY_NAMES[self.difficulty],
                    question_display=f"{left.text} ○ {right.text}",
                    correct_answer=relation,
                    user_answer=sign,
                )
                if self.is_challenge:
                    self.lives -= 1
                    self.message = "Lost 1 life!"
                    if self.lives <= 0:
                        self._game_over()
                    else:
                        self._next_question()
                else:
                    self.message = "Think it over!"
                    self._next_question()

            return {
                "correct": correct,
                "relation": relation,
                "points": awarded,
                "left": left.to_dict(),
                "right": right.to_dict(),
            }

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            remaining = self.timer.remaining()
            return {
                "id": self.id,
                "state": self.state.value,
                "difficulty": self.difficulty.value,
                "challenge_time": self.challenge_time,
                "inner_difficulty": self.inner_difficulty.value,
                "term_count": self.term_count,
                "left": self.left.to_dict() if self.left else None,
                "right": self.right.to_dict() if self.right else None,
                "score": self.score,
                "lives": self.lives if self.is_challenge else None,
                "correct_count": self.correct_count,
                "streak": self.streak,
                "message": self.message,
                "time_left": round(remaining, 2) if remaining is not None else None,
            }


class SessionRegistry:
    def __init__(self, max_sessions: int = MAX_SESSIONS):
        self._games: Dict[str, ComparisonGame] = {}
        self._lock = threading.Lock()
        self._max = max_sessions

    def add(self, game: ComparisonGame) -> ComparisonGame:
        with self._lock:
            while len(self._games) >= self._max:
                oldest = next(iter(self._games))
                self._games.pop(oldest).timer.cancel()
            self._games[game.id] = game
        return game

    def get(self, game_id: str) -> Optional[ComparisonGame]:
        with self._lock:
            return self._games.get(game_id)

    def remove(self, game_id: str) -> None:
        with self._lock:
            game = self._games.pop(game_id, None)
        if game is not None:
            game.timer.cancel()
