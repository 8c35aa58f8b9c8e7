import pytest

from expressions import Difficulty
from storage import (
    RANKS_KEY,
    HistoryRecord,
    MemoryKeyValueStore,
    RankingStore,
    SqlKeyValueStore,
    WrongQuestionStore,
)


def _record(score, count=1, tier=5):
    return HistoryRecord(
        score=score,
        correct_count=count,
        date="10/18",
        time_tier=tier,
        inner_difficulty=Difficulty.ADDITIVE,
        term_count=2,
    )


def test_rankings_start_empty_per_tier():
    assert RankingStore(MemoryKeyValueStore()).load() == {3: [], 5: [], 8: []}


def test_rankings_keep_top_fifteen_by_score():
    store = RankingStore(MemoryKeyValueStore())
    for score in range(20):
        store.save(5, _record(score))
    ranks = store.load()[5]
    assert len(ranks) == 15
    assert [r.score for r in ranks] == list(range(19, 4, -1))
    assert store.load()[3] == []


def test_rankings_view_by_count():
    store = RankingStore(MemoryKeyValueStore())
    store.save(3, _record(50, count=2, tier=3))
    store.save(3, _record(10, count=9, tier=3))
    assert [r.correct_count for r in store.top(3, "count")] == [9, 2]
    assert [r.score for r in store.top(3, "score")] == [50, 10]


def test_rankings_reject_unknown_tier():
    with pytest.raises(ValueError):
        RankingStore(MemoryKeyValueStore()).save(4, _record(1))


def test_rankings_tolerate_corrupt_blob():
    kv = MemoryKeyValueStore()
    kv.set(RANKS_KEY, "{not json")
    assert RankingStore(kv).load() == {3: [], 5: [], 8: []}

    kv.set(RANKS_KEY, '{"5": [{"score": "lots"}, {"score": 3, "correct_count": 1, '
           '"date": "01/02", "time_tier": 5, "inner_difficulty": "bare", "term_count": 1}], "x": []}')
    ranks = RankingStore(kv).load()
    assert [r.score for r in ranks[5]] == [3]


def test_rankings_reset():
    kv = MemoryKeyValueStore()
    store = RankingStore(kv)
    store.save(8, _record(5, tier=8))
    store.reset()
    assert kv.get(RANKS_KEY) is None


class FakeClock:
    def __init__(self, now=1_000_000):
        self.now = now

    def __call__(self):
        return self.now


def test_wrong_questions_newest_first_and_deduplicated():
    clock = FakeClock()
    store = WrongQuestionStore(MemoryKeyValueStore(), clock=clock)
    first = store.save("COMPARISON", "Plain numbers", "3 ○ 5", "<", ">")
    assert first is not None
    assert store.save("COMPARISON", "Plain numbers", "3 ○ 5", "<", "=") is None

    clock.now += 10_000
    again = store.save("COMPARISON", "Plain numbers", "3 ○ 5", "<", "=")
    assert again is not None
    assert [q.id for q in store.list()] == [again.id, first.id]


def test_wrong_questions_capped_at_hundred():
    clock = FakeClock()
    store = WrongQuestionStore(MemoryKeyValueStore(), clock=clock)
    for i in range(105):
        store.save("QUIZ", "Mixed", f"{i}+1", i + 1, 0)
    items = store.list()
    assert len(items) == 100
    assert items[0].question_display == "104+1"


def test_wrong_questions_filter_remove_clear():
    store = WrongQuestionStore(MemoryKeyValueStore())
    a = store.save("COMPARISON", "Timed challenge", "4 ○ 2×2", "=", "<")
    store.save("QUIZ", "Mixed", "3×4", 12, 11)
    assert [q.id for q in store.list("COMPARISON")] == [a.id]

    assert store.remove(a.id) is True
    assert store.remove(a.id) is False
    assert len(store.list()) == 1

    store.clear()
    assert store.list() == []


def test_sql_key_value_store_roundtrip():
    kv = SqlKeyValueStore()
    assert kv.get("k") is None
    kv.set("k", "one")
    kv.set("k", "two")
    assert kv.get("k") == "two"
    kv.delete("k")
    assert kv.get("k") is None


class LockCheckingStore(MemoryKeyValueStore):
    """Fails a delete issued while the owning store's lock is free."""

    owner = None

    def delete(self, key):
        assert self.owner._lock.locked()
        super().delete(key)


def test_rankings_reset_holds_lock():
    kv = LockCheckingStore()
    store = RankingStore(kv)
    kv.owner = store
    store.save(5, _record(7))
    store.reset()
    assert store.load()[5] == []


def test_wrong_questions_clear_holds_lock():
    kv = LockCheckingStore()
    store = WrongQuestionStore(kv)
    kv.owner = store
    store.save("QUIZ", "Mixed", "2+2", 4, 5)
    store.clear()
    assert store.list() == []
