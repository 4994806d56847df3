"""Tests for the top-K counter."""
from __future__ import annotations

import random
import threading
from collections import Counter

import pytest

from streamtopk.counter import InvalidArgument, TopKCounter


def _assert_consistent(counter: TopKCounter) -> None:
    """Index and slot table agree on every occupied slot."""
    index = counter._index
    assert len(index) == len(counter)
    assert len(set(index.values())) == len(index)
    for element, slot in index.items():
        assert 0 <= slot < counter.capacity
        assert counter._slots[slot] == element
        assert counter._counts[slot] >= 1


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    @pytest.mark.parametrize("k", [0, -1, "abc", None, 1.5, True, "5"])
    def test_rejects_invalid_capacity(self, k: object) -> None:
        with pytest.raises(InvalidArgument):
            TopKCounter(k)  # type: ignore[arg-type]

    def test_missing_capacity(self) -> None:
        with pytest.raises(InvalidArgument):
            TopKCounter()

    def test_numeric_string_rejected(self) -> None:
        with pytest.raises(InvalidArgument, match="'5'"):
            TopKCounter("5")  # type: ignore[arg-type]

    def test_invalid_argument_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="positive integer"):
            TopKCounter(0)

    @pytest.mark.parametrize("k", [1, 1_000_000])
    def test_accepts_positive_capacity(self, k: int) -> None:
        counter = TopKCounter(k)
        assert counter.capacity == k
        assert len(counter) == 0
        assert counter.cursor == 0
        assert not counter.saturated

    def test_empty_queries(self) -> None:
        counter = TopKCounter(3)
        assert counter.top() == set()
        assert counter.counts() == {}

    def test_repr(self) -> None:
        counter = TopKCounter(4)
        counter.add("a")
        assert repr(counter) == "TopKCounter(k=4, tracked=1)"


# ---------------------------------------------------------------------------
# Add
# ---------------------------------------------------------------------------

class TestAdd:
    def test_documented_scenario(self) -> None:
        counter = TopKCounter(2)
        returned = [counter.add(e) for e in ["a", "b", "c", "a", "a"]]
        assert returned == [1, 1, 1, 1, 2]
        assert counter.counts() == {"c": 1, "a": 2}

    def test_scenario_intermediate_states(self) -> None:
        counter = TopKCounter(2)
        counter.update(["a", "b"])
        assert counter.counts() == {"a": 1, "b": 1}
        counter.add("c")
        assert counter.counts() == {"c": 1, "b": 1}
        counter.add("a")
        assert counter.counts() == {"c": 1, "a": 1}

    def test_tracked_element_increments(self) -> None:
        counter = TopKCounter(3)
        assert counter.add("x") == 1
        assert counter.add("x") == 2
        assert counter.add("x") == 3

    def test_untracked_returns_zero_when_slot_survives(self) -> None:
        counter = TopKCounter(2)
        counter.update(["a", "a", "b"])
        assert counter.add("c") == 0
        assert "c" not in counter
        assert counter.counts() == {"a": 1, "b": 1}

    def test_eviction_after_decrement_to_zero(self) -> None:
        counter = TopKCounter(2)
        counter.update(["a", "a", "b", "c"])
        assert counter.add("d") == 1
        assert counter.counts() == {"a": 1, "d": 1}

    def test_exact_counts_under_capacity(self, word_lines: list[str]) -> None:
        counter = TopKCounter(4)
        counter.update(word_lines)
        assert counter.counts() == dict(Counter(word_lines))

    def test_saturates_at_capacity(self) -> None:
        counter = TopKCounter(3)
        counter.update(["a", "b"])
        assert not counter.saturated
        counter.add("c")
        assert counter.saturated
        counter.update(["d", "e", "f", "g"])
        assert len(counter) == 3

    def test_none_is_a_valid_element(self) -> None:
        counter = TopKCounter(1)
        counter.add(None)
        assert None in counter
        counter.add("x")
        assert counter.top() == {"x"}

    def test_mixed_hashable_elements(self) -> None:
        counter = TopKCounter(3)
        counter.update([1, (2, 3), frozenset({4}), 1])
        assert counter.counts() == {1: 2, (2, 3): 1, frozenset({4}): 1}


# ---------------------------------------------------------------------------
# Eviction cursor
# ---------------------------------------------------------------------------

class TestEvictionCursor:
    def test_visits_every_slot_in_cyclic_order(self) -> None:
        k = 3
        counter = TopKCounter(k)
        for element in ["a", "b", "c"]:
            for _ in range(5):
                counter.add(element)

        visited = []
        for i in range(2 * k):
            visited.append(counter.cursor)
            counter.add(f"new-{i}")
        assert visited == [0, 1, 2, 0, 1, 2]
        assert counter.counts() == {"a": 3, "b": 3, "c": 3}

    def test_wraps_after_last_slot(self) -> None:
        counter = TopKCounter(2)
        counter.update(["a", "b"])
        counter.add("c")
        assert counter.cursor == 1
        counter.add("d")
        assert counter.cursor == 0

    def test_cursor_untouched_while_filling_or_on_hits(self) -> None:
        counter = TopKCounter(3)
        counter.update(["a", "b", "c", "a", "b"])
        assert counter.cursor == 0

    def test_evicted_slot_is_reused(self) -> None:
        counter = TopKCounter(2)
        counter.update(["a", "b", "c"])
        assert counter._index["c"] == 0
        counter.add("d")
        assert counter._index["d"] == 1


# ---------------------------------------------------------------------------
# Stream properties
# ---------------------------------------------------------------------------

class TestStreamProperties:
    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_randomized_stream_invariants(self, seed: int) -> None:
        rng = random.Random(seed)
        alphabet = [f"e{i}" for i in range(20)]
        weights = [2 ** -(i / 3) for i in range(20)]
        counter = TopKCounter(5)
        truth: Counter[str] = Counter()

        for element in rng.choices(alphabet, weights=weights, k=2000):
            truth[element] += 1
            counter.add(element)
            assert len(counter.top()) <= 5

        _assert_consistent(counter)
        for element, count in counter.counts().items():
            assert 1 <= count <= truth[element]

    def test_hit_increments_by_exactly_one(self) -> None:
        rng = random.Random(3)
        counter = TopKCounter(4)
        for _ in range(500):
            element = rng.choice("abcdefgh")
            before = counter.counts().get(element)
            after = counter.add(element)
            if before is not None:
                assert after == before + 1

    def test_heavy_hitter_survives(self) -> None:
        stream = []
        for i in range(1000):
            stream.append("hot")
            stream.append(f"cold-{i}")
        counter = TopKCounter(10)
        counter.update(stream)
        assert "hot" in counter.top()

    def test_queries_are_idempotent(self, word_lines: list[str]) -> None:
        counter = TopKCounter(2)
        counter.update(word_lines)
        assert counter.top() == counter.top()
        assert counter.counts() == counter.counts()
        assert set(counter.counts()) == counter.top()


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

class TestConcurrency:
    def test_concurrent_adds_are_serialized(self) -> None:
        counter = TopKCounter(10)

        def _feed() -> None:
            for i in range(1000):
                counter.add(i % 10)

        threads = [threading.Thread(target=_feed) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.counts() == {i: 400 for i in range(10)}

    def test_instances_are_independent(self) -> None:
        first, second = TopKCounter(2), TopKCounter(2)
        first.update(["a", "a"])
        assert second.counts() == {}
