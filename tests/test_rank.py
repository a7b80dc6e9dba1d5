"""Tests for rank key comparison and generation."""

import random

import pytest

from apptboard.rank import (
    INITIAL_RANK,
    RankError,
    compare_ranks,
    is_valid_rank,
    needs_rebalance,
    rank_after,
    rank_before,
    rank_between,
    spread_ranks,
)


def test_compare_ranks():
    assert compare_ranks("a", "b") == -1
    assert compare_ranks("b", "a") == 1
    assert compare_ranks("a", "a") == 0
    assert compare_ranks("a", "a1") == -1  # prefix sorts first
    assert compare_ranks("9", "a") == -1  # digits before letters


def test_is_valid_rank():
    assert is_valid_rank("i")
    assert is_valid_rank("0a")
    assert not is_valid_rank("")
    assert not is_valid_rank("a0")  # trailing minimum digit
    assert not is_valid_rank("A")  # upper case is not in the alphabet
    assert not is_valid_rank("a-b")
    assert not is_valid_rank(None)


def test_rank_between_scenario():
    """Inserting between "a" and "m" lands strictly between them."""
    rank = rank_between("a", "m")
    assert rank == "g"
    assert compare_ranks("a", rank) < 0 < compare_ranks("m", rank)


def test_rank_between_adjacent_extends():
    """Adjacent digits get one more digit at the alphabet midpoint."""
    assert rank_between("a", "b") == "ai"
    assert rank_between("az", "b") == "azi"


def test_rank_between_prefix():
    """A bound that is a prefix of the other still leaves room."""
    rank = rank_between("a", "a1")
    assert "a" < rank < "a1"
    assert rank == "a0i"


def test_rank_between_sentinels():
    assert rank_between(None, None) == INITIAL_RANK
    assert rank_between(None, "1") == "0i"
    assert rank_between("z", None) == "zi"
    low = rank_between(None, "a")
    assert low < "a"
    high = rank_between("a", None)
    assert high > "a"


def test_rank_between_never_returns_bound():
    for low, high in [("a", "b"), ("0i", "0j"), ("zy", "zz"), ("1", "11"), ("h", "hz")]:
        rank = rank_between(low, high)
        assert rank != low and rank != high
        assert low < rank < high
        assert is_valid_rank(rank)


def test_rank_between_rejects_bad_bounds():
    with pytest.raises(RankError):
        rank_between("b", "a")
    with pytest.raises(RankError):
        rank_between("a", "a")
    with pytest.raises(RankError):
        rank_between("a0", "b")


def test_rank_between_repeated_bisection_stays_ordered():
    """Bisecting towards one bound many times keeps a strict order."""
    low, high = "a", "b"
    for _ in range(50):
        mid = rank_between(low, high)
        assert low < mid < high
        high = mid


def test_random_insertions_keep_total_order():
    """Ranks from arbitrary insert positions stay distinct and sorted."""
    rng = random.Random(7)
    ranks = [INITIAL_RANK]
    for _ in range(300):
        i = rng.randint(0, len(ranks))
        low = ranks[i - 1] if i > 0 else None
        high = ranks[i] if i < len(ranks) else None
        ranks.insert(i, rank_between(low, high))
    assert ranks == sorted(ranks)
    assert len(set(ranks)) == len(ranks)


def test_rank_after_steps():
    """Appends step at a fixed width instead of growing."""
    assert rank_after("i") == "i1"
    assert rank_after("i1") == "i2"
    assert rank_after("iz") == "j"


def test_rank_after_long_rank():
    """A long rank is truncated to the step width before stepping."""
    rank = rank_after("i1abc")
    assert rank > "i1abc"
    assert rank == "i2a"


def test_rank_after_overflow_bisects():
    assert rank_after("zz") == "zzi"
    assert rank_after("zzi") > "zzi"


def test_rank_after_many_appends_stay_short():
    rank = INITIAL_RANK
    for _ in range(500):
        nxt = rank_after(rank)
        assert nxt > rank
        rank = nxt
    assert len(rank) <= 3


def test_rank_after_rejects_bad_step():
    with pytest.raises(RankError):
        rank_after("i", 0)


def test_rank_before():
    assert rank_before("i") == "hz"
    assert rank_before("01") == "00i"
    assert rank_before("1") < "1"


def test_spread_ranks():
    assert spread_ranks(0) == []
    assert spread_ranks(3) == ["9", "i", "r"]


def test_spread_ranks_many():
    ranks = spread_ranks(1000)
    assert ranks == sorted(ranks)
    assert len(set(ranks)) == 1000
    assert all(is_valid_rank(r) for r in ranks)
    assert max(len(r) for r in ranks) <= 3


def test_spread_ranks_leave_room_between():
    ranks = spread_ranks(10)
    for low, high in zip(ranks, ranks[1:]):
        assert len(rank_between(low, high)) <= 2


def test_needs_rebalance():
    assert not needs_rebalance("abc", 3)
    assert needs_rebalance("abcd", 3)
