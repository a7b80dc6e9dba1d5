"""Rank keys: lexicographically ordered strings that place cards in a column.

A rank is a non-empty string over a base-36 alphabet that never ends in the
minimum digit. Under that rule plain string comparison agrees with comparing
the zero-padded base-36 values, so a rank strictly between any two distinct
ranks always exists.
"""

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
RADIX = len(ALPHABET)
MIN_DIGIT = ALPHABET[0]

INITIAL_RANK = ALPHABET[RADIX // 2]
RANK_WIDTH = 3
DEFAULT_STEP = RADIX
DEFAULT_MAX_LENGTH = 8

_VALUES = {digit: value for value, digit in enumerate(ALPHABET)}


class RankError(ValueError):
    """Malformed rank, or bounds that are not strictly increasing."""


def is_valid_rank(rank: object) -> bool:
    """True for a non-empty alphabet string not ending in the minimum digit."""
    if not isinstance(rank, str) or not rank:
        return False
    if rank.endswith(MIN_DIGIT):
        return False
    return all(c in _VALUES for c in rank)


def _check(rank: str) -> None:
    if not is_valid_rank(rank):
        raise RankError(f"invalid rank {rank!r}")


def _to_int(rank: str, width: int) -> int:
    """Value of rank right-padded with the minimum digit to width."""
    value = 0
    for c in rank.ljust(width, MIN_DIGIT):
        value = value * RADIX + _VALUES[c]
    return value


def _from_int(value: int, width: int) -> str:
    """Render value as width digits, trailing minimum digits stripped."""
    digits = []
    for _ in range(width):
        value, digit = divmod(value, RADIX)
        digits.append(ALPHABET[digit])
    return "".join(reversed(digits)).rstrip(MIN_DIGIT)


def compare_ranks(left: str, right: str) -> int:
    """Compare two ranks character by character.

    Returns -1 if left < right, 0 if equal, 1 if left > right.
    """
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def rank_between(before: str | None, after: str | None) -> str:
    """Return a rank strictly between before and after.

    None stands for the start of the column (as before) or its end (as
    after). Both bounds are padded to a common width and the arithmetic mean
    of their values is taken; when the bounds are adjacent at that width one
    more digit is added and the mean retried.

    "a", "m" → "g"; "a", "b" → "ai"; None, None → "i"
    """
    if before is not None:
        _check(before)
    if after is not None:
        _check(after)
    if before is not None and after is not None and before >= after:
        raise RankError(f"{before!r} is not below {after!r}")

    width = max(len(before or ""), len(after or ""), 1)
    while True:
        low = _to_int(before, width) if before is not None else 0
        high = _to_int(after, width) if after is not None else RADIX**width
        if high - low > 1:
            return _from_int((low + high) // 2, width)
        width += 1


def rank_after(last: str, step: int = DEFAULT_STEP) -> str:
    """Return a rank past last by a fixed step, for appending at a column end.

    Stepping keeps the rank length fixed where bisection towards the end
    sentinel would add a digit on every append. Falls back to bisection once
    the step would run off the alphabet.

    "i" → "i1"; "i1" → "i2"; "zz" → "zzi"
    """
    _check(last)
    if step < 1:
        raise RankError(f"step must be positive, got {step}")
    value = _to_int(last[:RANK_WIDTH], RANK_WIDTH) + step
    if value >= RADIX**RANK_WIDTH:
        return rank_between(last, None)
    return _from_int(value, RANK_WIDTH)


def rank_before(first: str, step: int = DEFAULT_STEP) -> str:
    """Return a rank below first by a fixed step, for prepending.

    "i" → "hz"; "01" → "00i"
    """
    _check(first)
    if step < 1:
        raise RankError(f"step must be positive, got {step}")
    value = _to_int(first[:RANK_WIDTH], RANK_WIDTH) - step
    if value < 1:
        return rank_between(None, first)
    return _from_int(value, RANK_WIDTH)


def spread_ranks(count: int) -> list[str]:
    """Return count short, evenly spaced ranks in increasing order.

    The width is chosen so that every gap leaves room for at least one full
    step of appends. 3 → ["9", "i", "r"]
    """
    if count < 1:
        return []
    width = 1
    while RADIX**width < (count + 1) * RADIX:
        width += 1
    span = RADIX**width
    return [_from_int((i + 1) * span // (count + 1), width) for i in range(count)]


def needs_rebalance(rank: str, max_length: int = DEFAULT_MAX_LENGTH) -> bool:
    """True when rank has grown past the configured maximum length."""
    return len(rank) > max_length
