"""Handlers for 'apptboard rank' commands."""

from apptboard.cli._common import error, output_json, output_result
from apptboard.rank import RankError, rank_after, rank_between, spread_ranks


def rank_between_cmd(args) -> int:
    """Print a rank between LOW and HIGH (either may be omitted)."""
    low = args.low or None
    high = args.high or None
    try:
        rank = rank_between(low, high)
    except RankError as e:
        error(str(e), args.json)
    output_result({"low": low, "high": high, "rank": rank}, rank, args.json)
    return 0


def rank_after_cmd(args) -> int:
    """Print the next append rank after RANK."""
    try:
        rank = rank_after(args.rank, args.step)
    except RankError as e:
        error(str(e), args.json)
    output_result({"after": args.rank, "rank": rank}, rank, args.json)
    return 0


def rank_spread_cmd(args) -> int:
    """Print COUNT evenly spaced ranks, one per line."""
    if args.count < 0:
        error("count must not be negative", args.json)
    ranks = spread_ranks(args.count)
    if args.json:
        output_json(ranks)
    else:
        for rank in ranks:
            print(rank)
    return 0
