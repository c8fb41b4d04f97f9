"""
Seed placement and bracket arithmetic.
"""
import math
from typing import List, Dict


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_teams)
    return bracket_size - num_teams


def is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.

    positions[i] is the seed placed in slot i + 1. Starting from [1, 2], each
    doubling to size 2k replaces every seed v with the pair [v, 2k + 1 - v].

    For 8 teams: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if not isinstance(bracket_size, int) or not is_power_of_two(bracket_size):
        raise ValueError(f"bracket size must be a positive power of two, got {bracket_size!r}")
    if bracket_size == 1:
        return [1]

    order = [1, 2]
    size = 2
    while size < bracket_size:
        size *= 2
        result = []
        for seed in order:
            result.extend([seed, size + 1 - seed])
        order = result
    return order


def _entrant_field(entrant, name):
    if isinstance(entrant, dict):
        return entrant.get(name)
    return getattr(entrant, name, None)


def order_entrants(entrants: List) -> List[Dict]:
    """
    Rank entrants by seed, ties (and missing seeds) broken by input order.

    Accepts dicts with 'id'/'seed' or objects with those attributes. Returns
    [{'id', 'seed', 'rank'}] where rank is the 1-based placement seed.
    """
    indexed = []
    for index, entrant in enumerate(entrants):
        seed = _entrant_field(entrant, 'seed')
        if isinstance(seed, bool) or not isinstance(seed, (int, float)):
            seed = None
        indexed.append((index, _entrant_field(entrant, 'id'), seed))

    indexed.sort(key=lambda e: (e[2] is None, e[2] if e[2] is not None else 0, e[0]))
    return [
        {'id': entrant_id, 'seed': seed, 'rank': rank}
        for rank, (_, entrant_id, seed) in enumerate(indexed, start=1)
    ]
