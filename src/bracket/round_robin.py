"""
Round-robin schedule generation (circle method).
"""
import logging
from typing import List, Dict, Optional

from .models import RoundRobinRow

logger = logging.getLogger(__name__)


class _Bye:
    def __repr__(self):
        return 'BYE'


BYE = _Bye()


def _circle_pairings(entrants: List) -> List[List[tuple]]:
    """
    Pair entrants for one full pass: one list of (a, b) pairs per matchday.

    Position 0 stays fixed; after each matchday the last entrant moves to
    position 1. Pairs involving the bye sentinel are dropped.
    """
    arr = list(entrants)
    if len(arr) % 2 == 1:
        arr.append(BYE)

    m = len(arr)
    half = m // 2
    matchdays = []
    for _ in range(m - 1):
        pairs = []
        for i in range(half):
            a = arr[i]
            b = arr[m - 1 - i]
            if a is BYE or b is BYE:
                continue
            pairs.append((a, b))
        matchdays.append(pairs)
        arr = [arr[0], arr[-1]] + arr[1:-1]
    return matchdays


def generate_round_robin(team_ids: List, repeats: int = 1, stage_index: int = 0,
                         group_index: Optional[int] = None) -> List[RoundRobinRow]:
    """
    Generate a round-robin schedule in which every pair meets once per pass.

    Extra passes repeat the base matchdays at offset k * (m - 1), swapping
    home and away on every second pass.
    """
    if len(team_ids) < 2:
        return []
    repeats = max(1, int(repeats or 1))

    base = _circle_pairings(team_ids)
    per_pass = len(base)

    rows = []
    for rep in range(1, repeats + 1):
        swap = rep % 2 == 0
        for day_index, pairs in enumerate(base):
            matchday = (rep - 1) * per_pass + day_index + 1
            for a, b in pairs:
                home, away = (b, a) if swap else (a, b)
                rows.append(RoundRobinRow(stage_index, group_index, matchday, home, away))

    logger.debug(f"Round robin for {len(team_ids)} teams x{repeats}: "
                 f"{len(rows)} rows over {per_pass * repeats} matchdays")
    return rows


def generate_skeleton_round_robin(slots_count: int, repeats: int = 1, stage_index: int = 0,
                                  group_index: Optional[int] = None) -> List[RoundRobinRow]:
    """
    Round-robin shape for a group whose teams are not known yet.

    Rows have the same matchday layout as a real schedule for `slots_count`
    entrants, with both team ids left as None.
    """
    if slots_count < 2:
        return []
    shaped = generate_round_robin(list(range(slots_count)), repeats, stage_index, group_index)
    for row in shaped:
        row.team_a_id = None
        row.team_b_id = None
    return shaped


def assign_groups(team_ids: List, groups_count: int) -> List[List]:
    """Distribute teams over groups in turn (team i goes to group i mod G)."""
    groups = [[] for _ in range(max(1, groups_count))]
    for i, team_id in enumerate(team_ids):
        groups[i % len(groups)].append(team_id)
    return groups


def generate_group_stage(groups: List[List], repeats: int = 1, stage_index: int = 0) -> List[RoundRobinRow]:
    """One round robin per group; groups with fewer than two teams are skipped."""
    rows = []
    for group_index, team_ids in enumerate(groups):
        if len(team_ids) < 2:
            logger.debug(f"Skipping group {group_index} with {len(team_ids)} team(s)")
            continue
        rows.extend(generate_round_robin(team_ids, repeats, stage_index, group_index))
    return rows


def idle_matchdays(rows: List[RoundRobinRow], team_ids: List) -> Dict:
    """Matchdays on which each team has no game (its bye weeks)."""
    if not rows:
        return {team_id: [] for team_id in team_ids}
    matchdays = sorted({row.matchday for row in rows})
    playing = {}
    for row in rows:
        playing.setdefault(row.matchday, set()).update(row.teams)
    return {
        team_id: [md for md in matchdays if team_id not in playing[md]]
        for team_id in team_ids
    }
