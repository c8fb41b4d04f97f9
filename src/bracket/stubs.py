"""
Layout-only placeholder matches.

A later-round match expects its parents at (r - 1, 2p - 1) and (r - 1, 2p).
When the data has no match there, a stub is inserted so the layout has an
anchor to align against. Stubs live for one layout pass only.
"""
import logging
from typing import List, Tuple, Set

from .models import Match

logger = logging.getLogger(__name__)


class StubArena:
    """Allocates stub ids below every real id seen in the pass."""

    def __init__(self, matches: List[Match]):
        floor = 0
        for m in matches:
            if isinstance(m.id, int) and not isinstance(m.id, bool) and m.id < floor:
                floor = m.id
        self._next = floor - 1
        self.ids = set()

    def allocate(self, stage_index: int, round_num: int, bracket_pos: int) -> Match:
        stub = Match(
            id=self._next,
            stage_index=stage_index,
            round=round_num,
            bracket_pos=bracket_pos,
            is_stub=True,
        )
        self.ids.add(stub.id)
        self._next -= 1
        return stub


def inject_stubs(rounds: List[Tuple[int, List[Match]]]) -> Tuple[List[Tuple[int, List[Match]]], Set]:
    """
    Fill missing topology parents with stubs.

    `rounds` is [(round_number, matches sorted by bracket_pos)] in ascending
    round order. Rounds are walked first to last; every match in round r gets
    stubs at whichever of its two expected round r - 1 coordinates are absent.
    A missing round r - 1 column is created. Stubs do not receive parents of
    their own. Input lists are not modified.
    """
    if not rounds:
        return [], set()

    columns = {round_num: list(matches) for round_num, matches in rounds}
    arena = StubArena([m for _, matches in rounds for m in matches])
    occupied = {(m.round, m.bracket_pos) for _, matches in rounds for m in matches}

    first = min(min(columns), 1)
    last = max(columns)
    for round_num in range(first + 1, last + 1):
        current = columns.get(round_num, [])
        added = []
        for match in current:
            if match.is_stub:
                continue
            p = match.bracket_pos
            for pos in (2 * p - 1, 2 * p):
                if (round_num - 1, pos) in occupied:
                    continue
                stub = arena.allocate(match.stage_index, round_num - 1, pos)
                occupied.add((round_num - 1, pos))
                added.append(stub)
        if added:
            previous = columns.setdefault(round_num - 1, [])
            previous.extend(added)
            previous.sort(key=lambda m: m.bracket_pos)

    if arena.ids:
        logger.debug(f"Injected {len(arena.ids)} layout stub(s)")

    ordered = [(round_num, columns[round_num]) for round_num in sorted(columns) if columns[round_num]]
    return ordered, arena.ids
