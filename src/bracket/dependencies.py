"""
Parent/child dependency resolution between bracket matches.

Each slot of a match is resolved in a fixed precedence order:

1. explicit link   - source_match_{a,b}_id naming an existing match
2. coordinate link - source pointer (round, bracket_pos) naming an existing match
3. topology        - (round - 1, 2 * pos - 1) for A, (round - 1, 2 * pos) for B

When only one slot resolves through 1/2, the other slot takes whichever
topology parent the first one has not claimed, left first (layout stubs are
never picked here). Pointers that name nothing fall through silently.
"""
import logging
from typing import List, Dict, Optional

from .models import Match, Edge, SLOT_A, SLOT_B, SLOTS, OUTCOME_WIN

logger = logging.getLogger(__name__)

VIA_EXPLICIT = 'explicit'
VIA_COORDINATE = 'coordinate'
VIA_TOPOLOGY = 'topology'


class ParentLink:
    """How one slot of a match is fed: the parent, the tier that found it, and the outcome."""

    def __init__(self, slot, parent, via, outcome=OUTCOME_WIN):
        self.slot = slot
        self.parent = parent
        self.via = via
        self.outcome = outcome

    def to_dict(self) -> Dict:
        return {
            'slot': self.slot,
            'parent_id': self.parent.id,
            'parent_round': self.parent.round,
            'parent_bracket_pos': self.parent.bracket_pos,
            'via': self.via,
            'outcome': self.outcome,
        }

    def __repr__(self):
        return f"ParentLink(slot={self.slot}, parent={self.parent.id}, via={self.via})"


class DependencyResolver:
    """Resolves feeding matches for one bracket (one stage's match set)."""

    def __init__(self, matches: List[Match]):
        self.matches = [m for m in matches if m.is_bracket]
        skipped = len(matches) - len(self.matches)
        if skipped:
            logger.debug(f"Ignoring {skipped} match(es) without round/bracket_pos")
        self.by_id = {m.id: m for m in self.matches if m.id is not None}
        self.by_coordinate = {}
        for m in self.matches:
            self.by_coordinate.setdefault((m.round, m.bracket_pos), m)
        self._cache = {}

    def lookup(self, round_num, bracket_pos) -> Optional[Match]:
        return self.by_coordinate.get((round_num, bracket_pos))

    def expected_parents(self, match: Match) -> Dict:
        """Topology parents by slot; a missing coordinate maps to None."""
        if not match.is_bracket or match.round <= 1:
            return {SLOT_A: None, SLOT_B: None}
        r, p = match.round, match.bracket_pos
        return {
            SLOT_A: self.lookup(r - 1, 2 * p - 1),
            SLOT_B: self.lookup(r - 1, 2 * p),
        }

    def _linked(self, match: Match, slot: str) -> Optional[ParentLink]:
        """Tiers 1 and 2 for a single slot."""
        pointer = match.source(slot)
        outcome = pointer.outcome if pointer else OUTCOME_WIN

        explicit_id = match.explicit_source(slot)
        if explicit_id is not None:
            parent = self.by_id.get(explicit_id)
            if parent is not None and parent is not match:
                return ParentLink(slot, parent, VIA_EXPLICIT, outcome)
            logger.debug(f"Match {match.id} slot {slot}: explicit link {explicit_id} not found")

        if pointer is not None:
            parent = self.lookup(pointer.round, pointer.bracket_pos)
            if parent is not None and parent is not match:
                return ParentLink(slot, parent, VIA_COORDINATE, outcome)
            logger.debug(f"Match {match.id} slot {slot}: pointer {pointer.coordinate} not found")

        return None

    def resolve(self, match: Match) -> Dict:
        """Resolve both slots. Returns {'A': ParentLink|None, 'B': ParentLink|None}."""
        key = id(match)
        if key in self._cache:
            return self._cache[key]

        links = {slot: self._linked(match, slot) for slot in SLOTS}
        a, b = links[SLOT_A], links[SLOT_B]
        if a is not None and b is not None and a.parent is b.parent:
            links[SLOT_B] = None

        expected = self.expected_parents(match)
        resolved = [link for link in links.values() if link is not None]

        if not resolved:
            for slot in SLOTS:
                parent = expected[slot]
                if parent is not None:
                    links[slot] = ParentLink(slot, parent, VIA_TOPOLOGY)
        elif len(resolved) == 1:
            claimed = resolved[0].parent
            open_slot = SLOT_B if links[SLOT_A] is not None else SLOT_A
            for candidate in (expected[SLOT_A], expected[SLOT_B]):
                if candidate is not None and candidate is not claimed and not candidate.is_stub:
                    links[open_slot] = ParentLink(open_slot, candidate, VIA_TOPOLOGY)
                    break

        self._cache[key] = links
        return links

    def resolve_parents(self, match: Match) -> List[Match]:
        """Resolved parents in slot order (A first), without gaps."""
        links = self.resolve(match)
        return [links[slot].parent for slot in SLOTS if links[slot] is not None]

    def feeds_slot(self, child: Match, parent: Match) -> Optional[str]:
        """Which slot of `child` the `parent` feeds, or None."""
        links = self.resolve(child)
        for slot in SLOTS:
            if links[slot] is not None and links[slot].parent is parent:
                return slot
        return None

    def edges(self) -> List[Edge]:
        """Every resolved parent -> child edge, deduplicated, in round order."""
        edges = []
        seen = set()
        for match in sorted(self.matches, key=lambda m: (m.round, m.bracket_pos)):
            links = self.resolve(match)
            for slot in SLOTS:
                link = links[slot]
                if link is None:
                    continue
                edge = Edge(link.parent.id, match.id, slot)
                if edge.key in seen:
                    continue
                seen.add(edge.key)
                edges.append(edge)
        return edges


def resolve_parents(matches: List[Match], match: Match) -> List[Match]:
    """Convenience query for the editing layer."""
    return DependencyResolver(matches).resolve_parents(match)
