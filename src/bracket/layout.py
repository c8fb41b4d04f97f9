"""
Vertical layout for knockout brackets.

compute_layout() is a pure function of the match list, the measured card
heights and the layout settings. It returns a target center and an offset
(target - base center) for every match and stub, such that:

- a match sits on the mean of its resolved, non-stub parents' centers
- matches in the same round never overlap (minimum gap between cards)
- stubs sit exactly on their child and never take part in spacing

The presentation layer renders at provisional positions, measures, calls
compute_layout(), applies the offsets and then redraws connectors. Nothing
is kept between calls.
"""
import logging
from typing import List, Dict, Optional, Tuple

from .dependencies import DependencyResolver
from .labels import get_labels, round_label
from .models import Match
from .stubs import inject_stubs

logger = logging.getLogger(__name__)


def get_default_layout_settings() -> Dict:
    """Return default layout settings."""
    return {
        'min_card_height': 76,
        'min_row_gap': 12,
        'col_width': None,
        'gap_x': None,
        'max_auto_fit': 8,
        'curve_tension': 0.35,
        'stub_height': 0,
        'lang': 'en',
    }


def merge_layout_settings(settings: Optional[Dict] = None) -> Dict:
    """Overlay user settings on the defaults; None values keep the default."""
    merged = get_default_layout_settings()
    for key, value in (settings or {}).items():
        if value is not None or key not in merged:
            merged[key] = value
    return merged


def group_rounds(matches: List[Match]) -> List[Tuple[int, List[Match]]]:
    """
    Partition bracket matches into rounds sorted by bracket_pos.

    Matches without round/bracket_pos (e.g. round-robin rows) or without an
    id are not part of the bracket and are left out.
    """
    by_round = {}
    for m in matches:
        if not m.is_bracket or m.id is None:
            continue
        by_round.setdefault(m.round, []).append(m)
    return [
        (round_num, sorted(by_round[round_num], key=lambda m: m.bracket_pos))
        for round_num in sorted(by_round)
    ]


def column_geometry(column_count: int, settings: Dict) -> Tuple[float, float]:
    """Column width and horizontal gap; wide brackets get narrower columns."""
    crowded = column_count > settings.get('max_auto_fit', 8)
    col_width = settings.get('col_width')
    gap_x = settings.get('gap_x')
    if col_width is None:
        col_width = 220 if crowded else 280
    if gap_x is None:
        gap_x = 12 if crowded else 16
    return col_width, gap_x


def _measured_height(sizes: Dict, match_id) -> Optional[float]:
    value = sizes.get(match_id)
    if isinstance(value, dict):
        value = value.get('height')
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def card_heights(rounds: List[Tuple[int, List[Match]]], sizes: Optional[Dict], settings: Dict) -> Dict:
    """Height per match: measured but never below min_card_height; stubs are flat."""
    sizes = sizes or {}
    min_height = settings['min_card_height']
    heights = {}
    for _, column in rounds:
        for m in column:
            if m.is_stub:
                heights[m.id] = settings['stub_height']
                continue
            measured = _measured_height(sizes, m.id)
            heights[m.id] = max(min_height, measured) if measured is not None else min_height
    return heights


def stack_centers(rounds: List[Tuple[int, List[Match]]], heights: Dict, row_gap: float) -> Dict:
    """
    Provisional centers: each column stacked top-down with row_gap between cards.

    Stubs take no room in the stack. Used wherever the presentation layer did
    not supply a measured base center.
    """
    centers = {}
    for _, column in rounds:
        y = 0.0
        for m in column:
            if m.is_stub:
                centers[m.id] = y
                continue
            h = heights[m.id]
            centers[m.id] = y + h / 2
            y += h + row_gap
    return centers


def _enforce_spacing(column: List[Match], targets: Dict, heights: Dict, gap: float):
    """Push siblings apart: left-to-right downward pass, then right-to-left upward pass."""
    for i in range(1, len(column)):
        prev, cur = column[i - 1], column[i]
        required = (heights[prev.id] + heights[cur.id]) / 2 + gap
        if targets[cur.id] < targets[prev.id] + required:
            targets[cur.id] = targets[prev.id] + required
    for i in range(len(column) - 2, -1, -1):
        cur, nxt = column[i], column[i + 1]
        required = (heights[nxt.id] + heights[cur.id]) / 2 + gap
        if targets[cur.id] > targets[nxt.id] - required:
            targets[cur.id] = targets[nxt.id] - required


class LayoutResult:
    """Geometry for one bracket: per-match targets, offsets and column placement."""

    def __init__(self, rounds, stub_ids, heights, base_centers, targets, resolver,
                 col_width, gap_x, labels):
        self.rounds = rounds
        self.stub_ids = stub_ids
        self.heights = heights
        self.base_centers = base_centers
        self.targets = targets
        self.resolver = resolver
        self.col_width = col_width
        self.gap_x = gap_x
        self.labels = labels
        self.offsets = {mid: targets[mid] - base_centers[mid] for mid in targets}
        self.columns = {}
        for index, (_, column) in enumerate(rounds):
            for m in column:
                self.columns[m.id] = index

    def is_stub(self, match_id) -> bool:
        return match_id in self.stub_ids

    def column_x(self, index: int) -> float:
        return index * (self.col_width + self.gap_x)

    def trailing_anchor(self, match_id) -> Optional[Tuple[float, float]]:
        """Right edge, vertical center of a card after offsets are applied."""
        if match_id not in self.columns:
            return None
        return (self.column_x(self.columns[match_id]) + self.col_width, self.targets[match_id])

    def leading_anchor(self, match_id) -> Optional[Tuple[float, float]]:
        """Left edge, vertical center of a card after offsets are applied."""
        if match_id not in self.columns:
            return None
        return (self.column_x(self.columns[match_id]), self.targets[match_id])

    def edges(self):
        return self.resolver.edges()

    def round_labels(self) -> List[str]:
        total = len(self.rounds)
        return [round_label(index, total, len(column), self.labels)
                for index, (_, column) in enumerate(self.rounds)]

    def to_dict(self) -> Dict:
        return {
            'rounds': [
                {'round': round_num, 'match_ids': [m.id for m in column]}
                for round_num, column in self.rounds
            ],
            'round_labels': self.round_labels(),
            'stub_ids': sorted(self.stub_ids),
            'targets': self.targets,
            'offsets': self.offsets,
            'heights': self.heights,
            'col_width': self.col_width,
            'gap_x': self.gap_x,
        }


def compute_layout(matches: List[Match], sizes: Optional[Dict] = None,
                   base_centers: Optional[Dict] = None, settings: Optional[Dict] = None,
                   with_stubs: bool = True) -> LayoutResult:
    """
    Lay out one bracket.

    Args:
        matches: the bracket's matches (anything without coordinates is ignored)
        sizes: match id -> measured height (number or {'height': h})
        base_centers: match id -> center the presentation layer gave the card
            before correction; missing entries are stacked provisionally
        settings: layout settings (see get_default_layout_settings)
        with_stubs: fill missing topology parents with placeholder stubs
    """
    settings = merge_layout_settings(settings)
    gap = max(0, settings['min_row_gap'])

    rounds = group_rounds(matches)
    stub_ids = set()
    if with_stubs:
        rounds, stub_ids = inject_stubs(rounds)
    heights = card_heights(rounds, sizes, settings)

    stacked = stack_centers(rounds, heights, gap)
    supplied = base_centers or {}
    bases = {}
    for mid, y in stacked.items():
        given = supplied.get(mid)
        bases[mid] = float(given) if isinstance(given, (int, float)) and not isinstance(given, bool) else y

    resolver = DependencyResolver([m for _, column in rounds for m in column])
    targets = dict(bases)

    for index, (_, column) in enumerate(rounds):
        real = [m for m in column if not m.is_stub]
        if index > 0:
            for m in real:
                ys = [targets[p.id] for p in resolver.resolve_parents(m)
                      if not p.is_stub and p.id in targets]
                if ys:
                    targets[m.id] = sum(ys) / len(ys)
        _enforce_spacing(real, targets, heights, gap)

    for _, column in rounds:
        for m in column:
            if m.is_stub:
                continue
            for parent in resolver.expected_parents(m).values():
                if parent is not None and parent.is_stub:
                    targets[parent.id] = targets[m.id]

    col_width, gap_x = column_geometry(len(rounds), settings)
    logger.debug(f"Layout: {len(rounds)} column(s), {len(targets) - len(stub_ids)} card(s), "
                 f"{len(stub_ids)} stub(s)")
    return LayoutResult(rounds, stub_ids, heights, bases, targets, resolver,
                        col_width, gap_x, get_labels(settings.get('lang', 'en')))
