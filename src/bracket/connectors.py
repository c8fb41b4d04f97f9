"""
Connector curves between parent and child cards.
"""
from typing import List, Dict, Optional, Tuple

from .models import Edge

DEFAULT_TENSION = 0.35


class CurveDescriptor:
    """Cubic curve from a parent's trailing edge to a child's leading edge."""

    def __init__(self, from_id, to_id, start, control1, control2, end):
        self.from_id = from_id
        self.to_id = to_id
        self.start = start
        self.control1 = control1
        self.control2 = control2
        self.end = end

    def to_svg(self) -> str:
        (x1, y1), (cx1, cy1), (cx2, cy2), (x2, y2) = self.start, self.control1, self.control2, self.end
        return f"M {x1:g} {y1:g} C {cx1:g} {cy1:g} {cx2:g} {cy2:g} {x2:g} {y2:g}"

    def to_dict(self) -> Dict:
        return {
            'from_id': self.from_id,
            'to_id': self.to_id,
            'start': list(self.start),
            'control1': list(self.control1),
            'control2': list(self.control2),
            'end': list(self.end),
            'd': self.to_svg(),
        }

    def __repr__(self):
        return f"CurveDescriptor({self.from_id} -> {self.to_id}: {self.to_svg()})"


def build_curve(start: Tuple[float, float], end: Tuple[float, float],
                tension: float = DEFAULT_TENSION) -> Tuple[Tuple, Tuple, Tuple, Tuple]:
    """
    S-curve control points: offset horizontally by `tension` of the span,
    each kept at its own endpoint's height.
    """
    (ax, ay), (bx, by) = start, end
    dx = bx - ax
    return (ax, ay), (ax + tension * dx, ay), (bx - tension * dx, by), (bx, by)


def build_connector_paths(edges: List[Edge], trailing: Dict, leading: Dict, stub_ids=(),
                          tension: float = DEFAULT_TENSION) -> List[CurveDescriptor]:
    """
    One curve per edge whose endpoints are both real and placed.

    trailing / leading map match id -> (x, y) anchor. Edges touching a stub,
    or an endpoint without an anchor, are skipped.
    """
    stub_ids = set(stub_ids)
    curves = []
    for edge in edges:
        if edge.from_id in stub_ids or edge.to_id in stub_ids:
            continue
        a = trailing.get(edge.from_id)
        b = leading.get(edge.to_id)
        if a is None or b is None:
            continue
        curves.append(CurveDescriptor(edge.from_id, edge.to_id, *build_curve(a, b, tension)))
    return curves


def connector_paths_for_layout(layout, tension: Optional[float] = None) -> List[CurveDescriptor]:
    """Curves for every resolved edge of a computed layout, using final positions."""
    if tension is None:
        tension = DEFAULT_TENSION
    trailing = {}
    leading = {}
    for match_id in layout.columns:
        trailing[match_id] = layout.trailing_anchor(match_id)
        leading[match_id] = layout.leading_anchor(match_id)
    return build_connector_paths(layout.edges(), trailing, leading, layout.stub_ids, tension)
