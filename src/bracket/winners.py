"""
Display-only winner propagation.

implied_teams() derives, for every empty slot, the team that a finished
parent match sends there. The result is a separate overlay keyed by match
id; stored match data is never modified and always wins over the overlay.
"""
from typing import List, Dict, Optional

from .dependencies import DependencyResolver
from .elimination import bye_winner
from .models import Match, SLOTS, OUTCOME_LOSE

SLOT_FIELDS = {'A': 'team_a_id', 'B': 'team_b_id'}


def _scores(match: Match):
    a, b = match.score_a, match.score_b
    if isinstance(a, bool) or isinstance(b, bool):
        return None
    if not isinstance(a, (int, float)) or not isinstance(b, (int, float)):
        return None
    return a, b


def compute_winner(match: Match):
    """Winner of a finished match by score; draws and missing scores give None."""
    if not match.is_finished:
        return None
    scores = _scores(match)
    if scores is None:
        return None
    a, b = scores
    if a > b:
        return match.team_a_id
    if b > a:
        return match.team_b_id
    return None


def compute_loser(match: Match):
    """Loser of a finished, decided match, else None."""
    if not match.is_finished:
        return None
    scores = _scores(match)
    if scores is None:
        return None
    a, b = scores
    if a > b:
        return match.team_b_id
    if b > a:
        return match.team_a_id
    return None


def _advancing(parent: Match, outcome: str, include_byes: bool):
    if outcome == OUTCOME_LOSE:
        return compute_loser(parent)
    winner = compute_winner(parent)
    if winner is None and include_byes:
        winner = bye_winner(parent)
    return winner


def implied_teams(matches: List[Match], resolver: Optional[DependencyResolver] = None,
                  include_byes: bool = False) -> Dict:
    """
    Overlay of implied teams: {match_id: {'team_a_id': x, 'team_b_id': y}}.

    Only slots that are empty in the stored data and fed by a decided parent
    appear. With include_byes, a first-round bye counts as decided for its
    lone entrant. Stubs are never parents.
    """
    resolver = resolver or DependencyResolver(matches)
    overlay = {}
    for child in resolver.matches:
        if child.is_stub:
            continue
        links = resolver.resolve(child)
        implied = {}
        for slot in SLOTS:
            field = SLOT_FIELDS[slot]
            if getattr(child, field) is not None:
                continue
            link = links[slot]
            if link is None or link.parent.is_stub:
                continue
            team_id = _advancing(link.parent, link.outcome, include_byes)
            if team_id is not None:
                implied[field] = team_id
        if implied:
            overlay[child.id] = implied
    return overlay


def effective_teams(match: Match, overlay: Dict) -> Dict:
    """Merge stored teams with the overlay at the presentation boundary."""
    implied = overlay.get(match.id, {})
    return {
        'team_a_id': match.team_a_id if match.team_a_id is not None else implied.get('team_a_id'),
        'team_b_id': match.team_b_id if match.team_b_id is not None else implied.get('team_b_id'),
    }


def had_bye(rounds, round_index: int, team_id) -> bool:
    """
    True when a team shown in column `round_index` played no real match in
    the previous column (bye matches do not count), i.e. it got a bye.
    """
    if team_id is None or round_index <= 0 or round_index >= len(rounds):
        return False
    _, previous = rounds[round_index - 1]
    seen = set()
    for m in previous:
        if m.is_bye:
            continue
        seen.add(m.team_a_id)
        seen.add(m.team_b_id)
    return team_id not in seen
