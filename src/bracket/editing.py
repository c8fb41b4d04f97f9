"""
Editing-layer surface for knockout brackets.

The core never applies edits itself. It builds intents that the editing
layer carries out: assign a team to a slot, swap a pair, bulk-assign or
clear the first round. It also supplies the pickers' option lists, with
advisory validation (options are disabled with a reason, nothing raises).
"""
import logging
from typing import List, Dict, Optional, Callable

from .labels import get_labels
from .models import Match, SLOTS, SLOT_A, SLOT_B

logger = logging.getLogger(__name__)

ASSIGN_TEAM_TO_SLOT = 'assign_team_to_slot'
SWAP_PAIR = 'swap_pair'
BULK_ASSIGN_FIRST_ROUND = 'bulk_assign_first_round'
CLEAR_FIRST_ROUND = 'clear_first_round'


def assign_team_to_slot(match_id, slot: str, team_id) -> Dict:
    if slot not in SLOTS:
        raise ValueError(f"slot must be 'A' or 'B', got {slot!r}")
    if match_id is None:
        raise ValueError("match_id is required")
    return {'type': ASSIGN_TEAM_TO_SLOT, 'match_id': match_id, 'slot': slot, 'team_id': team_id}


def swap_pair(match_id) -> Dict:
    if match_id is None:
        raise ValueError("match_id is required")
    return {'type': SWAP_PAIR, 'match_id': match_id}


def bulk_assign_first_round(rows: List[Dict]) -> Dict:
    cleaned = []
    for row in rows:
        if row.get('match_id') is None:
            raise ValueError("every row needs a match_id")
        cleaned.append({
            'match_id': row['match_id'],
            'team_a_id': row.get('team_a_id'),
            'team_b_id': row.get('team_b_id'),
        })
    return {'type': BULK_ASSIGN_FIRST_ROUND, 'rows': cleaned}


def clear_first_round() -> Dict:
    return {'type': CLEAR_FIRST_ROUND}


def build_intent(data: Dict) -> Dict:
    """Validate a raw intent payload and return the normalised intent."""
    kind = data.get('type')
    if kind == ASSIGN_TEAM_TO_SLOT:
        return assign_team_to_slot(data.get('match_id'), data.get('slot'), data.get('team_id'))
    if kind == SWAP_PAIR:
        return swap_pair(data.get('match_id'))
    if kind == BULK_ASSIGN_FIRST_ROUND:
        return bulk_assign_first_round(data.get('rows') or [])
    if kind == CLEAR_FIRST_ROUND:
        return clear_first_round()
    raise ValueError(f"unknown intent type {kind!r}")


def first_round_matches(matches: List[Match]) -> List[Match]:
    """Real matches of the lowest round present, by bracket_pos."""
    bracket = [m for m in matches if m.is_bracket and not m.is_stub]
    if not bracket:
        return []
    first = min(m.round for m in bracket)
    return sorted((m for m in bracket if m.round == first), key=lambda m: m.bracket_pos)


def _seed_of(teams_map: Dict, team_id):
    team = teams_map.get(team_id)
    if team is None:
        return None
    return team.get('seed') if isinstance(team, dict) else team.seed


def _name_of(teams_map: Dict, team_id):
    team = teams_map.get(team_id)
    if team is None:
        return None
    return team.get('name') if isinstance(team, dict) else team.name


def eligible_team_ids(teams_map: Dict, eligible: Optional[List] = None) -> List:
    """Eligible ids (defaulting to every known team) that carry a seed."""
    ids = list(eligible) if eligible else list(teams_map.keys())
    return [team_id for team_id in ids if _seed_of(teams_map, team_id) is not None]


def first_round_options(first_round: List[Match], teams_map: Dict, current_team_id=None,
                        eligible: Optional[List] = None, labels: Optional[Dict] = None) -> List[Dict]:
    """
    Picker options for one first-round slot currently holding `current_team_id`.

    An "empty" option comes first, then eligible teams by seed. A team placed
    in another first-round slot, or whose seed is already used by a placed
    team, is disabled with a reason.
    """
    labels = labels or get_labels()
    assigned = set()
    used_seeds = set()
    for m in first_round:
        for team_id in (m.team_a_id, m.team_b_id):
            if team_id is None:
                continue
            assigned.add(team_id)
            seed = _seed_of(teams_map, team_id)
            if seed is not None:
                used_seeds.add(seed)

    current_seed = _seed_of(teams_map, current_team_id) if current_team_id is not None else None

    options = []
    for team_id in eligible_team_ids(teams_map, eligible):
        seed = _seed_of(teams_map, team_id)
        name = _name_of(teams_map, team_id) or str(team_id)
        taken = team_id in assigned and team_id != current_team_id
        duplicate_seed = seed in used_seeds and seed != current_seed
        reason = None
        if taken:
            reason = labels['already_placed']
        elif duplicate_seed:
            reason = labels['seed_taken']
        options.append({
            'id': team_id,
            'label': f"#{seed} — {name}",
            'disabled': taken or duplicate_seed,
            'reason': reason,
            'seed': seed,
        })
    options.sort(key=lambda o: o['seed'])
    for option in options:
        del option['seed']

    return [{'id': None, 'label': labels['empty'], 'disabled': False, 'reason': None}] + options


def auto_seed_and_pair(first_round: List[Match], teams_map: Dict, eligible: Optional[List] = None,
                       reseed: Optional[Callable[[], List]] = None,
                       on_bulk_assign: Optional[Callable[[List[Dict]], None]] = None,
                       on_assign_slot: Optional[Callable] = None) -> List[Dict]:
    """
    Pair the best S seeds into the first round, rank i against rank S - 1 - i.

    The ranking comes from `reseed()` when given (an ordered list of team
    ids); if it is missing or fails, the current seeds are used. The rows are
    signalled through on_bulk_assign, or slot by slot through on_assign_slot,
    and returned.
    """
    ordered = None
    if reseed is not None:
        try:
            result = reseed()
            if isinstance(result, (list, tuple)):
                ordered = list(result)
        except Exception as e:
            logger.warning(f"Re-seeding callback failed, using current seeds: {e}")

    if ordered is None:
        ids = eligible_team_ids(teams_map, eligible)
        ordered = sorted(ids, key=lambda team_id: _seed_of(teams_map, team_id))

    size = len(first_round) * 2
    top = ordered[:size]

    def pick(index):
        return top[index] if 0 <= index < len(top) else None

    rows = [
        {'match_id': m.id, 'team_a_id': pick(i), 'team_b_id': pick(size - 1 - i)}
        for i, m in enumerate(first_round)
    ]

    if on_bulk_assign is not None:
        on_bulk_assign(rows)
    elif on_assign_slot is not None:
        for row in rows:
            on_assign_slot(row['match_id'], SLOT_A, row['team_a_id'])
            on_assign_slot(row['match_id'], SLOT_B, row['team_b_id'])
    return rows


def slot_locks(match: Match) -> Dict:
    """A slot fed by any pointer is filled by the bracket, not by hand."""
    return {slot: match.has_pointer(slot) for slot in SLOTS}


def is_editable_card(match: Match, column_index: int, editable: bool = True) -> bool:
    """Editable when editing is on and the card is first-column or pointer-free."""
    if not editable or match.is_stub:
        return False
    if column_index == 0:
        return True
    return not any(slot_locks(match).values())
