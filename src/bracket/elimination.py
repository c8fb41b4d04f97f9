"""
Single elimination bracket generation.

Matches are addressed by (round, bracket_pos). Every match after the first
round names its feeders with stable source pointers instead of list indices,
so reordering or partially deleting the match list never breaks the wiring.
"""
import logging
import math
from typing import List, Dict, Optional

from .models import Match, SourcePointer, OUTCOME_WIN
from .labels import round_label
from .seeding import calculate_bracket_size, generate_bracket_order, order_entrants

logger = logging.getLogger(__name__)

SEMIS_CROSS = 'A1-B2'
SEMIS_STRAIGHT = 'A1-B1'


def _next_round_matches(round_num: int, num_matches: int, stage_index: int, next_id: int) -> List[Match]:
    """Create placeholder matches fed by the winners of the previous round."""
    matches = []
    for i in range(num_matches):
        pos = i + 1
        matches.append(Match(
            id=next_id + i,
            stage_index=stage_index,
            round=round_num,
            bracket_pos=pos,
            source_a=SourcePointer(round_num - 1, 2 * pos - 1, OUTCOME_WIN),
            source_b=SourcePointer(round_num - 1, 2 * pos, OUTCOME_WIN),
        ))
    return matches


def build_knockout(entrants: List, stage_index: int = 0, start_id: int = 1) -> List[Match]:
    """
    Build a complete single elimination bracket for any number of entrants.

    The field is padded to the next power of two. Entrants are placed by rank
    using the standard bracket order, so the empty slots (byes) always fall
    opposite the best seeds. A first-round match with a single entrant is a
    bye: it is still emitted so later rounds can point at it.

    Returns an empty list for fewer than two entrants.
    """
    ranked = order_entrants(entrants)
    if len(ranked) < 2:
        return []

    bracket_size = calculate_bracket_size(len(ranked))
    total_rounds = int(math.log2(bracket_size))

    # Create seed-to-team mapping
    seed_to_team = {e['rank']: e['id'] for e in ranked}
    bracket_order = generate_bracket_order(bracket_size)

    matches = []
    next_id = start_id
    for i in range(0, len(bracket_order), 2):
        matches.append(Match(
            id=next_id,
            stage_index=stage_index,
            round=1,
            bracket_pos=i // 2 + 1,
            team_a_id=seed_to_team.get(bracket_order[i]),
            team_b_id=seed_to_team.get(bracket_order[i + 1]),
        ))
        next_id += 1

    num_matches = bracket_size // 2
    for round_num in range(2, total_rounds + 1):
        num_matches //= 2
        matches.extend(_next_round_matches(round_num, num_matches, stage_index, next_id))
        next_id += num_matches

    logger.debug(f"Built knockout for {len(ranked)} entrants: size {bracket_size}, "
                 f"{total_rounds} rounds, {len(matches)} matches")
    return matches


def build_semis_from_groups(group_a: List, group_b: List, stage_index: int = 0,
                            semis_cross: str = SEMIS_CROSS, start_id: int = 1) -> List[Match]:
    """
    Semifinals and final for two groups advancing two teams each.

    group_a / group_b are the ordered qualifier ids ([winner, runner-up]).
    "A1-B2" pairs A1 vs B2 and B1 vs A2; "A1-B1" pairs A1 vs B1 and A2 vs B2.
    """
    a1, a2 = (list(group_a) + [None, None])[:2]
    b1, b2 = (list(group_b) + [None, None])[:2]

    if semis_cross == SEMIS_CROSS:
        semi_pairs = [(a1, b2), (b1, a2)]
    elif semis_cross == SEMIS_STRAIGHT:
        semi_pairs = [(a1, b1), (a2, b2)]
    else:
        raise ValueError(f"unknown semis_cross {semis_cross!r}")

    matches = []
    for i, (team_a, team_b) in enumerate(semi_pairs):
        matches.append(Match(
            id=start_id + i,
            stage_index=stage_index,
            round=1,
            bracket_pos=i + 1,
            team_a_id=team_a,
            team_b_id=team_b,
        ))
    matches.extend(_next_round_matches(2, 1, stage_index, start_id + 2))
    return matches


def knockout_from_groups(groups: List[List], advancers_per_group: int = 2, stage_index: int = 0,
                         semis_cross: str = SEMIS_CROSS, start_id: int = 1) -> List[Match]:
    """
    Build a knockout stage from group qualifiers.

    Each group is a list of entrants ({'id', 'seed'} or Team-like); the top
    `advancers_per_group` by seed qualify. Two groups of two use crossed
    semifinals, anything else goes through the seeded generic bracket.
    """
    advancers_per_group = max(1, advancers_per_group)
    qualifiers = [order_entrants(group)[:advancers_per_group] for group in groups]

    if (len(groups) == 2 and advancers_per_group == 2
            and len(qualifiers[0]) >= 2 and len(qualifiers[1]) >= 2):
        return build_semis_from_groups(
            [q['id'] for q in qualifiers[0]],
            [q['id'] for q in qualifiers[1]],
            stage_index=stage_index,
            semis_cross=semis_cross,
            start_id=start_id,
        )

    flat = [q for group in qualifiers for q in group]
    return build_knockout(flat, stage_index=stage_index, start_id=start_id)


def bye_winner(match: Match):
    """The entrant that advances from a bye match without playing, else None."""
    if not match.is_bye:
        return None
    return match.team_a_id if match.team_a_id is not None else match.team_b_id


def get_knockout_summary(matches: List[Match], labels: Optional[Dict] = None) -> Dict:
    """
    Summarise a generated bracket for display.

    Returns dict with:
    - 'bracket_size': number of first-round slots
    - 'total_rounds': number of rounds
    - 'total_matches': number of emitted matches (byes included)
    - 'byes': number of first-round bye matches
    - 'matches_per_round': column label -> playable matches (byes excluded),
      labelled the same way the layout labels its columns
    """
    bracket = [m for m in matches if m.is_bracket and not m.is_stub]
    if not bracket:
        return {
            'bracket_size': 0,
            'total_rounds': 0,
            'total_matches': 0,
            'byes': 0,
            'matches_per_round': {},
        }

    first_round = min(m.round for m in bracket)
    last_round = max(m.round for m in bracket)
    first = [m for m in bracket if m.round == first_round]
    bracket_size = 2 * max(m.bracket_pos for m in first)

    columns = sorted({m.round for m in bracket})
    matches_per_round = {}
    for index, round_num in enumerate(columns):
        column = [m for m in bracket if m.round == round_num]
        name = round_label(index, len(columns), len(column), labels)
        matches_per_round[name] = sum(1 for m in column if not m.is_bye)

    return {
        'bracket_size': bracket_size,
        'total_rounds': last_round - first_round + 1,
        'total_matches': len(bracket),
        'byes': sum(1 for m in first if m.is_bye),
        'matches_per_round': matches_per_round,
    }
