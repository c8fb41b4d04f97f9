"""
Display labels for bracket views.
"""
from typing import Dict, Optional

from .seeding import is_power_of_two

EN_LABELS = {
    'final': 'Final',
    'semifinals': 'Semi-finals',
    'quarterfinals': 'Quarter-finals',
    'round_of': 'Round of {n}',
    'round_n': 'Round {r}',
    'bye': 'BYE',
    'tbd': 'TBD',
    'empty': '— Empty —',
    'seed_taken': 'Seed already used',
    'already_placed': 'already in bracket',
    'pick_team': 'Pick team…',
    'auto_seed': 'Auto-seed',
    'clear_round': 'Clear first round',
    'swap': 'Swap',
}

EL_LABELS = {
    'final': 'Τελικός',
    'semifinals': 'Ημιτελικά',
    'quarterfinals': 'Προημιτελικά',
    'round_of': 'Φάση των {n}',
    'round_n': 'Γύρος {r}',
    'bye': 'Πρόκριση',
    'tbd': 'Σε αναμονή',
    'empty': '— Κενό —',
    'seed_taken': 'Ο αριθμός seed χρησιμοποιείται ήδη',
    'already_placed': 'already in bracket',
    'pick_team': 'Επιλογή ομάδας…',
    'auto_seed': 'Αυτόματη κατάταξη',
    'clear_round': 'Καθαρισμός πρώτου γύρου',
    'swap': 'Αλλαγή θέσεων',
}


def get_labels(lang: str = 'en', overrides: Optional[Dict] = None) -> Dict:
    base = EL_LABELS if lang == 'el' else EN_LABELS
    labels = dict(base)
    if overrides:
        labels.update(overrides)
    return labels


def round_label(index: int, total: int, matches_in_round: int, labels: Optional[Dict] = None) -> str:
    """
    Label for the column at `index` (0-based) out of `total` columns.

    The last column with a single match is the final; earlier columns are
    named by how many teams they hold, falling back to "Round N".
    """
    labels = labels or EN_LABELS
    teams_in_round = matches_in_round * 2 if matches_in_round > 1 else 2
    if index == total - 1 and matches_in_round <= 1:
        return labels['final']
    if teams_in_round == 4:
        return labels['semifinals']
    if teams_in_round == 8:
        return labels['quarterfinals']
    if is_power_of_two(teams_in_round) and teams_in_round > 8:
        return labels['round_of'].format(n=teams_in_round)
    return labels['round_n'].format(r=index + 1)
