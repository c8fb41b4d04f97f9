"""
Data models for knockout brackets and round-robin schedules.
"""
from typing import Dict, Optional

STATUS_SCHEDULED = 'scheduled'
STATUS_FINISHED = 'finished'

OUTCOME_WIN = 'W'
OUTCOME_LOSE = 'L'

SLOT_A = 'A'
SLOT_B = 'B'
SLOTS = (SLOT_A, SLOT_B)


def _as_int(value) -> Optional[int]:
    """Coerce a coordinate to int, treating missing/invalid values as None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class Team:
    def __init__(self, id, name, seed=None, logo=None):
        self.id = id
        self.name = name
        self.seed = seed
        self.logo = logo

    def to_dict(self) -> Dict:
        return {'id': self.id, 'name': self.name, 'seed': self.seed, 'logo': self.logo}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Team':
        return cls(
            id=data.get('id'),
            name=data.get('name', str(data.get('id'))),
            seed=_as_int(data.get('seed')),
            logo=data.get('logo'),
        )

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, seed={self.seed})"


class SourcePointer:
    """Stable reference to the match whose winner (or loser) feeds a slot."""

    def __init__(self, round, bracket_pos, outcome=OUTCOME_WIN):
        self.round = round
        self.bracket_pos = bracket_pos
        self.outcome = outcome

    @property
    def coordinate(self):
        return (self.round, self.bracket_pos)

    def to_dict(self) -> Dict:
        return {'round': self.round, 'bracket_pos': self.bracket_pos, 'outcome': self.outcome}

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> Optional['SourcePointer']:
        if not data:
            return None
        round_ = _as_int(data.get('round'))
        pos = _as_int(data.get('bracket_pos'))
        if round_ is None or pos is None:
            return None
        outcome = OUTCOME_LOSE if data.get('outcome') == OUTCOME_LOSE else OUTCOME_WIN
        return cls(round_, pos, outcome)

    def __eq__(self, other):
        if not isinstance(other, SourcePointer):
            return NotImplemented
        return (self.round, self.bracket_pos, self.outcome) == (other.round, other.bracket_pos, other.outcome)

    def __hash__(self):
        return hash((self.round, self.bracket_pos, self.outcome))

    def __repr__(self):
        return f"SourcePointer(round={self.round}, bracket_pos={self.bracket_pos}, outcome={self.outcome})"


class Match:
    """
    A bracket match addressed by (round, bracket_pos).

    Slot A ("home") and slot B ("away") each carry an optional team id, an
    optional stable source pointer and an optional explicit link to another
    match's id. Stubs are layout-only placeholders and never leave a layout pass.
    """

    def __init__(self, id=None, stage_index=0, round=None, bracket_pos=None,
                 team_a_id=None, team_b_id=None, status=STATUS_SCHEDULED,
                 score_a=None, score_b=None, source_a=None, source_b=None,
                 source_match_a_id=None, source_match_b_id=None, is_stub=False):
        self.id = id
        self.stage_index = stage_index
        self.round = round
        self.bracket_pos = bracket_pos
        self.team_a_id = team_a_id
        self.team_b_id = team_b_id
        self.status = status
        self.score_a = score_a
        self.score_b = score_b
        self.source_a = source_a
        self.source_b = source_b
        self.source_match_a_id = source_match_a_id
        self.source_match_b_id = source_match_b_id
        self.is_stub = is_stub

    @property
    def is_bracket(self) -> bool:
        """True when the match has usable knockout coordinates."""
        return _as_int(self.round) is not None and _as_int(self.bracket_pos) is not None

    @property
    def coordinate(self):
        return (self.round, self.bracket_pos)

    @property
    def is_bye(self) -> bool:
        """A first-round match with exactly one entrant."""
        if self.round != 1 or self.is_stub:
            return False
        return (self.team_a_id is None) != (self.team_b_id is None)

    @property
    def is_finished(self) -> bool:
        return self.status == STATUS_FINISHED

    def team(self, slot: str):
        return self.team_a_id if slot == SLOT_A else self.team_b_id

    def source(self, slot: str) -> Optional[SourcePointer]:
        return self.source_a if slot == SLOT_A else self.source_b

    def explicit_source(self, slot: str):
        return self.source_match_a_id if slot == SLOT_A else self.source_match_b_id

    def has_pointer(self, slot: str) -> bool:
        return self.explicit_source(slot) is not None or self.source(slot) is not None

    def copy(self) -> 'Match':
        return Match.from_dict(self.to_dict())

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'stage_index': self.stage_index,
            'round': self.round,
            'bracket_pos': self.bracket_pos,
            'team_a_id': self.team_a_id,
            'team_b_id': self.team_b_id,
            'status': self.status,
            'score_a': self.score_a,
            'score_b': self.score_b,
            'source_a': self.source_a.to_dict() if self.source_a else None,
            'source_b': self.source_b.to_dict() if self.source_b else None,
            'source_match_a_id': self.source_match_a_id,
            'source_match_b_id': self.source_match_b_id,
            'is_stub': self.is_stub,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(
            id=data.get('id'),
            stage_index=data.get('stage_index', 0),
            round=_as_int(data.get('round')),
            bracket_pos=_as_int(data.get('bracket_pos')),
            team_a_id=data.get('team_a_id'),
            team_b_id=data.get('team_b_id'),
            status=data.get('status') or STATUS_SCHEDULED,
            score_a=data.get('score_a'),
            score_b=data.get('score_b'),
            source_a=SourcePointer.from_dict(data.get('source_a')),
            source_b=SourcePointer.from_dict(data.get('source_b')),
            source_match_a_id=data.get('source_match_a_id'),
            source_match_b_id=data.get('source_match_b_id'),
            is_stub=bool(data.get('is_stub', False)),
        )

    def __repr__(self):
        return (f"Match(id={self.id}, round={self.round}, bracket_pos={self.bracket_pos}, "
                f"teams=({self.team_a_id}, {self.team_b_id}), status={self.status})")


class RoundRobinRow:
    def __init__(self, stage_index, group_index, matchday, team_a_id, team_b_id):
        self.stage_index = stage_index
        self.group_index = group_index
        self.matchday = matchday
        self.team_a_id = team_a_id
        self.team_b_id = team_b_id

    @property
    def teams(self):
        return (self.team_a_id, self.team_b_id)

    def to_dict(self) -> Dict:
        return {
            'stage_index': self.stage_index,
            'group_index': self.group_index,
            'matchday': self.matchday,
            'team_a_id': self.team_a_id,
            'team_b_id': self.team_b_id,
        }

    def __repr__(self):
        return (f"RoundRobinRow(matchday={self.matchday}, group={self.group_index}, "
                f"teams=({self.team_a_id}, {self.team_b_id}))")


class Edge:
    """Derived parent -> child link; slot is the child slot the parent feeds."""

    def __init__(self, from_id, to_id, slot=None):
        self.from_id = from_id
        self.to_id = to_id
        self.slot = slot

    @property
    def key(self) -> str:
        return f"{self.from_id}->{self.to_id}"

    def to_dict(self) -> Dict:
        return {'from_id': self.from_id, 'to_id': self.to_id, 'slot': self.slot}

    def __eq__(self, other):
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.from_id, self.to_id) == (other.from_id, other.to_id)

    def __hash__(self):
        return hash((self.from_id, self.to_id))

    def __repr__(self):
        return f"Edge({self.from_id} -> {self.to_id}, slot={self.slot})"
