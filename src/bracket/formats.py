"""
Multi-stage tournament draft generation (league, groups, knockout).
"""
import logging
import random
from typing import List, Dict, Optional

from .elimination import knockout_from_groups, build_knockout, SEMIS_CROSS, SEMIS_STRAIGHT
from .models import Team
from .round_robin import (
    assign_groups,
    generate_group_stage,
    generate_round_robin,
    generate_skeleton_round_robin,
)

logger = logging.getLogger(__name__)

STAGE_KINDS = ('league', 'groups', 'knockout')


def _int_or_none(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def stage_repeats(cfg: Dict) -> int:
    """rounds_per_opponent (at least 1) wins over double_round; default 1."""
    repeats = _int_or_none(cfg.get('rounds_per_opponent'))
    if repeats is not None:
        return max(1, repeats)
    return 2 if cfg.get('double_round') else 1


def intake_slots_per_group(cfg: Dict, groups_count: int) -> List[int]:
    """
    Group sizes for a groups stage fed by a knockout stage.

    Each group is sized by the number of distinct slot indexes mapped to it,
    so gaps in slot_idx do not inflate the group.
    """
    groups_count = max(1, groups_count)
    buckets = [set() for _ in range(groups_count)]
    for row in cfg.get('groups_intake') or []:
        gi = _int_or_none(row.get('group_idx')) or 0
        gi = max(0, min(groups_count - 1, gi))
        slot = max(0, _int_or_none(row.get('slot_idx')) or 0)
        buckets[gi].add(slot)
    return [len(bucket) for bucket in buckets]


class TournamentFormat:
    """
    Generates the draft match set for every stage of a tournament.

    teams: Team objects (id, name, seed)
    stages: [{'name', 'kind', 'ordering', 'config', 'groups'}]
    """

    def __init__(self, teams: List[Team], stages: List[Dict]):
        self.teams = teams
        self.stages = sorted(stages, key=lambda s: s.get('ordering') or 0)
        self._next_id = 1

    def _ordered_ids(self, cfg: Dict, ids: List) -> List:
        ids = list(ids)
        if cfg.get('shuffle'):
            random.Random(cfg.get('shuffle_seed')).shuffle(ids)
        return ids

    def _seeded(self, team_ids: List) -> List[Dict]:
        by_id = {t.id: t for t in self.teams}
        return [{'id': team_id, 'seed': by_id[team_id].seed} for team_id in team_ids if team_id in by_id]

    def _groups_for(self, stage_index: int) -> List[List]:
        """Team ids per group: explicit assignments, else dealt out in turn."""
        stage = self.stages[stage_index]
        cfg = stage.get('config') or {}
        groups_count = max(1, len(stage.get('groups') or cfg.get('groups') or []))
        assignments = cfg.get('assignments') or {}

        if assignments:
            groups = [[] for _ in range(groups_count)]
            for team in self.teams:
                gi = _int_or_none(assignments.get(team.id, assignments.get(str(team.id))))
                if gi is not None and 0 <= gi < groups_count:
                    groups[gi].append(team.id)
            return groups

        return assign_groups(self._ordered_ids(cfg, [t.id for t in self.teams]), groups_count)

    def league(self, stage_index: int, cfg: Dict) -> Dict:
        team_ids = self._ordered_ids(cfg, [t.id for t in self.teams])
        rows = generate_round_robin(team_ids, stage_repeats(cfg), stage_index, None)
        return {'rows': rows}

    def groups(self, stage_index: int, cfg: Dict) -> Dict:
        repeats = stage_repeats(cfg)
        stage = self.stages[stage_index]
        groups_count = len(stage.get('groups') or cfg.get('groups') or [])

        if _int_or_none(cfg.get('from_knockout_stage_idx')) is not None and cfg.get('groups_intake'):
            rows = []
            for gi, slots in enumerate(intake_slots_per_group(cfg, groups_count)):
                rows.extend(generate_skeleton_round_robin(slots, repeats, stage_index, gi))
            return {'rows': rows}

        groups = [self._ordered_ids(cfg, ids) for ids in self._groups_for(stage_index)]
        return {'rows': generate_group_stage(groups, repeats, stage_index), 'groups': groups}

    def knockout(self, stage_index: int, cfg: Dict) -> Dict:
        semis_cross = SEMIS_STRAIGHT if cfg.get('semis_cross') == SEMIS_STRAIGHT else SEMIS_CROSS
        from_stage = _int_or_none(cfg.get('from_stage_idx'))

        source = self.stages[from_stage] if from_stage is not None and 0 <= from_stage < len(self.stages) else None
        if source is not None and source.get('kind') == 'groups':
            advancers = max(1, _int_or_none(cfg.get('advancers_per_group')) or 2)
            groups = [self._seeded(ids) for ids in self._groups_for(from_stage)]
            matches = knockout_from_groups(groups, advancers, stage_index, semis_cross, self._next_id)
        else:
            entrants = self._seeded([t.id for t in self.teams])
            size = _int_or_none(cfg.get('standalone_bracket_size'))
            if size is not None:
                ranked = sorted(enumerate(entrants),
                                key=lambda e: (e[1]['seed'] is None, e[1]['seed'] or 0, e[0]))
                entrants = [e for _, e in ranked][:max(2, size)]
            matches = build_knockout(entrants, stage_index, self._next_id)

        self._next_id += len(matches)
        return {'matches': matches}

    def generate(self) -> List[Dict]:
        """Draft for every stage, in stage order."""
        drafts = []
        for stage_index, stage in enumerate(self.stages):
            kind = stage.get('kind')
            if kind not in STAGE_KINDS:
                raise ValueError(f"unknown stage kind {kind!r}")
            cfg = stage.get('config') or {}
            draft = getattr(self, kind)(stage_index, cfg)
            draft.update({'stage_index': stage_index, 'name': stage.get('name'), 'kind': kind})
            logger.debug(f"Stage {stage_index} ({kind}): "
                         f"{len(draft.get('matches', []))} matches, {len(draft.get('rows', []))} rows")
            drafts.append(draft)
        return drafts
