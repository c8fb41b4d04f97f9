"""
Unit tests for the editing-layer surface (intents, pickers, auto-seed, locks).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.editing import (
    assign_team_to_slot,
    swap_pair,
    bulk_assign_first_round,
    clear_first_round,
    build_intent,
    first_round_matches,
    eligible_team_ids,
    first_round_options,
    auto_seed_and_pair,
    slot_locks,
    is_editable_card,
)
from bracket.labels import get_labels
from bracket.models import Match, Team, SourcePointer


@pytest.fixture
def teams_map():
    return {
        10: Team(id=10, name='Sharks', seed=1),
        20: Team(id=20, name='Dolphins', seed=2),
        30: Team(id=30, name='Marlins', seed=3),
        40: Team(id=40, name='Tunas', seed=4),
        50: Team(id=50, name='Unseeded'),
    }


@pytest.fixture
def first_round():
    return [Match(id=1, round=1, bracket_pos=1, team_a_id=10),
            Match(id=2, round=1, bracket_pos=2)]


class TestIntents:
    """Tests for mutation intents."""

    def test_assign(self):
        assert assign_team_to_slot(1, 'A', 10) == {
            'type': 'assign_team_to_slot', 'match_id': 1, 'slot': 'A', 'team_id': 10}

    def test_assign_can_clear(self):
        assert assign_team_to_slot(1, 'B', None)['team_id'] is None

    def test_assign_bad_slot(self):
        with pytest.raises(ValueError):
            assign_team_to_slot(1, 'C', 10)

    def test_swap_and_clear(self):
        assert swap_pair(4) == {'type': 'swap_pair', 'match_id': 4}
        assert clear_first_round() == {'type': 'clear_first_round'}

    def test_bulk_rows_normalised(self):
        intent = bulk_assign_first_round([{'match_id': 1, 'team_a_id': 10, 'extra': True}])
        assert intent == {'type': 'bulk_assign_first_round',
                          'rows': [{'match_id': 1, 'team_a_id': 10, 'team_b_id': None}]}

    def test_bulk_requires_match_id(self):
        with pytest.raises(ValueError):
            bulk_assign_first_round([{'team_a_id': 10}])

    def test_build_intent(self):
        assert build_intent({'type': 'swap_pair', 'match_id': 3}) == swap_pair(3)
        assert build_intent({'type': 'assign_team_to_slot', 'match_id': 3, 'slot': 'B', 'team_id': 5}) \
            == assign_team_to_slot(3, 'B', 5)

    def test_build_intent_unknown(self):
        with pytest.raises(ValueError):
            build_intent({'type': 'delete_everything'})


class TestFirstRound:
    """Tests for first-round helpers."""

    def test_first_round_matches(self, five_team_bracket):
        assert [m.id for m in first_round_matches(five_team_bracket)] == [1, 2, 3, 4]

    def test_first_round_skips_stubs(self):
        matches = [Match(id=-1, round=1, bracket_pos=1, is_stub=True), Match(id=3, round=1, bracket_pos=2)]
        assert [m.id for m in first_round_matches(matches)] == [3]

    def test_eligible_needs_seed(self, teams_map):
        assert eligible_team_ids(teams_map) == [10, 20, 30, 40]
        assert eligible_team_ids(teams_map, [20, 50]) == [20]


class TestFirstRoundOptions:
    """Tests for picker options with advisory validation."""

    def test_empty_option_first(self, first_round, teams_map):
        options = first_round_options(first_round, teams_map)
        assert options[0] == {'id': None, 'label': '— Empty —', 'disabled': False, 'reason': None}

    def test_sorted_by_seed_with_labels(self, first_round, teams_map):
        options = first_round_options(first_round, teams_map)
        assert [o['id'] for o in options[1:]] == [10, 20, 30, 40]
        assert options[2]['label'] == '#2 — Dolphins'

    def test_placed_team_disabled_elsewhere(self, first_round, teams_map):
        """Test a team already in the first round cannot be picked for another slot."""
        options = {o['id']: o for o in first_round_options(first_round, teams_map)}
        assert options[10]['disabled']
        assert options[10]['reason'] == 'already in bracket'
        assert not options[20]['disabled']

    def test_current_team_stays_enabled(self, first_round, teams_map):
        options = {o['id']: o for o in first_round_options(first_round, teams_map, current_team_id=10)}
        assert not options[10]['disabled']

    def test_duplicate_seed_disabled(self, first_round, teams_map):
        """Test a team sharing a placed team's seed is disabled."""
        teams_map[60] = Team(id=60, name='Copycats', seed=1)
        options = {o['id']: o for o in first_round_options(first_round, teams_map)}
        assert options[60]['disabled']
        assert options[60]['reason'] == 'Seed already used'

    def test_labels_follow_language(self, first_round, teams_map):
        options = first_round_options(first_round, teams_map, labels=get_labels('el'))
        assert options[0]['label'] == '— Κενό —'

    def test_dict_teams(self, first_round):
        teams = {10: {'name': 'A', 'seed': 1}, 20: {'name': 'B', 'seed': 2}}
        options = first_round_options(first_round, teams)
        assert [o['label'] for o in options[1:]] == ['#1 — A', '#2 — B']


class TestAutoSeed:
    """Tests for auto-seed-and-pair."""

    def test_pairs_best_against_worst(self, first_round, teams_map):
        rows = auto_seed_and_pair(first_round, teams_map)
        assert rows == [
            {'match_id': 1, 'team_a_id': 10, 'team_b_id': 40},
            {'match_id': 2, 'team_a_id': 20, 'team_b_id': 30},
        ]

    def test_short_field_leaves_empty_slots(self, first_round, teams_map):
        rows = auto_seed_and_pair(first_round, teams_map, eligible=[10, 20, 30])
        assert rows[0] == {'match_id': 1, 'team_a_id': 10, 'team_b_id': None}

    def test_reseed_callback_order(self, first_round, teams_map):
        rows = auto_seed_and_pair(first_round, teams_map, reseed=lambda: [40, 30, 20, 10])
        assert rows[0]['team_a_id'] == 40
        assert rows[0]['team_b_id'] == 10

    def test_failing_reseed_falls_back(self, first_round, teams_map, caplog):
        """Test a failing re-seed is logged and the current seeds are used."""
        def broken():
            raise RuntimeError("seeding service down")
        rows = auto_seed_and_pair(first_round, teams_map, reseed=broken)
        assert rows[0]['team_a_id'] == 10
        assert "seeding service down" in caplog.text

    def test_bulk_callback(self, first_round, teams_map):
        received = []
        auto_seed_and_pair(first_round, teams_map, on_bulk_assign=received.append)
        assert len(received) == 1
        assert len(received[0]) == 2

    def test_slot_callback(self, first_round, teams_map):
        calls = []
        auto_seed_and_pair(first_round, teams_map, on_assign_slot=lambda *args: calls.append(args))
        assert calls[:2] == [(1, 'A', 10), (1, 'B', 40)]
        assert len(calls) == 4


class TestLocks:
    """Tests for slot locks and editable cards."""

    def test_pointer_locks_slot(self):
        match = Match(id=5, round=2, bracket_pos=1, source_a=SourcePointer(1, 1), source_match_b_id=None)
        assert slot_locks(match) == {'A': True, 'B': False}

    def test_explicit_link_locks_slot(self):
        match = Match(id=5, round=2, bracket_pos=1, source_match_b_id=2)
        assert slot_locks(match) == {'A': False, 'B': True}

    def test_first_column_always_editable(self):
        match = Match(id=1, round=1, bracket_pos=1, source_a=SourcePointer(0, 1))
        assert is_editable_card(match, 0)
        assert not is_editable_card(match, 0, editable=False)

    def test_later_column_needs_no_pointers(self, five_team_bracket):
        semi = [m for m in five_team_bracket if m.round == 2][0]
        assert not is_editable_card(semi, 1)
        assert is_editable_card(Match(id=9, round=2, bracket_pos=1), 1)

    def test_stub_never_editable(self):
        assert not is_editable_card(Match(id=-1, round=1, bracket_pos=1, is_stub=True), 0)
