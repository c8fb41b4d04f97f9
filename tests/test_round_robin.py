"""
Unit tests for round-robin schedule generation.
"""
import pytest
import sys
import os
from itertools import combinations

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.round_robin import (
    generate_round_robin,
    generate_skeleton_round_robin,
    assign_groups,
    generate_group_stage,
    idle_matchdays,
)


def _by_matchday(rows):
    days = {}
    for row in rows:
        days.setdefault(row.matchday, []).append(row.teams)
    return days


class TestCircleMethod:
    """Tests for single-pass schedules."""

    def test_four_teams(self):
        """Test the circle method pairs for four entrants."""
        days = _by_matchday(generate_round_robin(['A', 'B', 'C', 'D']))
        assert days == {
            1: [('A', 'D'), ('B', 'C')],
            2: [('A', 'C'), ('D', 'B')],
            3: [('A', 'B'), ('C', 'D')],
        }

    @pytest.mark.parametrize("count", [2, 3, 4, 5, 6, 7, 8, 10])
    def test_every_pair_meets_once(self, count):
        teams = list(range(count))
        rows = generate_round_robin(teams)
        met = [frozenset(row.teams) for row in rows]
        assert len(met) == len(set(met))
        assert set(met) == {frozenset(p) for p in combinations(teams, 2)}

    @pytest.mark.parametrize("count", [2, 4, 6, 8])
    def test_even_counts_use_m_minus_one_matchdays(self, count):
        rows = generate_round_robin(list(range(count)))
        assert {row.matchday for row in rows} == set(range(1, count))

    @pytest.mark.parametrize("count", [4, 5, 6, 7])
    def test_nobody_plays_twice_on_a_matchday(self, count):
        for pairs in _by_matchday(generate_round_robin(list(range(count)))).values():
            seen = [team for pair in pairs for team in pair]
            assert len(seen) == len(set(seen))

    def test_too_few_teams(self):
        assert generate_round_robin([]) == []
        assert generate_round_robin(['A']) == []

    def test_row_metadata(self):
        rows = generate_round_robin(['A', 'B'], stage_index=3, group_index=1)
        assert rows[0].stage_index == 3
        assert rows[0].group_index == 1
        assert rows[0].matchday == 1


class TestByes:
    """Tests for odd counts padded with a bye."""

    def test_five_teams_one_idle_matchday_each(self):
        """Test every real entrant sits out exactly one matchday."""
        teams = ['A', 'B', 'C', 'D', 'E']
        rows = generate_round_robin(teams)
        assert {row.matchday for row in rows} == {1, 2, 3, 4, 5}
        idle = idle_matchdays(rows, teams)
        assert all(len(days) == 1 for days in idle.values())
        assert sorted(days[0] for days in idle.values()) == [1, 2, 3, 4, 5]

    def test_five_teams_two_games_per_matchday(self):
        days = _by_matchday(generate_round_robin(['A', 'B', 'C', 'D', 'E']))
        assert all(len(pairs) == 2 for pairs in days.values())

    def test_even_count_has_no_idle_days(self):
        teams = ['A', 'B', 'C', 'D']
        idle = idle_matchdays(generate_round_robin(teams), teams)
        assert idle == {'A': [], 'B': [], 'C': [], 'D': []}


class TestRepeats:
    """Tests for multiple passes."""

    def test_second_pass_swaps_home_and_away(self):
        """Test pass two repeats pass one with sides swapped at offset m - 1."""
        days = _by_matchday(generate_round_robin(['A', 'B', 'C', 'D'], repeats=2))
        assert len(days) == 6
        for day in (1, 2, 3):
            assert days[day + 3] == [(b, a) for a, b in days[day]]

    def test_third_pass_keeps_original_sides(self):
        days = _by_matchday(generate_round_robin(['A', 'B', 'C', 'D'], repeats=3))
        assert days[7] == days[1]

    def test_repeats_below_one_mean_one(self):
        assert len(generate_round_robin(['A', 'B', 'C'], repeats=0)) == 3


class TestSkeleton:
    """Tests for round robins with unknown teams."""

    def test_same_shape_without_teams(self):
        rows = generate_skeleton_round_robin(4, group_index=0)
        assert len(rows) == 6
        assert {row.matchday for row in rows} == {1, 2, 3}
        assert all(row.teams == (None, None) for row in rows)

    def test_single_slot_is_empty(self):
        assert generate_skeleton_round_robin(1) == []


class TestGroups:
    """Tests for group distribution and group stages."""

    def test_assign_groups_in_turn(self):
        """Test team i goes to group i mod G."""
        assert assign_groups([1, 2, 3, 4, 5], 2) == [[1, 3, 5], [2, 4]]

    def test_assign_groups_at_least_one(self):
        assert assign_groups([1, 2], 0) == [[1, 2]]

    def test_group_stage_skips_small_groups(self):
        """Test a group with a single team produces no rows."""
        rows = generate_group_stage([['A', 'B', 'C'], ['D']], stage_index=1)
        assert {row.group_index for row in rows} == {0}
        assert len(rows) == 3
        assert all(row.stage_index == 1 for row in rows)

    def test_group_stage_numbers_matchdays_per_group(self):
        rows = generate_group_stage([['A', 'B'], ['C', 'D']])
        assert [(row.group_index, row.matchday) for row in rows] == [(0, 1), (1, 1)]
