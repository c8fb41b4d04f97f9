"""
Unit tests for display labels.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.labels import get_labels, round_label, EN_LABELS, EL_LABELS


class TestLabels:
    """Tests for label sets."""

    def test_english_default(self):
        assert get_labels() == EN_LABELS

    def test_greek(self):
        assert get_labels('el')['final'] == 'Τελικός'

    def test_unknown_language_falls_back_to_english(self):
        assert get_labels('fr') == EN_LABELS

    def test_overrides(self):
        labels = get_labels('en', {'final': 'Championship'})
        assert labels['final'] == 'Championship'
        assert EN_LABELS['final'] == 'Final'

    def test_sets_share_keys(self):
        assert set(EN_LABELS) == set(EL_LABELS)


class TestRoundLabel:
    """Tests for column labels."""

    @pytest.mark.parametrize("index,total,matches,expected", [
        (3, 4, 1, 'Final'),
        (2, 4, 2, 'Semi-finals'),
        (1, 4, 4, 'Quarter-finals'),
        (0, 4, 8, 'Round of 16'),
        (0, 6, 32, 'Round of 64'),
    ])
    def test_standard_rounds(self, index, total, matches, expected):
        assert round_label(index, total, matches) == expected

    def test_fallback_round_number(self):
        """Test a column whose size is not a power of two gets a round number."""
        assert round_label(0, 3, 3) == 'Round 1'

    def test_single_match_before_last_column(self):
        assert round_label(0, 2, 1) == 'Round 1'

    def test_localised(self):
        assert round_label(0, 3, 8, get_labels('el')) == 'Φάση των 16'
