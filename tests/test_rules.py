from __future__ import annotations

import pytest

from blockris.game import ScoringRules, calculate_score, format_combo


def test_placement_without_clear_resets_combo():
    assert calculate_score(4, 0, 2) == (4, 0)


def test_two_lines_with_running_combo():
    result = calculate_score(4, 2, 2)
    assert result.score == 33
    assert result.new_combo == 3


def test_first_clear_starts_combo():
    # (1 + 10) * 1.25
    assert calculate_score(1, 1, 0) == (13, 1)


@pytest.mark.parametrize("combo", [0, 1, 5, 40])
def test_any_non_clearing_placement_resets_combo(combo):
    assert calculate_score(5, 0, combo).new_combo == 0
    assert calculate_score(5, 0, combo).score == 5


@pytest.mark.parametrize(
    "lines, points",
    [(0, 0), (1, 10), (2, 15), (3, 20), (4, 25)],
)
def test_line_points(lines, points):
    assert ScoringRules().line_points(lines) == points


def test_custom_rules():
    rules = ScoringRules(points_per_block=2, combo_step=0.5)
    # (3 * 2 + 10) * (1 + 1 * 0.5)
    assert rules.calculate_score(3, 1, 0) == (24, 1)


def test_combo_multiplier_and_format():
    rules = ScoringRules()
    assert rules.combo_multiplier(3) == 1.75
    assert format_combo(0) == ""
    assert format_combo(1) == "×1.25"
    assert format_combo(4) == "×2.00"
