from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple


class ScoreResult(NamedTuple):
    score: int
    new_combo: int


@dataclass(frozen=True)
class ScoringRules:
    """Scoring constants.

    Placement earns ``points_per_block`` per cell. The first cleared line is
    worth ``points_first_line`` and every further line in the same placement
    ``points_additional_line``. The total is scaled by ``1 + combo * combo_step``
    using the combo *after* this placement.
    """

    points_per_block: int = 1
    points_first_line: int = 10
    points_additional_line: int = 5
    combo_step: float = 0.25
    full_clear_bonus: int = 1000
    unique_solution_bonus: int = 100

    def line_points(self, lines_cleared: int) -> int:
        if lines_cleared <= 0:
            return 0
        return self.points_first_line + max(0, lines_cleared - 1) * self.points_additional_line

    def combo_multiplier(self, combo: int) -> float:
        return 1 + combo * self.combo_step

    def calculate_score(self, block_count: int, lines_cleared: int, current_combo: int) -> ScoreResult:
        base = block_count * self.points_per_block + self.line_points(lines_cleared)
        new_combo = current_combo + 1 if lines_cleared > 0 else 0
        return ScoreResult(score=int(math.floor(base * self.combo_multiplier(new_combo))), new_combo=new_combo)


DEFAULT_RULES = ScoringRules()


def calculate_score(block_count: int, lines_cleared: int, current_combo: int) -> ScoreResult:
    return DEFAULT_RULES.calculate_score(block_count, lines_cleared, current_combo)


def format_combo(combo: int, rules: ScoringRules = DEFAULT_RULES) -> str:
    if combo == 0:
        return ""
    return f"×{rules.combo_multiplier(combo):.2f}"
