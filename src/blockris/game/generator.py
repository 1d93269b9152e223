"""Adaptive three-piece deal.

Each round draws a number of candidate sets sized toward a target block count,
scores them by how much room they leave on the current grid and keeps the best.
The chosen set is then replayed in every order with a greedy first-fit to see
whether exactly one order clears the round.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from itertools import permutations
from typing import List, Optional, Sequence

from .grid import Grid, clear_lines, count_empty, count_placements, find_completed_lines, first_fit, place
from .pieces import PIECE_TYPES, Piece, create_piece, rotate_piece

logger = logging.getLogger(__name__)

PIECES_PER_ROUND = 3
CANDIDATE_COUNT = 30
REJECT_SCORE = -1000
MIN_TOTAL_PLACEMENTS = 3
LAST_SLOT_POOL = 5


@dataclass(frozen=True)
class PieceSetResult:
    pieces: List[Piece]
    is_unique_solution: bool
    evaluation: int = 0
    target: int = 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def target_block_count(empty_cells: int, score: int) -> int:
    """Total block count the next deal should aim for.

    Emptier grids get bigger pieces. A nearly full grid gets a large target
    regardless of score so the deal keeps the game alive.
    """
    if empty_cells >= 40:
        base = 18
    elif empty_cells >= 25:
        base = 14
    elif empty_cells >= 15:
        base = 10
    else:
        return 16
    multiplier = max(0.6, 1.0 - (score / 500) * 0.4)
    return _round_half_up(base * multiplier)


def build_candidate(target: int, rng: random.Random, size: int = PIECES_PER_ROUND) -> List[Piece]:
    pieces: List[Piece] = []
    total = 0
    for slot in range(size):
        remaining = target - total
        if slot == size - 1:
            # stable sort keeps catalog order among equal distances
            ranked = sorted(
                (create_piece(kind, rng) for kind in PIECE_TYPES),
                key=lambda p: abs(p.block_count - remaining),
            )
            piece = ranked[rng.randrange(min(LAST_SLOT_POOL, len(ranked)))]
        else:
            limit = remaining / (size - slot) + 3
            fitting = [p for p in (create_piece(kind, rng) for kind in PIECE_TYPES) if p.block_count <= limit]
            if fitting:
                piece = rng.choice(fitting)
            else:
                piece = create_piece(rng.choice(PIECE_TYPES), rng)
        pieces.append(piece)
        total += piece.block_count
    return pieces


def total_placements(pieces: Sequence[Piece], grid: Grid, holding: Optional[Piece]) -> int:
    total = 0
    for piece in pieces:
        count = count_placements(grid, piece)
        if holding is None:
            count = max(count, count_placements(grid, rotate_piece(piece)))
        total += count
    return total


def evaluate_piece_set(pieces: Sequence[Piece], grid: Grid, holding: Optional[Piece], target: int) -> int:
    placements = total_placements(pieces, grid, holding)
    if placements < MIN_TOTAL_PLACEMENTS:
        return REJECT_SCORE
    blocks = sum(p.block_count for p in pieces)
    families = len({p.family for p in pieces})
    return placements * 10 - abs(blocks - target) * 5 + families * 15


def _place_greedy(grid: Grid, piece: Piece) -> Optional[Grid]:
    position = first_fit(grid, piece)
    if position is None:
        return None
    placed = place(grid, piece, position)
    return clear_lines(placed, find_completed_lines(placed))


def can_place_sequentially(pieces: Sequence[Piece], grid: Grid, holding: Optional[Piece]) -> bool:
    """Greedy replay of one order: first legal anchor, row-major, lines cleared as they fill.

    A piece that does not fit may be tried once rotated while the holding slot
    is free; doing so occupies the slot for the rest of the replay.
    """
    current = grid
    slot_free = holding is None
    for piece in pieces:
        result = _place_greedy(current, piece)
        if result is None and slot_free:
            result = _place_greedy(current, rotate_piece(piece))
            if result is not None:
                slot_free = False
        if result is None:
            return False
        current = result
    return True


def count_solvable_orders(pieces: Sequence[Piece], grid: Grid, holding: Optional[Piece]) -> int:
    return sum(1 for order in permutations(pieces) if can_place_sequentially(order, grid, holding))


def has_unique_solution(pieces: Sequence[Piece], grid: Grid, holding: Optional[Piece]) -> bool:
    solved = 0
    for order in permutations(pieces):
        if can_place_sequentially(order, grid, holding):
            solved += 1
            if solved > 1:
                return False
    return solved == 1


def generate_smart_piece_set(
    grid: Grid,
    holding: Optional[Piece],
    score: int,
    rng: Optional[random.Random] = None,
    candidates: int = CANDIDATE_COUNT,
) -> PieceSetResult:
    if candidates < 1:
        raise ValueError(f"candidates must be at least 1, got {candidates}")
    rng = rng or random.Random()
    target = target_block_count(count_empty(grid), score)

    best: Optional[List[Piece]] = None
    best_eval = 0
    for _ in range(candidates):
        candidate = build_candidate(target, rng)
        evaluation = evaluate_piece_set(candidate, grid, holding, target)
        if best is None or evaluation > best_eval:
            best, best_eval = candidate, evaluation

    unique = has_unique_solution(best, grid, holding)
    logger.debug(
        "Generated %s (target=%d, evaluation=%d, unique=%s)",
        [p.kind for p in best],
        target,
        best_eval,
        unique,
    )
    return PieceSetResult(pieces=best, is_unique_solution=unique, evaluation=best_eval, target=target)


__all__ = [
    "PieceSetResult",
    "target_block_count",
    "build_candidate",
    "total_placements",
    "evaluate_piece_set",
    "can_place_sequentially",
    "count_solvable_orders",
    "has_unique_solution",
    "generate_smart_piece_set",
]
