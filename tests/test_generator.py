from __future__ import annotations

import random

import numpy as np
import pytest

from blockris.game import (
    PIECE_TYPES,
    count_solvable_orders,
    create_empty_grid,
    create_piece,
    evaluate_piece_set,
    generate_smart_piece_set,
    has_unique_solution,
    target_block_count,
)
from blockris.game.generator import REJECT_SCORE, build_candidate, can_place_sequentially, total_placements

from conftest import full_grid_except, piece


@pytest.mark.parametrize(
    "empty, score, target",
    [
        (64, 0, 18),
        (40, 0, 18),
        (39, 0, 14),
        (25, 0, 14),
        (24, 0, 10),
        (15, 0, 10),
        (14, 0, 16),
        (3, 100000, 16),
        (64, 250, 14),
        (30, 125, 13),
        (64, 500, 11),
        (64, 5000, 11),
    ],
)
def test_target_block_count(empty, score, target):
    assert target_block_count(empty, score) == target


def test_candidate_respects_slot_limits():
    target = 3
    for seed in range(200):
        first, second, last = build_candidate(target, random.Random(seed))
        assert first.block_count <= target / 3 + 3
        remaining = target - first.block_count
        assert second.block_count <= remaining / 2 + 3
        remaining -= second.block_count
        distances = sorted(abs(create_piece(k).block_count - remaining) for k in PIECE_TYPES)
        assert abs(last.block_count - remaining) <= distances[4]


def test_candidate_falls_back_when_nothing_fits():
    pieces = build_candidate(-30, random.Random(0))
    assert len(pieces) == 3
    assert all(p.kind in PIECE_TYPES for p in pieces)


def test_evaluate_on_empty_grid():
    pieces = [piece("single"), piece("double-h"), piece("quad-square")]
    # placements 64 + 56 + 49, blocks 7 vs 18, families single/double/quad
    assert evaluate_piece_set(pieces, create_empty_grid(), None, 18) == 1690 - 55 + 45


def test_evaluate_counts_rotation_only_when_slot_is_free():
    grid = full_grid_except([(0, 0), (1, 0), (2, 0)])
    pieces = [piece("triple-h"), piece("single", 1), piece("single", 2)]
    assert total_placements(pieces, grid, None) == 7
    assert total_placements(pieces, grid, piece("single", 3)) == 6
    assert evaluate_piece_set(pieces, grid, None, 5) == 70 + 30
    assert evaluate_piece_set(pieces, grid, piece("single", 3), 5) == 60 + 30


def test_evaluate_rejects_cramped_sets():
    grid = full_grid_except([(0, 0)])
    pieces = [piece("single"), piece("quad-square"), piece("penta-plus")]
    assert evaluate_piece_set(pieces, grid, None, 16) == REJECT_SCORE


def test_generate_on_empty_grid_is_reproducible():
    a = generate_smart_piece_set(create_empty_grid(), None, 0, random.Random(42))
    b = generate_smart_piece_set(create_empty_grid(), None, 0, random.Random(42))
    assert [p.kind for p in a.pieces] == [p.kind for p in b.pieces]
    assert len(a.pieces) == 3
    assert a.target == 18
    assert a.evaluation > REJECT_SCORE
    assert not a.is_unique_solution


def test_generate_does_not_touch_grid():
    grid = full_grid_except([(0, c) for c in range(8)] + [(r, 0) for r in range(8)])
    snapshot = grid.copy()
    generate_smart_piece_set(grid, None, 120, random.Random(3))
    assert np.array_equal(grid, snapshot)


@pytest.mark.parametrize("seed", range(5))
def test_generate_prefers_playable_sets(seed):
    grid = full_grid_except([(0, 0), (0, 1), (0, 2), (0, 3)])
    result = generate_smart_piece_set(grid, None, 0, random.Random(seed))
    assert result.target == 16
    assert result.evaluation != REJECT_SCORE
    assert total_placements(result.pieces, grid, None) >= 3


# Horizontal runs at rows 0, 2 and 4 sized 4, 3 and 2. Every row and column
# keeps one isolated empty cell so no line ever completes.
DECOYS = [(0, 7), (1, 0), (2, 6), (3, 1), (4, 5), (5, 2), (6, 3), (7, 4)]
RUNS = [(0, 0), (0, 1), (0, 2), (0, 3), (2, 0), (2, 1), (2, 2), (4, 0), (4, 1)]


def test_only_one_order_fits():
    grid = full_grid_except(RUNS + DECOYS)
    quad, triple, double = piece("quad-h"), piece("triple-h"), piece("double-h")
    holding = piece("single")
    assert can_place_sequentially([quad, triple, double], grid, holding)
    assert not can_place_sequentially([quad, double, triple], grid, holding)
    assert not can_place_sequentially([double, quad, triple], grid, holding)
    assert count_solvable_orders([double, triple, quad], grid, holding) == 1
    assert has_unique_solution([double, triple, quad], grid, holding)


def test_several_orders_are_not_unique():
    grid = full_grid_except(RUNS + DECOYS)
    doubles = [piece("double-h", seed) for seed in range(3)]
    holding = piece("single")
    assert count_solvable_orders(doubles, grid, holding) == 6
    assert not has_unique_solution(doubles, grid, holding)


def test_no_order_fits_is_not_unique():
    # only isolated cells are free, so even the rotated double has no room
    grid = full_grid_except(DECOYS)
    pieces = [piece("double-h"), piece("quad-square"), piece("penta-plus")]
    assert count_solvable_orders(pieces, grid, None) == 0
    assert not has_unique_solution(pieces, grid, None)


def test_greedy_replay_uses_free_slot_once():
    # two vertical gaps of height 3, no horizontal room, and no line can complete
    grid = full_grid_except(DECOYS + [(0, 2), (1, 2), (2, 2), (3, 7), (4, 7), (5, 7)])
    triple_h = [piece("triple-h", 1), piece("triple-h", 2)]
    assert not can_place_sequentially(triple_h, grid, None)
    assert can_place_sequentially(triple_h[:1], grid, None)
    assert not can_place_sequentially(triple_h[:1], grid, piece("single"))
    triple_v = [piece("triple-v", 3), piece("triple-v", 4)]
    assert can_place_sequentially(triple_v, grid, None)
    assert can_place_sequentially([triple_h[0], triple_v[0]], grid, None)
    assert not can_place_sequentially([triple_h[0], triple_v[0]], grid, piece("single"))


def test_generate_rejects_empty_candidate_pool():
    with pytest.raises(ValueError):
        generate_smart_piece_set(create_empty_grid(), None, 0, random.Random(0), candidates=0)
