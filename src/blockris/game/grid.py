from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional, Tuple

import numpy as np

from .pieces import Piece, rotate_piece
from .rules import DEFAULT_RULES, ScoringRules


GRID_ROWS = 8
GRID_COLS = 8

Grid = np.ndarray


class Position(NamedTuple):
    row: int
    col: int


@dataclass(frozen=True)
class ClearResult:
    rows: Tuple[int, ...] = ()
    cols: Tuple[int, ...] = ()

    @property
    def total_cleared(self) -> int:
        return len(self.rows) + len(self.cols)


@dataclass(frozen=True, eq=False)
class PlacementResult:
    success: bool
    cleared: ClearResult = field(default_factory=ClearResult)
    points_earned: int = 0
    new_combo: int = 0
    grid: Optional[Grid] = None  # post-clear grid to commit


def _check(grid: Grid) -> Grid:
    if grid.ndim != 2:
        raise ValueError(f"Grid must be 2-dimensional, got shape {grid.shape}")
    return grid


def create_empty_grid(rows: int = GRID_ROWS, cols: int = GRID_COLS) -> Grid:
    return np.zeros((int(rows), int(cols)), dtype=np.int8)


def can_place(grid: Grid, piece: Piece, position: Tuple[int, int]) -> bool:
    """Check if piece fits at ``position`` without leaving the grid or overlapping."""
    row, col = position
    rows, cols = _check(grid).shape
    if row < 0 or col < 0:
        return False
    if row + piece.height > rows or col + piece.width > cols:
        return False
    window = grid[row : row + piece.height, col : col + piece.width]
    return not bool(np.any((piece.shape != 0) & (window != 0)))


can_place_piece = can_place


def place(grid: Grid, piece: Piece, position: Tuple[int, int]) -> Grid:
    """OR the piece's filled cells into a copy of ``grid``.

    Assumes the placement was validated with :func:`can_place`; cells falling
    outside the grid are dropped.
    """
    row, col = position
    new_grid = _check(grid).copy()
    rows, cols = new_grid.shape
    for py, px in zip(*np.nonzero(piece.shape)):
        y, x = row + int(py), col + int(px)
        if 0 <= y < rows and 0 <= x < cols:
            new_grid[y, x] = 1
    return new_grid


def find_completed_lines(grid: Grid) -> ClearResult:
    filled = _check(grid) != 0
    rows = tuple(int(r) for r in np.flatnonzero(np.all(filled, axis=1)))
    cols = tuple(int(c) for c in np.flatnonzero(np.all(filled, axis=0)))
    return ClearResult(rows=rows, cols=cols)


def clear_lines(grid: Grid, clear_result: ClearResult) -> Grid:
    new_grid = _check(grid).copy()
    for row in clear_result.rows:
        new_grid[row, :] = 0
    for col in clear_result.cols:
        new_grid[:, col] = 0
    return new_grid


def is_empty(grid: Grid) -> bool:
    return not bool(np.any(grid))


def count_empty(grid: Grid) -> int:
    return int(grid.size - np.count_nonzero(grid))


def valid_positions(grid: Grid, piece: Piece) -> Iterable[Position]:
    """Yield every legal anchor in row-major order."""
    rows, cols = _check(grid).shape
    for row in range(rows):
        for col in range(cols):
            if can_place(grid, piece, (row, col)):
                yield Position(row, col)


def count_placements(grid: Grid, piece: Piece) -> int:
    return sum(1 for _ in valid_positions(grid, piece))


def first_fit(grid: Grid, piece: Piece) -> Optional[Position]:
    return next(iter(valid_positions(grid, piece)), None)


def can_place_any_piece(grid: Grid, pieces: Iterable[Optional[Piece]]) -> bool:
    """True if any piece, in any of its four rotations, fits somewhere."""
    for piece in pieces:
        if piece is None:
            continue
        current = piece
        for _ in range(4):
            if first_fit(grid, current) is not None:
                return True
            current = rotate_piece(current)
    return False


def process_placement(
    grid: Grid,
    piece: Piece,
    position: Tuple[int, int],
    current_combo: int,
    rules: ScoringRules = DEFAULT_RULES,
) -> PlacementResult:
    """Place, detect lines, score and clear.

    The grid in the result is the one the caller should commit. An illegal
    placement yields ``success=False`` and leaves grid and combo as they were.
    """
    if not can_place(grid, piece, position):
        return PlacementResult(success=False, new_combo=current_combo, grid=grid.copy())
    placed = place(grid, piece, position)
    cleared = find_completed_lines(placed)
    score, combo = rules.calculate_score(piece.block_count, cleared.total_cleared, current_combo)
    return PlacementResult(
        success=True,
        cleared=cleared,
        points_earned=score,
        new_combo=combo,
        grid=clear_lines(placed, cleared),
    )
