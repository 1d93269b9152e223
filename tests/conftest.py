from __future__ import annotations

import random
from typing import Iterable, Tuple

import numpy as np
import pytest

from blockris.game import create_empty_grid, create_piece


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


def grid_with(filled: Iterable[Tuple[int, int]] = (), rows: int = 8, cols: int = 8) -> np.ndarray:
    grid = create_empty_grid(rows, cols)
    for r, c in filled:
        grid[r, c] = 1
    return grid


def full_grid_except(empty: Iterable[Tuple[int, int]], rows: int = 8, cols: int = 8) -> np.ndarray:
    grid = np.ones((rows, cols), dtype=np.int8)
    for r, c in empty:
        grid[r, c] = 0
    return grid


def piece(kind: str, seed: int = 0):
    return create_piece(kind, random.Random(seed), color="#667eea")
