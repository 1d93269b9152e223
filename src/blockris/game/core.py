from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .generator import CANDIDATE_COUNT
from .grid import GRID_COLS, GRID_ROWS, can_place
from .pieces import PIECE_TYPES, rotate_piece
from .rules import ScoringRules
from .session import (
    ROTATE_SLOT,
    GameState,
    SessionEvent,
    SessionStep,
    hold_piece,
    new_game,
    place_piece,
)


@dataclass
class GameConfig:
    """Configuration for a blockris session"""
    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    candidates: int = CANDIDATE_COUNT
    max_episode_steps: int = 10000
    random_seed: Optional[int] = None
    rules: ScoringRules = field(default_factory=ScoringRules)


class BlockrisGame:
    """Holds the current :class:`GameState` and a seeded random source.

    Thin stateful shell over the pure session functions for drivers that want
    an object to poke at, such as the gymnasium environment.
    """

    def __init__(self, config: Optional[GameConfig] = None) -> None:
        self.config = config or GameConfig()
        self.rng = random.Random(self.config.random_seed)
        self.state: GameState = new_game(self.rng, self.config.rows, self.config.cols)
        self.step_count = 0
        self.unique_solutions = 0

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.state = new_game(self.rng, self.config.rows, self.config.cols)
        self.step_count = 0
        self.unique_solutions = 0

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def game_over(self) -> bool:
        return self.state.game_over

    def _apply(self, step: SessionStep) -> SessionStep:
        self.state = step.state
        if step.accepted:
            self.step_count += 1
        if SessionEvent.UNIQUE_SOLUTION in step.events:
            self.unique_solutions += 1
        return step

    def hold(self, index: int) -> SessionStep:
        return self._apply(hold_piece(self.state, index))

    def place(self, source: int, row: int, col: int) -> SessionStep:
        return self._apply(
            place_piece(self.state, source, (row, col), self.rng, self.config.rules, self.config.candidates)
        )

    def play(self, source: int, row: int, col: int, hold: bool = False) -> SessionStep:
        """Place a piece, optionally moving it through the rotate slot first.

        A rejected placement after a successful hold rolls the hold back so the
        whole move is all-or-nothing.
        """
        if not hold:
            return self.place(source, row, col)
        before = self.state
        held = hold_piece(before, source)
        if not held.accepted:
            return held
        step = place_piece(held.state, ROTATE_SLOT, (row, col), self.rng, self.config.rules, self.config.candidates)
        if not step.accepted:
            return SessionStep(before, step.events, 0)
        return self._apply(step)

    def is_valid_move(self, source: int, row: int, col: int, hold: bool = False) -> bool:
        state = self.state
        if state.game_over:
            return False
        if hold:
            if source == ROTATE_SLOT or state.rotate_slot is not None:
                return False
            piece = state.piece_at(source)
            if piece is None:
                return False
            return can_place(state.grid, rotate_piece(piece), (row, col))
        piece = state.piece_at(source)
        return piece is not None and can_place(state.grid, piece, (row, col))

    def get_valid_actions(self) -> List[Tuple[int, int, int, int]]:
        """List of (source, row, col, hold) valid moves; source 3 is the rotate slot"""
        actions: List[Tuple[int, int, int, int]] = []
        n = len(self.state.pieces)
        for slot in range(n + 1):
            source = ROTATE_SLOT if slot == n else slot
            for hold in (0, 1):
                for row in range(self.config.rows):
                    for col in range(self.config.cols):
                        if self.is_valid_move(source, row, col, bool(hold)):
                            actions.append((slot, row, col, hold))
        return actions

    def piece_codes(self) -> List[int]:
        """Catalog index per slot (bar pieces then rotate slot), -1 when empty."""
        return [-1 if p is None else PIECE_TYPES.index(p.kind) for p in self.state.pieces_in_play()]
