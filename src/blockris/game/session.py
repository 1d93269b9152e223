"""Round and session bookkeeping on top of the engine.

A :class:`GameState` is an immutable snapshot. Every transition returns a
:class:`SessionStep` holding the next snapshot, the feedback events the caller
may turn into sound or haptics, and the points awarded. Storage is left to the
caller; :func:`state_to_dict` and :func:`state_from_dict` convert a snapshot to
plain data and back.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from .generator import PIECES_PER_ROUND, CANDIDATE_COUNT, generate_smart_piece_set
from .grid import GRID_COLS, GRID_ROWS, Grid, can_place_any_piece, create_empty_grid, is_empty, process_placement
from .pieces import Piece, random_piece_set, rotate_piece
from .rules import DEFAULT_RULES, ScoringRules

logger = logging.getLogger(__name__)

ROTATE_SLOT = -1
# Combo only starts counting once this many rounds are complete.
COMBO_GRACE_ROUNDS = 2


class SessionEvent(str, Enum):
    PLACE = "place"
    CLEAR = "clear"
    COMBO = "combo"
    FULL_CLEAR = "full_clear"
    ROUND_COMPLETE = "round_complete"
    UNIQUE_SOLUTION = "unique_solution"
    GAME_OVER = "game_over"
    REJECTED = "rejected"


@dataclass(frozen=True, eq=False)
class GameState:
    grid: Grid
    pieces: Tuple[Optional[Piece], ...]
    rotate_slot: Optional[Piece] = None
    score: int = 0
    combo: int = 0
    completed_rounds: int = 0
    round_had_clear: bool = False
    game_over: bool = False

    def pieces_in_play(self) -> List[Optional[Piece]]:
        return [*self.pieces, self.rotate_slot]

    def piece_at(self, source: int) -> Optional[Piece]:
        if source == ROTATE_SLOT:
            return self.rotate_slot
        if 0 <= source < len(self.pieces):
            return self.pieces[source]
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return state_to_dict(self) == state_to_dict(other)


class SessionStep(NamedTuple):
    state: GameState
    events: Tuple[SessionEvent, ...] = ()
    points: int = 0

    @property
    def accepted(self) -> bool:
        return SessionEvent.REJECTED not in self.events


def new_game(rng: Optional[random.Random] = None, rows: int = GRID_ROWS, cols: int = GRID_COLS) -> GameState:
    rng = rng or random.Random()
    return GameState(grid=create_empty_grid(rows, cols), pieces=tuple(random_piece_set(rng, PIECES_PER_ROUND)))


def _rejected(state: GameState) -> SessionStep:
    return SessionStep(state, (SessionEvent.REJECTED,), 0)


def hold_piece(state: GameState, index: int) -> SessionStep:
    """Move bar piece ``index`` into the empty rotate slot, turning it 90 degrees.

    Holding never ends the round: an emptied bar waits until the held piece is
    placed.
    """
    if state.game_over or state.rotate_slot is not None:
        return _rejected(state)
    if not 0 <= index < len(state.pieces) or state.pieces[index] is None:
        return _rejected(state)
    pieces = list(state.pieces)
    held = rotate_piece(pieces[index])
    pieces[index] = None
    return SessionStep(replace(state, pieces=tuple(pieces), rotate_slot=held))


def settle(
    state: GameState,
    rng: Optional[random.Random] = None,
    rules: ScoringRules = DEFAULT_RULES,
    candidates: int = CANDIDATE_COUNT,
) -> SessionStep:
    """Deal a new round once the bar is empty, then check for game over."""
    if state.game_over:
        return SessionStep(state)
    events: List[SessionEvent] = []
    points = 0

    if all(piece is None for piece in state.pieces):
        combo = state.combo
        if state.completed_rounds >= COMBO_GRACE_ROUNDS and not state.round_had_clear:
            combo = 0
        deal = generate_smart_piece_set(state.grid, state.rotate_slot, state.score, rng, candidates)
        events.append(SessionEvent.ROUND_COMPLETE)
        if deal.is_unique_solution:
            points += rules.unique_solution_bonus
            events.append(SessionEvent.UNIQUE_SOLUTION)
        state = replace(
            state,
            pieces=tuple(deal.pieces),
            rotate_slot=None,
            score=state.score + points,
            combo=combo,
            completed_rounds=state.completed_rounds + 1,
            round_had_clear=False,
        )
        logger.debug("Round %d dealt, unique=%s", state.completed_rounds, deal.is_unique_solution)

    if not can_place_any_piece(state.grid, state.pieces_in_play()):
        state = replace(state, game_over=True)
        events.append(SessionEvent.GAME_OVER)
        logger.debug("Game over at score %d after %d rounds", state.score, state.completed_rounds)

    return SessionStep(state, tuple(events), points)


def place_piece(
    state: GameState,
    source: int,
    position: Tuple[int, int],
    rng: Optional[random.Random] = None,
    rules: ScoringRules = DEFAULT_RULES,
    candidates: int = CANDIDATE_COUNT,
) -> SessionStep:
    """Place the piece held in ``source`` (a bar index or ``ROTATE_SLOT``) at ``position``."""
    if state.game_over:
        return _rejected(state)
    piece = state.piece_at(source)
    if piece is None:
        return _rejected(state)
    result = process_placement(state.grid, piece, position, state.combo, rules)
    if not result.success:
        return _rejected(state)

    lines = result.cleared.total_cleared
    combo_active = state.completed_rounds >= COMBO_GRACE_ROUNDS
    combo = result.new_combo if combo_active else 0
    grid_cleared = is_empty(result.grid)

    events: List[SessionEvent] = []
    if grid_cleared:
        events.append(SessionEvent.FULL_CLEAR)
    elif lines > 0:
        events.append(SessionEvent.CLEAR)
        if combo_active and combo > state.combo:
            events.append(SessionEvent.COMBO)
    else:
        events.append(SessionEvent.PLACE)

    points = result.points_earned + (rules.full_clear_bonus if grid_cleared else 0)
    pieces = list(state.pieces)
    rotate_slot = state.rotate_slot
    if source == ROTATE_SLOT:
        rotate_slot = None
    else:
        pieces[source] = None

    placed = replace(
        state,
        grid=result.grid,
        pieces=tuple(pieces),
        rotate_slot=rotate_slot,
        score=state.score + points,
        combo=combo,
        round_had_clear=state.round_had_clear or lines > 0,
    )
    settled = settle(placed, rng, rules, candidates)
    return SessionStep(settled.state, tuple(events) + settled.events, points + settled.points)


def _piece_to_dict(piece: Optional[Piece]) -> Optional[Dict[str, Any]]:
    if piece is None:
        return None
    return {
        "kind": piece.kind,
        "shape": piece.shape.tolist(),
        "color": piece.color,
        "rotation": piece.rotation,
        "uid": piece.uid,
    }


def _piece_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Piece]:
    if data is None:
        return None
    try:
        shape = np.array(data["shape"], dtype=np.int8)
        if shape.ndim != 2 or shape.size == 0:
            raise ValueError(f"Piece shape must be a non-empty matrix, got {data['shape']!r}")
        shape.setflags(write=False)
        return Piece(
            kind=str(data["kind"]),
            shape=shape,
            color=str(data["color"]),
            rotation=int(data.get("rotation", 0)),
            uid=str(data.get("uid", "")),
        )
    except KeyError as exc:
        raise ValueError(f"Piece is missing field {exc}") from exc


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "grid": state.grid.tolist(),
        "pieces": [_piece_to_dict(p) for p in state.pieces],
        "rotate_slot": _piece_to_dict(state.rotate_slot),
        "score": int(state.score),
        "combo": int(state.combo),
        "completed_rounds": int(state.completed_rounds),
        "round_had_clear": bool(state.round_had_clear),
        "game_over": bool(state.game_over),
    }


def state_from_dict(data: Dict[str, Any]) -> GameState:
    try:
        grid = np.array(data["grid"], dtype=np.int8)
        pieces = tuple(_piece_from_dict(p) for p in data["pieces"])
        state = GameState(
            grid=grid,
            pieces=pieces,
            rotate_slot=_piece_from_dict(data.get("rotate_slot")),
            score=int(data["score"]),
            combo=int(data["combo"]),
            completed_rounds=int(data.get("completed_rounds", 0)),
            round_had_clear=bool(data.get("round_had_clear", False)),
            game_over=bool(data.get("game_over", False)),
        )
    except KeyError as exc:
        raise ValueError(f"Saved game is missing field {exc}") from exc
    if grid.ndim != 2:
        raise ValueError(f"Saved grid must be 2-dimensional, got shape {grid.shape}")
    if len(pieces) != PIECES_PER_ROUND:
        raise ValueError(f"Saved game must hold {PIECES_PER_ROUND} piece slots, got {len(pieces)}")
    return state
