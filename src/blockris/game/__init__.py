"""Game module for Blockris.

Exports the puzzle engine and the session layer built on it:
- pieces: shape catalog, rotation and random piece construction
- grid: occupancy grid, placement checks, line detection and clearing
- rules: scoring and combo arithmetic
- generator: adaptive three-piece deal and unique-solution detection
- session: immutable game state and round transitions
- core: BlockrisGame, a stateful driver over the session functions
"""

from .pieces import (
    PIECE_COLORS,
    PIECE_SHAPES,
    PIECE_TYPES,
    Dimensions,
    Piece,
    block_count,
    create_piece,
    dimensions,
    random_piece,
    random_piece_set,
    rotate90,
    rotate_piece,
)
from .grid import (
    GRID_COLS,
    GRID_ROWS,
    ClearResult,
    PlacementResult,
    Position,
    can_place,
    can_place_any_piece,
    can_place_piece,
    clear_lines,
    count_empty,
    count_placements,
    create_empty_grid,
    find_completed_lines,
    first_fit,
    is_empty,
    place,
    process_placement,
)
from .rules import ScoreResult, ScoringRules, calculate_score, format_combo
from .generator import (
    PieceSetResult,
    count_solvable_orders,
    evaluate_piece_set,
    generate_smart_piece_set,
    has_unique_solution,
    target_block_count,
)
from .session import (
    ROTATE_SLOT,
    GameState,
    SessionEvent,
    SessionStep,
    hold_piece,
    new_game,
    place_piece,
    settle,
    state_from_dict,
    state_to_dict,
)
from .core import BlockrisGame, GameConfig

__all__ = [
    "PIECE_COLORS",
    "PIECE_SHAPES",
    "PIECE_TYPES",
    "Dimensions",
    "Piece",
    "block_count",
    "create_piece",
    "dimensions",
    "random_piece",
    "random_piece_set",
    "rotate90",
    "rotate_piece",
    "GRID_COLS",
    "GRID_ROWS",
    "ClearResult",
    "PlacementResult",
    "Position",
    "can_place",
    "can_place_any_piece",
    "can_place_piece",
    "clear_lines",
    "count_empty",
    "count_placements",
    "create_empty_grid",
    "find_completed_lines",
    "first_fit",
    "is_empty",
    "place",
    "process_placement",
    "ScoreResult",
    "ScoringRules",
    "calculate_score",
    "format_combo",
    "PieceSetResult",
    "count_solvable_orders",
    "evaluate_piece_set",
    "generate_smart_piece_set",
    "has_unique_solution",
    "target_block_count",
    "ROTATE_SLOT",
    "GameState",
    "SessionEvent",
    "SessionStep",
    "hold_piece",
    "new_game",
    "place_piece",
    "settle",
    "state_from_dict",
    "state_to_dict",
    "BlockrisGame",
    "GameConfig",
]
