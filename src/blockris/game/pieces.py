from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Dict, List, NamedTuple, Optional

import numpy as np


Shape = np.ndarray


def _shape(rows: List[List[int]]) -> Shape:
    arr = np.array(rows, dtype=np.int8)
    arr.setflags(write=False)
    return arr


# Catalog order matters: the generator ranks ties by it.
PIECE_SHAPES: Dict[str, Shape] = {
    "single": _shape([[1]]),
    "double-h": _shape([[1, 1]]),
    "double-v": _shape([[1], [1]]),
    "triple-h": _shape([[1, 1, 1]]),
    "triple-v": _shape([[1], [1], [1]]),
    "triple-l": _shape([[1, 0], [1, 1]]),
    "quad-h": _shape([[1, 1, 1, 1]]),
    "quad-v": _shape([[1], [1], [1], [1]]),
    "quad-square": _shape([[1, 1], [1, 1]]),
    "quad-l": _shape([[1, 0], [1, 0], [1, 1]]),
    "quad-t": _shape([[1, 1, 1], [0, 1, 0]]),
    "penta-h": _shape([[1, 1, 1, 1, 1]]),
    "penta-l": _shape([[1, 0], [1, 0], [1, 0], [1, 1]]),
    "penta-t": _shape([[1, 1, 1], [0, 1, 0], [0, 1, 0]]),
    "penta-plus": _shape([[0, 1, 0], [1, 1, 1], [0, 1, 0]]),
}

PIECE_TYPES: List[str] = list(PIECE_SHAPES)

PIECE_COLORS: List[str] = [
    "#667eea",
    "#f093fb",
    "#4facfe",
    "#43e97b",
    "#fa709a",
    "#fee140",
    "#30cfd0",
    "#a8edea",
    "#ff6b6b",
    "#feca57",
    "#48dbfb",
    "#ff9ff3",
    "#54a0ff",
]


class Dimensions(NamedTuple):
    width: int
    height: int


def rotate90(shape: Shape) -> Shape:
    """Rotate a shape matrix 90 degrees clockwise.

    Column ``c`` of the input becomes row ``c`` of the output, read bottom to top.
    """
    rotated = np.rot90(np.asarray(shape, dtype=np.int8), 1, axes=(1, 0)).copy()
    rotated.setflags(write=False)
    return rotated


def dimensions(shape: Shape) -> Dimensions:
    h, w = np.asarray(shape).shape
    return Dimensions(width=int(w), height=int(h))


def block_count(shape: Shape) -> int:
    return int(np.count_nonzero(shape))


@dataclass(frozen=True, eq=False)
class Piece:
    """A catalog shape instance with its color and orientation.

    ``kind`` names the catalog entry the piece was cut from; ``uid`` tells two
    instances of the same kind apart. Neither changes on rotation.
    """

    kind: str
    shape: Shape
    color: str
    rotation: int = 0  # 0, 90, 180, 270
    uid: str = field(default="")

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])

    @property
    def block_count(self) -> int:
        return block_count(self.shape)

    @property
    def family(self) -> str:
        """Size family of the catalog entry, e.g. ``"quad"`` for ``"quad-l"``."""
        return self.kind.split("-")[0]

    def same_shape(self, other: "Piece") -> bool:
        return self.shape.shape == other.shape.shape and bool(np.array_equal(self.shape, other.shape))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.color == other.color
            and self.rotation == other.rotation
            and self.uid == other.uid
            and self.same_shape(other)
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.color, self.rotation, self.uid, self.shape.tobytes()))


def _new_uid(kind: str, rng: random.Random) -> str:
    return f"{kind}-{rng.getrandbits(32):08x}"


def create_piece(kind: str, rng: Optional[random.Random] = None, color: Optional[str] = None) -> Piece:
    """Instantiate catalog shape ``kind``; the color is drawn from the palette unless given."""
    if kind not in PIECE_SHAPES:
        raise ValueError(f"Unknown piece kind: {kind}")
    rng = rng or random.Random()
    if color is None:
        color = rng.choice(PIECE_COLORS)
    return Piece(kind=kind, shape=PIECE_SHAPES[kind], color=color, rotation=0, uid=_new_uid(kind, rng))


def random_piece(rng: Optional[random.Random] = None) -> Piece:
    rng = rng or random.Random()
    kind = rng.choice(PIECE_TYPES)
    color = rng.choice(PIECE_COLORS)
    return create_piece(kind, rng, color)


def random_piece_set(rng: Optional[random.Random] = None, n: int = 3) -> List[Piece]:
    """Unbiased deal of ``n`` pieces, used for the opening round."""
    rng = rng or random.Random()
    return [random_piece(rng) for _ in range(n)]


def rotate_piece(piece: Piece) -> Piece:
    return replace(piece, shape=rotate90(piece.shape), rotation=(piece.rotation + 90) % 360)
