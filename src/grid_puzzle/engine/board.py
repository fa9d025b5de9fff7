from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from .errors import LevelFormatError, PieceNotFoundError, PlacementError
from .shapes import Coordinate, Shape


logger = logging.getLogger(__name__)

DEFAULT_BOARD_SIZE = 10

# Integer codes used by the backing array; piece ids are stored as themselves.
EMPTY_CODE = -1
OBSTACLE_CODE = -2


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Obstacle:
    pass


@dataclass(frozen=True)
class OccupiedBy:
    piece_id: int


CellState = Union[Empty, Obstacle, OccupiedBy]

EMPTY = Empty()
OBSTACLE = Obstacle()


@dataclass(frozen=True)
class Placement:
    """Where a piece sits: its bounding-box shape and that box's top-left cell."""

    piece_id: int
    anchor: Coordinate
    shape: Shape

    def cells(self) -> List[Coordinate]:
        row, col = self.anchor
        return [(row + r, col + c) for r, c in self.shape.cells()]


@dataclass(frozen=True)
class Preview:
    """Target cells of a hovered placement that fall on the board, and whether it is legal."""

    cells: Tuple[Coordinate, ...]
    placeable: bool


class Board:
    """Square grid of cell states.

    Boards are values: `place` and `remove_piece` return new boards and never
    modify the receiver, so a failed operation cannot leave partial state behind.
    """

    __slots__ = ("size", "_grid", "_placements")

    def __init__(
        self,
        size: int = DEFAULT_BOARD_SIZE,
        grid: Optional[np.ndarray] = None,
        placements: Optional[Mapping[int, Placement]] = None,
    ) -> None:
        self.size = int(size)
        if grid is None:
            grid = np.full((self.size, self.size), EMPTY_CODE, dtype=np.int32)
        else:
            grid = np.array(grid, dtype=np.int32)
            if grid.shape != (self.size, self.size):
                raise ValueError(f"grid dimensions {grid.shape} do not match board size {self.size}")
        grid.setflags(write=False)
        self._grid = grid
        self._placements: Mapping[int, Placement] = MappingProxyType(dict(placements or {}))

    # ---------- Construction ----------
    @classmethod
    def with_obstacles(cls, size: int, obstacles: Iterable[Coordinate]) -> "Board":
        grid = np.full((size, size), EMPTY_CODE, dtype=np.int32)
        for row, col in obstacles:
            if not (0 <= row < size and 0 <= col < size):
                raise LevelFormatError(f"obstacle ({row}, {col}) lies outside a {size}x{size} board")
            grid[row, col] = OBSTACLE_CODE
        return cls(size, grid)

    @classmethod
    def for_level(cls, level) -> "Board":
        """Fresh board for a level attempt: obstacles set, everything else empty."""
        return cls.with_obstacles(level.board_size, level.obstacles)

    reset = for_level

    # ---------- Queries ----------
    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def cell(self, coord: Coordinate) -> CellState:
        row, col = coord
        if not self.is_inside(row, col):
            raise IndexError(f"cell ({row}, {col}) is outside the board")
        code = int(self._grid[row, col])
        if code == EMPTY_CODE:
            return EMPTY
        if code == OBSTACLE_CODE:
            return OBSTACLE
        return OccupiedBy(code)

    def is_empty(self, coord: Coordinate) -> bool:
        row, col = coord
        return self.is_inside(row, col) and int(self._grid[row, col]) == EMPTY_CODE

    @property
    def obstacles(self) -> List[Coordinate]:
        return [(int(r), int(c)) for r, c in zip(*np.nonzero(self._grid == OBSTACLE_CODE))]

    @property
    def placements(self) -> Mapping[int, Placement]:
        return self._placements

    @property
    def placed_ids(self) -> List[int]:
        return sorted(self._placements)

    @property
    def empty_count(self) -> int:
        return int(np.count_nonzero(self._grid == EMPTY_CODE))

    def placement(self, piece_id: int) -> Placement:
        try:
            return self._placements[piece_id]
        except KeyError:
            raise PieceNotFoundError(f"piece {piece_id} is not on the board") from None

    def cells_of(self, piece_id: int) -> List[Coordinate]:
        return [(int(r), int(c)) for r, c in zip(*np.nonzero(self._grid == piece_id))]

    def _targets(self, shape: Shape, anchor: Coordinate) -> List[Coordinate]:
        row, col = anchor
        return [(row + r, col + c) for r, c in shape.cells()]

    def is_placeable(self, shape: Shape, anchor: Coordinate) -> bool:
        """True only if every filled cell lands inside the board on an empty cell."""
        for row, col in self._targets(shape, anchor):
            if not self.is_inside(row, col):
                return False
            if self._grid[row, col] != EMPTY_CODE:
                return False
        return True

    def preview(self, shape: Shape, anchor: Coordinate) -> Preview:
        cells = tuple((r, c) for r, c in self._targets(shape, anchor) if self.is_inside(r, c))
        return Preview(cells=cells, placeable=self.is_placeable(shape, anchor))

    def valid_anchors(self, shape: Shape) -> List[Coordinate]:
        """All anchors where `shape` can be placed, in row-major order."""
        anchors: List[Coordinate] = []
        for row in range(self.size - shape.height + 1):
            for col in range(self.size - shape.width + 1):
                if self.is_placeable(shape, (row, col)):
                    anchors.append((row, col))
        return anchors

    # ---------- Transitions ----------
    def place(self, shape: Shape, anchor: Coordinate, piece_id: int) -> "Board":
        """Return a new board with the shape's cells occupied by `piece_id`.

        Raises PlacementError when the anchor is illegal or the id is already
        on the board; callers are expected to check `is_placeable` first.
        """
        if piece_id < 0:
            raise PlacementError(f"piece id must be non-negative, got {piece_id}")
        if piece_id in self._placements:
            raise PlacementError(f"piece {piece_id} is already on the board")
        if not self.is_placeable(shape, anchor):
            raise PlacementError(f"piece {piece_id} cannot be placed at {anchor}")
        grid = self._grid.copy()
        for row, col in self._targets(shape, anchor):
            grid[row, col] = piece_id
        box, (dr, dc) = shape.trimmed()
        placements: Dict[int, Placement] = dict(self._placements)
        placements[piece_id] = Placement(piece_id, (anchor[0] + dr, anchor[1] + dc), box)
        logger.debug("placed piece %d at %s", piece_id, anchor)
        return Board(self.size, grid, placements)

    def remove_piece(self, piece_id: int) -> Tuple["Board", Shape, Coordinate]:
        """Clear every cell of `piece_id`.

        Returns the new board, the bounding-box shape rebuilt from the cleared
        cells and that box's top-left anchor.
        """
        mask = self._grid == piece_id
        rows = np.flatnonzero(mask.any(axis=1))
        if rows.size == 0:
            raise PieceNotFoundError(f"piece {piece_id} is not on the board")
        cols = np.flatnonzero(mask.any(axis=0))
        r0, r1 = int(rows[0]), int(rows[-1])
        c0, c1 = int(cols[0]), int(cols[-1])
        shape = Shape(mask[r0 : r1 + 1, c0 : c1 + 1])
        grid = self._grid.copy()
        grid[mask] = EMPTY_CODE
        placements = {pid: p for pid, p in self._placements.items() if pid != piece_id}
        logger.debug("removed piece %d from %s", piece_id, (r0, c0))
        return Board(self.size, grid, placements), shape, (r0, c0)

    # ---------- Export ----------
    def to_array(self) -> np.ndarray:
        """The backing array itself, read-only, not a copy (EMPTY_CODE, OBSTACLE_CODE or piece id)."""
        return self._grid

    def to_rows(self) -> List[List[CellState]]:
        return [[self.cell((r, c)) for c in range(self.size)] for r in range(self.size)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.size == other.size
            and bool(np.array_equal(self._grid, other._grid))
            and dict(self._placements) == dict(other._placements)
        )

    def __hash__(self) -> int:
        return hash((self.size, self._grid.tobytes()))

    def __repr__(self) -> str:
        return f"Board(size={self.size}, placed={self.placed_ids}, empty={self.empty_count})"
