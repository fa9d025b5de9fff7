from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

import numpy as np

from .errors import ShapeError


Coordinate = Tuple[int, int]


class Shape:
    """Immutable boolean matrix of the cells a piece occupies.

    The matrix is stored as a read-only numpy array, so a Shape can be shared
    freely between pieces, boards and snapshots. Equality is cell-for-cell,
    including dimensions.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: np.ndarray) -> None:
        arr = np.array(cells, dtype=bool)
        if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ShapeError(f"shape must be a non-empty 2-D matrix, got dimensions {arr.shape}")
        if not arr.any():
            raise ShapeError("shape must contain at least one filled cell")
        arr.setflags(write=False)
        self._cells = arr

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Shape":
        """Build a shape from a 0/1 matrix such as level data provides."""
        if len(rows) == 0:
            raise ShapeError("shape has no rows")
        width = len(rows[0])
        for r, row in enumerate(rows):
            if len(row) != width:
                raise ShapeError(f"row {r} has {len(row)} cells, expected {width}")
            for c, value in enumerate(row):
                if value not in (0, 1):
                    raise ShapeError(f"cell ({r}, {c}) must be 0 or 1, got {value!r}")
        return cls(np.array(rows, dtype=bool).reshape(len(rows), width))

    @property
    def array(self) -> np.ndarray:
        return self._cells

    @property
    def height(self) -> int:
        return int(self._cells.shape[0])

    @property
    def width(self) -> int:
        return int(self._cells.shape[1])

    @property
    def dimensions(self) -> Tuple[int, int]:
        return self.height, self.width

    @property
    def cell_count(self) -> int:
        return int(np.count_nonzero(self._cells))

    def cells(self) -> Iterator[Coordinate]:
        """Yield (row, col) offsets of filled cells in row-major order."""
        for r, c in zip(*np.nonzero(self._cells)):
            yield int(r), int(c)

    def is_filled(self, row: int, col: int) -> bool:
        return bool(self._cells[row, col])

    def rotated_clockwise(self) -> "Shape":
        return rotate_clockwise(self)

    def rotated(self, n: int) -> "Shape":
        return apply_rotations(self, n)

    def rotations(self) -> List["Shape"]:
        """All distinct orientations, starting with this one."""
        result: List[Shape] = []
        current = self
        for _ in range(4):
            if current not in result:
                result.append(current)
            current = rotate_clockwise(current)
        return result

    def trimmed(self) -> Tuple["Shape", Coordinate]:
        """Minimal bounding-box shape and the (row, col) offset it was cut at."""
        rows = np.flatnonzero(self._cells.any(axis=1))
        cols = np.flatnonzero(self._cells.any(axis=0))
        r0, r1 = int(rows[0]), int(rows[-1])
        c0, c1 = int(cols[0]), int(cols[-1])
        return Shape(self._cells[r0 : r1 + 1, c0 : c1 + 1]), (r0, c0)

    def to_rows(self) -> List[List[int]]:
        return self._cells.astype(np.int8).tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return self._cells.shape == other._cells.shape and bool(np.array_equal(self._cells, other._cells))

    def __hash__(self) -> int:
        return hash((self._cells.shape, self._cells.tobytes()))

    def __repr__(self) -> str:
        return f"Shape({self.to_rows()!r})"


def rotate_clockwise(shape: Shape) -> Shape:
    """Rotate 90 degrees clockwise; an R x C shape becomes C x R.

    out[i][j] = in[R-1-j][i]. The browser version of the game turned pieces
    the other way (new row i = old column C-1-i, i.e. counter-clockwise);
    every orientation is reachable either way.
    """
    return Shape(np.rot90(shape.array, 1, axes=(1, 0)))


def apply_rotations(shape: Shape, n: int) -> Shape:
    """Apply `rotate_clockwise` n mod 4 times."""
    result = shape
    for _ in range(n % 4):
        result = rotate_clockwise(result)
    return result
