from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicatePieceError, InvalidSelectionError
from .shapes import Shape, apply_rotations, rotate_clockwise


@dataclass(frozen=True)
class Piece:
    """Unplaced piece. The id is fixed for a level attempt; rotation swaps the shape."""

    id: int
    shape: Shape

    def rotated(self, n: int = 1) -> "Piece":
        return replace(self, shape=apply_rotations(self.shape, n))

    @property
    def cell_count(self) -> int:
        return self.shape.cell_count


class Inventory:
    """Ordered, immutable collection of pieces waiting to be placed.

    Indices are positions, not identities: `remove_at` shifts every later
    piece down by one.
    """

    __slots__ = ("_pieces",)

    def __init__(self, pieces: Iterable[Piece] = ()) -> None:
        items = tuple(pieces)
        seen = set()
        for piece in items:
            if piece.id in seen:
                raise DuplicatePieceError(f"piece {piece.id} appears twice in the inventory")
            seen.add(piece.id)
        self._pieces: Tuple[Piece, ...] = items

    @property
    def pieces(self) -> Tuple[Piece, ...]:
        return self._pieces

    @property
    def ids(self) -> List[int]:
        return [p.id for p in self._pieces]

    @property
    def is_empty(self) -> bool:
        return len(self._pieces) == 0

    def select_index(self, index: int) -> int:
        if not 0 <= index < len(self._pieces):
            raise InvalidSelectionError(f"index {index} outside inventory of {len(self._pieces)} pieces")
        return index

    def index_of(self, piece_id: int) -> Optional[int]:
        for i, piece in enumerate(self._pieces):
            if piece.id == piece_id:
                return i
        return None

    def remove_at(self, index: int) -> Tuple["Inventory", Piece]:
        self.select_index(index)
        piece = self._pieces[index]
        return Inventory(self._pieces[:index] + self._pieces[index + 1 :]), piece

    def append(self, piece: Piece) -> "Inventory":
        if self.index_of(piece.id) is not None:
            raise DuplicatePieceError(f"piece {piece.id} is already in the inventory")
        return Inventory(self._pieces + (piece,))

    def rotate_all(self) -> "Inventory":
        return Inventory(replace(p, shape=rotate_clockwise(p.shape)) for p in self._pieces)

    def __len__(self) -> int:
        return len(self._pieces)

    def __iter__(self) -> Iterator[Piece]:
        return iter(self._pieces)

    def __getitem__(self, index: int) -> Piece:
        return self._pieces[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Inventory):
            return NotImplemented
        return self._pieces == other._pieces

    def __hash__(self) -> int:
        return hash(self._pieces)

    def __repr__(self) -> str:
        return f"Inventory(ids={self.ids})"
