from __future__ import annotations

"""
Level catalog: board size, obstacles and starting pieces per level.

Level data arrives as plain mappings (built in below, or loaded from JSON) and
is validated here before any board is built from it, so a malformed level
fails loudly at load time instead of corrupting a game.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .board import DEFAULT_BOARD_SIZE
from .errors import LevelFormatError, ShapeError
from .inventory import Piece
from .shapes import Coordinate, Shape


logger = logging.getLogger(__name__)


DEFAULT_LEVELS: Dict[int, Dict[str, Any]] = {
    1: {
        "description": "Welcome! Place all pieces to complete the level.",
        "obstacles": [[2, 2], [2, 7], [7, 2], [7, 7]],
        "pieces": [
            {"id": 1, "shape": [[1, 1, 0], [0, 1, 0], [0, 1, 0]]},
            {"id": 2, "shape": [[1, 1, 1], [1, 0, 0], [0, 0, 0]]},
            {"id": 3, "shape": [[0, 1, 0], [1, 1, 1], [0, 0, 0]]},
        ],
    },
    2: {
        "description": "More challenging! Navigate around the obstacles.",
        "obstacles": [
            [1, 4], [1, 5], [1, 6],
            [4, 1], [4, 2], [4, 8], [4, 9],
            [8, 3], [8, 4], [8, 5], [8, 6],
        ],
        "pieces": [
            {"id": 1, "shape": [[1, 1, 0], [1, 1, 0], [0, 0, 0]]},
            {"id": 2, "shape": [[0, 1, 1], [1, 1, 0], [0, 0, 0]]},
            {"id": 3, "shape": [[1, 0, 0], [1, 1, 1], [0, 0, 0]]},
            {"id": 4, "shape": [[1, 1, 1], [0, 1, 0], [0, 1, 0]]},
        ],
    },
    3: {
        "description": "Expert level! Complex patterns and tight spaces.",
        "obstacles": [
            [0, 4], [0, 5],
            [2, 2], [2, 3], [2, 6], [2, 7],
            [4, 0], [4, 9],
            [5, 0], [5, 9],
            [7, 2], [7, 3], [7, 6], [7, 7],
            [9, 4], [9, 5],
        ],
        "pieces": [
            {"id": 1, "shape": [[1, 1, 1], [1, 0, 0], [1, 0, 0]]},
            {"id": 2, "shape": [[0, 1, 0], [1, 1, 1], [0, 1, 0]]},
            {"id": 3, "shape": [[1, 1, 0], [0, 1, 1], [0, 0, 1]]},
            {"id": 4, "shape": [[1, 0, 1], [1, 1, 1], [0, 0, 0]]},
            {"id": 5, "shape": [[1, 1, 0], [1, 0, 0], [1, 0, 0]]},
        ],
    },
}


@dataclass(frozen=True)
class Level:
    """Immutable level template; every attempt starts from a copy of it."""

    number: int
    description: str
    board_size: int
    obstacles: Tuple[Coordinate, ...]
    pieces: Tuple[Piece, ...]

    @property
    def piece_ids(self) -> List[int]:
        return [p.id for p in self.pieces]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "board_size": self.board_size,
            "obstacles": [list(o) for o in self.obstacles],
            "pieces": [{"id": p.id, "shape": p.shape.to_rows()} for p in self.pieces],
        }


def _parse_coordinate(raw: Any, where: str) -> Coordinate:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise LevelFormatError(f"{where}: expected a [row, col] pair, got {raw!r}")
    row, col = raw
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (row, col)):
        raise LevelFormatError(f"{where}: coordinates must be integers, got {raw!r}")
    return int(row), int(col)


def parse_level(number: int, data: Mapping[str, Any], board_size: int = DEFAULT_BOARD_SIZE) -> Level:
    """Validate one level mapping and build its template.

    Raises LevelFormatError for out-of-bounds or duplicate obstacles,
    malformed shapes, duplicate or negative piece ids, and shapes that cannot
    fit on the board in any orientation.
    """
    where = f"level {number}"
    size = data.get("board_size", board_size)
    if not isinstance(size, int) or isinstance(size, bool) or size < 1:
        raise LevelFormatError(f"{where}: board_size must be a positive integer, got {size!r}")

    raw_obstacles = data.get("obstacles", [])
    if not isinstance(raw_obstacles, (list, tuple)):
        raise LevelFormatError(f"{where}: obstacles must be a list of [row, col] pairs, got {raw_obstacles!r}")
    obstacles: List[Coordinate] = []
    seen_obstacles = set()
    for i, raw in enumerate(raw_obstacles):
        row, col = _parse_coordinate(raw, f"{where} obstacle {i}")
        if not (0 <= row < size and 0 <= col < size):
            raise LevelFormatError(f"{where}: obstacle ({row}, {col}) lies outside a {size}x{size} board")
        if (row, col) in seen_obstacles:
            raise LevelFormatError(f"{where}: obstacle ({row}, {col}) listed twice")
        seen_obstacles.add((row, col))
        obstacles.append((row, col))

    raw_pieces = data.get("pieces")
    if raw_pieces is not None and not isinstance(raw_pieces, (list, tuple)):
        raise LevelFormatError(f"{where}: pieces must be a list, got {raw_pieces!r}")
    if not raw_pieces:
        raise LevelFormatError(f"{where}: level defines no pieces")
    pieces: List[Piece] = []
    seen_ids = set()
    for i, raw in enumerate(raw_pieces):
        if not isinstance(raw, Mapping) or "id" not in raw or "shape" not in raw:
            raise LevelFormatError(f"{where} piece {i}: expected a mapping with 'id' and 'shape'")
        piece_id = raw["id"]
        if not isinstance(piece_id, int) or isinstance(piece_id, bool) or piece_id < 0:
            raise LevelFormatError(f"{where} piece {i}: id must be a non-negative integer, got {piece_id!r}")
        if piece_id in seen_ids:
            raise LevelFormatError(f"{where}: piece id {piece_id} used twice")
        seen_ids.add(piece_id)
        try:
            shape = Shape.from_rows(raw["shape"])
        except (ShapeError, TypeError) as exc:
            raise LevelFormatError(f"{where} piece {piece_id}: {exc}") from exc
        box, _ = shape.trimmed()
        if box.height > size or box.width > size:
            raise LevelFormatError(f"{where} piece {piece_id}: shape {box.dimensions} does not fit a {size}x{size} board")
        pieces.append(Piece(piece_id, shape))

    return Level(
        number=int(number),
        description=str(data.get("description", "")),
        board_size=size,
        obstacles=tuple(obstacles),
        pieces=tuple(pieces),
    )


class LevelCatalog:
    """Ordered collection of validated levels keyed by level number."""

    def __init__(self, levels: Mapping[int, Level]) -> None:
        if not levels:
            raise LevelFormatError("catalog contains no levels")
        self._levels: Dict[int, Level] = {n: levels[n] for n in sorted(levels)}

    @classmethod
    def from_mapping(cls, data: Mapping[Any, Mapping[str, Any]], board_size: int = DEFAULT_BOARD_SIZE) -> "LevelCatalog":
        levels: Dict[int, Level] = {}
        for key, raw in data.items():
            try:
                number = int(key)
            except (TypeError, ValueError):
                raise LevelFormatError(f"level key {key!r} is not a level number") from None
            if number in levels:
                raise LevelFormatError(f"level {number} defined twice")
            if not isinstance(raw, Mapping):
                raise LevelFormatError(f"level {number}: expected a mapping, got {type(raw).__name__}")
            levels[number] = parse_level(number, raw, board_size)
        logger.debug("loaded %d levels", len(levels))
        return cls(levels)

    @classmethod
    def from_json(cls, path: Union[str, os.PathLike], board_size: int = DEFAULT_BOARD_SIZE) -> "LevelCatalog":
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise LevelFormatError(f"{path}: invalid JSON ({exc})") from exc
        if not isinstance(data, Mapping):
            raise LevelFormatError(f"{path}: top level must be an object keyed by level number")
        return cls.from_mapping(data, board_size)

    @classmethod
    def default(cls) -> "LevelCatalog":
        return cls.from_mapping(DEFAULT_LEVELS)

    @property
    def numbers(self) -> List[int]:
        return list(self._levels)

    @property
    def first_number(self) -> int:
        return next(iter(self._levels))

    def get(self, number: int) -> Level:
        try:
            return self._levels[number]
        except KeyError:
            raise LevelFormatError(f"no level {number} in catalog") from None

    def next_number(self, number: int) -> Optional[int]:
        """Level that follows `number`, or None when it is the last one."""
        later = [n for n in self._levels if n > number]
        return later[0] if later else None

    def __contains__(self, number: object) -> bool:
        return number in self._levels

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self) -> Iterator[Level]:
        return iter(self._levels.values())
