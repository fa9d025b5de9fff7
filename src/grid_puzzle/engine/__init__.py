"""Puzzle engine for Grid Puzzle Master.

Exports the rules layer the presentation code talks to:
- Shape: immutable piece matrix with rotation
- Board: cell-state grid with placement legality
- Inventory / Piece: pieces not yet placed
- LevelCatalog / Level: validated level templates
- PuzzleSession: intents in, snapshots and outcome events out
"""

from .errors import (
    PuzzleError,
    ShapeError,
    LevelFormatError,
    PlacementError,
    PieceNotFoundError,
    InvalidSelectionError,
    DuplicatePieceError,
)
from .shapes import Coordinate, Shape, rotate_clockwise, apply_rotations
from .board import (
    Board,
    CellState,
    Empty,
    Obstacle,
    OccupiedBy,
    Placement,
    Preview,
    EMPTY,
    OBSTACLE,
    EMPTY_CODE,
    OBSTACLE_CODE,
)
from .inventory import Inventory, Piece
from .levels import DEFAULT_LEVELS, Level, LevelCatalog, parse_level
from .session import (
    Event,
    GameConfig,
    Outcome,
    PuzzleSession,
    Result,
    RotationPolicy,
    SessionState,
    is_complete,
)

__all__ = [
    "PuzzleError",
    "ShapeError",
    "LevelFormatError",
    "PlacementError",
    "PieceNotFoundError",
    "InvalidSelectionError",
    "DuplicatePieceError",
    "Coordinate",
    "Shape",
    "rotate_clockwise",
    "apply_rotations",
    "Board",
    "CellState",
    "Empty",
    "Obstacle",
    "OccupiedBy",
    "Placement",
    "Preview",
    "EMPTY",
    "OBSTACLE",
    "EMPTY_CODE",
    "OBSTACLE_CODE",
    "Inventory",
    "Piece",
    "DEFAULT_LEVELS",
    "Level",
    "LevelCatalog",
    "parse_level",
    "Event",
    "GameConfig",
    "Outcome",
    "PuzzleSession",
    "Result",
    "RotationPolicy",
    "SessionState",
    "is_complete",
]
