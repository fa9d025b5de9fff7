from __future__ import annotations


class PuzzleError(Exception):
    """Base class for engine errors."""


class ShapeError(PuzzleError, ValueError):
    """Shape matrix is empty, jagged or has no filled cell."""


class LevelFormatError(PuzzleError, ValueError):
    """Level data cannot be turned into a consistent board."""


class PlacementError(PuzzleError):
    """Shape cannot be placed at the requested anchor."""


class PieceNotFoundError(PuzzleError, KeyError):
    """No board cell carries the requested piece id."""


class InvalidSelectionError(PuzzleError, IndexError):
    """Inventory index out of range."""


class DuplicatePieceError(PuzzleError, ValueError):
    """Piece id already held by the inventory or the board."""
