from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .board import Board, OccupiedBy, Obstacle, Preview, DEFAULT_BOARD_SIZE
from .errors import InvalidSelectionError
from .inventory import Inventory, Piece
from .levels import DEFAULT_LEVELS, Level, LevelCatalog
from .shapes import Coordinate, Shape, apply_rotations


logger = logging.getLogger(__name__)


class RotationPolicy(str, Enum):
    """What a rotate intent turns."""
    SELECTED = "selected"  # only the selected piece, via the session rotation counter
    ALL = "all"  # every inventory piece, rewriting stored shapes


@dataclass
class GameConfig:
    """Configuration for a puzzle session"""
    board_size: int = DEFAULT_BOARD_SIZE
    rotation_policy: RotationPolicy = RotationPolicy.SELECTED
    start_level: Optional[int] = None


class Outcome(str, Enum):
    SELECTED = "selected"
    ROTATED = "rotated"
    PLACED = "placed"
    PLACEMENT_REJECTED = "placement_rejected"
    REMOVED = "removed"
    NO_OP = "no_op"
    RESET = "reset"
    LEVEL_COMPLETE = "level_complete"
    LEVEL_ADVANCED = "level_advanced"
    LEVEL_ADVANCE_UNAVAILABLE = "level_advance_unavailable"


@dataclass(frozen=True)
class Event:
    """One outcome of a session call, with a message a UI may show as a notification."""
    outcome: Outcome
    piece_id: Optional[int] = None
    message: str = ""


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a level attempt. Replaced wholesale by every successful operation."""
    level_number: int
    board: Board
    inventory: Inventory
    selected_index: Optional[int] = None
    rotation: int = 0

    @property
    def is_complete(self) -> bool:
        return is_complete(self.inventory)

    @property
    def selected_piece(self) -> Optional[Piece]:
        if self.selected_index is None:
            return None
        return self.inventory[self.selected_index]

    @property
    def effective_shape(self) -> Optional[Shape]:
        piece = self.selected_piece
        if piece is None:
            return None
        return apply_rotations(piece.shape, self.rotation)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level_number,
            "board": self.board.to_array().tolist(),
            "obstacles": [list(o) for o in self.board.obstacles],
            "placements": {
                pid: {"anchor": list(p.anchor), "shape": p.shape.to_rows()}
                for pid, p in self.board.placements.items()
            },
            "inventory": [{"id": p.id, "shape": p.shape.to_rows()} for p in self.inventory],
            "selected_index": self.selected_index,
            "rotation": self.rotation,
            "complete": self.is_complete,
        }


@dataclass(frozen=True)
class Result:
    state: SessionState
    events: Tuple[Event, ...]

    @property
    def outcome(self) -> Outcome:
        """Final outcome of the call (e.g. LEVEL_COMPLETE after PLACED)."""
        return self.events[-1].outcome

    @property
    def outcomes(self) -> Tuple[Outcome, ...]:
        return tuple(e.outcome for e in self.events)


def is_complete(inventory: Inventory) -> bool:
    return len(inventory) == 0


class PuzzleSession:
    """Rules engine for one player working through the level catalog.

    All intents go through this class. Each call returns a Result holding the
    new snapshot and the outcome events; expected failures (bad index, illegal
    placement, nothing to advance to) are reported as outcomes, never raised.
    """

    def __init__(self, catalog: Optional[LevelCatalog] = None, config: Optional[GameConfig] = None) -> None:
        self.config = config or GameConfig()
        self.catalog = catalog or LevelCatalog.from_mapping(DEFAULT_LEVELS, self.config.board_size)
        number = self.config.start_level if self.config.start_level is not None else self.catalog.first_number
        self._state = self._fresh_state(self.catalog.get(number))

    # ---------- Accessors ----------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def board(self) -> Board:
        return self._state.board

    @property
    def inventory(self) -> Inventory:
        return self._state.inventory

    @property
    def selected_index(self) -> Optional[int]:
        return self._state.selected_index

    @property
    def selected_piece(self) -> Optional[Piece]:
        return self._state.selected_piece

    @property
    def rotation(self) -> int:
        return self._state.rotation

    @property
    def effective_shape(self) -> Optional[Shape]:
        return self._state.effective_shape

    @property
    def level(self) -> Level:
        return self.catalog.get(self._state.level_number)

    @property
    def pieces_left(self) -> int:
        return len(self._state.inventory)

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    @property
    def has_next_level(self) -> bool:
        return self.catalog.next_number(self._state.level_number) is not None

    @property
    def is_stuck(self) -> bool:
        """True when pieces remain but none fits anywhere in any rotation."""
        if self.is_complete:
            return False
        board = self._state.board
        for piece in self._state.inventory:
            for shape in piece.shape.rotations():
                if board.valid_anchors(shape):
                    return False
        return True

    def preview(self, anchor: Coordinate) -> Optional[Preview]:
        shape = self.effective_shape
        if shape is None:
            return None
        return self._state.board.preview(shape, anchor)

    # ---------- Helpers ----------
    @staticmethod
    def _fresh_state(level: Level) -> SessionState:
        return SessionState(
            level_number=level.number,
            board=Board.for_level(level),
            inventory=Inventory(level.pieces),
        )

    def _commit(self, state: SessionState, *events: Event) -> Result:
        self._state = state
        for event in events:
            logger.debug("level %d: %s %s", state.level_number, event.outcome.value, event.message)
        return Result(state, tuple(events))

    def _unchanged(self, outcome: Outcome, message: str, piece_id: Optional[int] = None) -> Result:
        return self._commit(self._state, Event(outcome, piece_id, message))

    # ---------- Intents ----------
    def select_piece(self, index: int) -> Result:
        state = self._state
        try:
            state.inventory.select_index(index)
        except InvalidSelectionError as exc:
            return self._unchanged(Outcome.NO_OP, str(exc))
        piece = state.inventory[index]
        new_state = replace(state, selected_index=index, rotation=0)
        return self._commit(new_state, Event(Outcome.SELECTED, piece.id, f"Selected piece {piece.id}"))

    def rotate_selected(self) -> Result:
        state = self._state
        if state.selected_index is None:
            return self._unchanged(Outcome.NO_OP, "No piece selected")
        new_state = replace(state, rotation=(state.rotation + 1) % 4)
        piece = new_state.selected_piece
        return self._commit(
            new_state,
            Event(Outcome.ROTATED, piece.id, f"Piece {piece.id} rotated to {new_state.rotation * 90} degrees"),
        )

    def rotate_all(self) -> Result:
        state = self._state
        if state.inventory.is_empty:
            return self._unchanged(Outcome.NO_OP, "No pieces to rotate")
        new_state = replace(state, inventory=state.inventory.rotate_all())
        return self._commit(new_state, Event(Outcome.ROTATED, None, "All pieces rotated"))

    def rotate(self) -> Result:
        if self.config.rotation_policy == RotationPolicy.ALL:
            return self.rotate_all()
        return self.rotate_selected()

    def attempt_placement(self, anchor: Coordinate) -> Result:
        state = self._state
        piece = state.selected_piece
        if piece is None:
            return self._unchanged(Outcome.NO_OP, "No piece selected")
        shape = state.effective_shape
        if not state.board.is_placeable(shape, anchor):
            return self._unchanged(
                Outcome.PLACEMENT_REJECTED, "This piece cannot be placed here.", piece.id
            )
        board = state.board.place(shape, anchor, piece.id)
        inventory, _ = state.inventory.remove_at(state.selected_index)
        new_state = replace(state, board=board, inventory=inventory, selected_index=None, rotation=0)
        events = [Event(Outcome.PLACED, piece.id, f"Placed piece {piece.id} at {tuple(anchor)}")]
        # Win condition is checked only once the inventory has shrunk.
        if new_state.is_complete:
            logger.info("level %d complete", new_state.level_number)
            events.append(
                Event(Outcome.LEVEL_COMPLETE, None, f"You've successfully completed level {new_state.level_number}!")
            )
        return self._commit(new_state, *events)

    def attempt_removal(self, coord: Coordinate) -> Result:
        state = self._state
        row, col = coord
        if not state.board.is_inside(row, col):
            return self._unchanged(Outcome.NO_OP, f"{tuple(coord)} is outside the board")
        cell = state.board.cell(coord)
        if not isinstance(cell, OccupiedBy):
            return self._unchanged(Outcome.NO_OP, f"No piece at {tuple(coord)}")
        board, shape, _ = state.board.remove_piece(cell.piece_id)
        inventory = state.inventory.append(Piece(cell.piece_id, shape))
        new_state = replace(
            state, board=board, inventory=inventory, selected_index=len(inventory) - 1, rotation=0
        )
        return self._commit(
            new_state, Event(Outcome.REMOVED, cell.piece_id, f"Piece {cell.piece_id} returned to inventory")
        )

    def click(self, coord: Coordinate) -> Result:
        """Board click: pick up a placed piece, place onto an empty cell, ignore obstacles."""
        row, col = coord
        if not self._state.board.is_inside(row, col):
            return self._unchanged(Outcome.NO_OP, f"{tuple(coord)} is outside the board")
        cell = self._state.board.cell(coord)
        if isinstance(cell, OccupiedBy):
            return self.attempt_removal(coord)
        if isinstance(cell, Obstacle):
            return self._unchanged(Outcome.NO_OP, "Obstacle")
        return self.attempt_placement(coord)

    def reset_level(self) -> Result:
        level = self.level
        return self._commit(self._fresh_state(level), Event(Outcome.RESET, None, f"Level {level.number} reset"))

    def advance_level(self) -> Result:
        state = self._state
        if not state.is_complete:
            return self._unchanged(Outcome.LEVEL_ADVANCE_UNAVAILABLE, "Place every piece first")
        number = self.catalog.next_number(state.level_number)
        if number is None:
            return self._unchanged(Outcome.LEVEL_ADVANCE_UNAVAILABLE, "No further levels")
        logger.info("advancing to level %d", number)
        return self._commit(
            self._fresh_state(self.catalog.get(number)),
            Event(Outcome.LEVEL_ADVANCED, None, f"Welcome to level {number}!"),
        )
