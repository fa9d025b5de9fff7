from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .board import Board, Obstacle, OccupiedBy
from .levels import LevelCatalog
from .session import GameConfig, PuzzleSession, RotationPolicy
from .shapes import Shape


def format_board(board: Board) -> str:
    """Text rendering: '#' obstacle, '.' empty, piece id (last digit) otherwise."""
    lines: List[str] = []
    for row in board.to_rows():
        chars = []
        for cell in row:
            if isinstance(cell, Obstacle):
                chars.append("#")
            elif isinstance(cell, OccupiedBy):
                chars.append(str(cell.piece_id % 10))
            else:
                chars.append(".")
        lines.append("".join(chars))
    return "\n".join(lines)


def format_shape(shape: Shape) -> str:
    return "\n".join("".join("█" if cell else "·" for cell in row) for row in shape.to_rows())


def print_board(board: Board) -> None:
    print(format_board(board))


def print_shape(shape: Shape) -> None:
    print(format_shape(shape))


def run_demo(session: PuzzleSession) -> None:
    """Greedy walk through the current level: each piece goes to its first legal anchor."""
    level = session.level
    print(f"=== Level {level.number} ===")
    print(level.description)
    print_board(session.board)
    while not session.is_complete:
        session.select_piece(0)
        piece = session.selected_piece
        anchors = session.board.valid_anchors(session.effective_shape)
        if not anchors:
            print(f"\nPiece {piece.id} does not fit anywhere")
            break
        print(f"\nPiece {piece.id}:")
        print_shape(session.effective_shape)
        result = session.attempt_placement(anchors[0])
        for event in result.events:
            print(f"{event.outcome.value}: {event.message}")
        print_board(session.board)
    print(f"\nPieces left: {session.pieces_left}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Print a text walkthrough of a grid puzzle level")
    p.add_argument("--levels", type=str, default=None, help="JSON level catalog (defaults to built-in levels)")
    p.add_argument("--level", type=int, default=None, help="Level number to start from")
    p.add_argument("--rotation", choices=[r.value for r in RotationPolicy], default=RotationPolicy.SELECTED.value)
    p.add_argument("--verbose", action="store_true", help="Log engine transitions")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    catalog = LevelCatalog.from_json(args.levels) if args.levels else LevelCatalog.default()
    config = GameConfig(rotation_policy=RotationPolicy(args.rotation), start_level=args.level)
    run_demo(PuzzleSession(catalog, config))


if __name__ == "__main__":  # pragma: no cover
    main()
