"""Gymnasium environment for Grid Puzzle Master."""

from __future__ import annotations

from gymnasium.envs.registration import register

# One level per episode, (piece_idx, row, col, rotation) actions
register(
    id="GridPuzzle-10x10-v0",
    entry_point="grid_puzzle.env.puzzle_env:GridPuzzleEnv",
)

__all__ = ["GridPuzzle-10x10-v0"]
