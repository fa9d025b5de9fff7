from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from grid_puzzle.engine import (
    EMPTY_CODE,
    OBSTACLE_CODE,
    GameConfig,
    LevelCatalog,
    Outcome,
    PuzzleSession,
    apply_rotations,
)


# Observation cell codes
OBS_EMPTY = 0
OBS_OBSTACLE = 1
OBS_FILLED = 2

# rgb_array rendering
RENDER_CELL_PX = 12
EMPTY_COLOR = (30, 30, 36)
OBSTACLE_COLOR = (90, 90, 90)
PIECE_PALETTE = np.array(
    [
        (231, 76, 60),
        (52, 152, 219),
        (46, 204, 113),
        (241, 196, 15),
        (155, 89, 182),
        (230, 126, 34),
    ],
    dtype=np.uint8,
)


def _compute_action_mask(session: PuzzleSession, max_pieces: int) -> np.ndarray:
    size = session.board.size
    mask = np.zeros((max_pieces, size, size, 4), dtype=np.bool_)
    for piece_idx, piece in enumerate(session.inventory.pieces[:max_pieces]):
        for r in range(4):
            shape = apply_rotations(piece.shape, r)
            for row, col in session.board.valid_anchors(shape):
                mask[piece_idx, row, col, r] = True
    return mask


class GridPuzzleEnv(gym.Env):
    """One level of the puzzle as a gymnasium environment.

    Action: (piece_idx, row, col, rotation). The action selects the piece,
    rotates it `rotation` quarter turns and attempts the placement. The
    episode terminates when the level is complete or no piece fits anywhere.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, catalog: Optional[LevelCatalog] = None, config: Optional[GameConfig] = None,
                 render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 step_penalty: float = 0.0,
                 stuck_penalty: float = -1.0,
                 max_episode_steps: int = 500) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.session = PuzzleSession(catalog, self.config)
        self.catalog = self.session.catalog
        self.render_mode = render_mode

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.step_penalty = float(step_penalty)
        self.stuck_penalty = float(stuck_penalty)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights: Dict[str, float] = {
            "cells": 0.1,       # reward per cell covered
            "complete": 10.0,   # bonus for finishing the level
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        levels = list(self.catalog)
        size = levels[0].board_size
        if any(level.board_size != size for level in levels):
            raise ValueError("all levels must share one board size")
        self.size = size
        self.max_pieces = max(len(level.pieces) for level in levels)
        self.piece_extent = max(max(p.shape.dimensions) for level in levels for p in level.pieces)

        k = self.max_pieces
        s = self.piece_extent
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=2, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=0, high=1, shape=(k, s, s), dtype=np.int8),
                "pieces_remaining": spaces.Discrete(k + 1),
            }
        )
        self.action_space = spaces.MultiDiscrete((k, size, size, 4))

        self._steps = 0

    # ---------- Helpers ----------
    def _get_obs(self) -> Dict[str, Any]:
        board = self.session.board.to_array()
        grid = np.full(board.shape, OBS_FILLED, dtype=np.int8)
        grid[board == EMPTY_CODE] = OBS_EMPTY
        grid[board == OBSTACLE_CODE] = OBS_OBSTACLE
        pieces = np.zeros((self.max_pieces, self.piece_extent, self.piece_extent), dtype=np.int8)
        for i, piece in enumerate(self.session.inventory.pieces[: self.max_pieces]):
            h, w = piece.shape.dimensions
            pieces[i, :h, :w] = piece.shape.array
        return {
            "grid": grid,
            "pieces": pieces,
            "pieces_remaining": len(self.session.inventory),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.session, self.max_pieces),
            "level": self.session.state.level_number,
            "pieces_left": self.session.pieces_left,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.session, self.max_pieces)

    # ---------- Gym API ----------
    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        level = (options or {}).get("level", self.config.start_level)
        if level is None:
            level = self.catalog.first_number
        config = GameConfig(
            board_size=self.config.board_size,
            rotation_policy=self.config.rotation_policy,
            start_level=level,
        )
        self.session = PuzzleSession(self.catalog, config)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        piece_idx, row, col, r = map(int, action)

        reward_components: Dict[str, float] = {"step": self.step_penalty}
        outcomes: Tuple[Outcome, ...] = ()

        selected = self.session.select_piece(piece_idx)
        if selected.outcome == Outcome.SELECTED:
            cells = self.session.selected_piece.cell_count
            for _ in range(r % 4):
                self.session.rotate_selected()
            result = self.session.attempt_placement((row, col))
            outcomes = result.outcomes
            if Outcome.PLACED in outcomes:
                reward_components["cells"] = self.reward_weights["cells"] * float(cells)
            else:
                reward_components["invalid"] = self.invalid_action_penalty
            if Outcome.LEVEL_COMPLETE in outcomes:
                reward_components["complete"] = self.reward_weights["complete"]
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        self._steps += 1
        stuck = self.session.is_stuck
        terminated = self.session.is_complete or stuck
        truncated = not terminated and self._steps >= self.max_episode_steps
        if stuck:
            reward_components["stuck"] = self.stuck_penalty

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        info["outcomes"] = [o.value for o in outcomes]
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = self.session.board.to_array()
        # piece ids index the palette cyclically
        colors = PIECE_PALETTE[np.maximum(board, 0) % len(PIECE_PALETTE)]
        colors[board == EMPTY_CODE] = EMPTY_COLOR
        colors[board == OBSTACLE_CODE] = OBSTACLE_COLOR
        return np.repeat(np.repeat(colors, RENDER_CELL_PX, axis=0), RENDER_CELL_PX, axis=1)

    def close(self) -> None:
        pass
