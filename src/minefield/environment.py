"""
Gymnasium environment wrapper for the minefield engine.

Lets automated players drive an engine through the standard RL interface,
using the same flag and open commands a human player issues.
"""
import logging
from typing import Any, Dict, Optional, SupportsFloat, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .console import render_board
from .engine import Coordinate, Difficulty, MinefieldEngine


logger = logging.getLogger(__name__)


# ============================================================================
# Minefield Environment
# ============================================================================

class MinefieldEnv(gym.Env):
    """
    Gymnasium environment for the minefield game.

    Observation:
        2D array where:
        - -1 = closed cell
        - -2 = flagged cell
        - 0-8 = opened cell with adjacent mine count
        - 9 = opened mine

    Actions:
        Discrete action space of size 2 * dimension**2.
        Action i < dimension**2 opens cell (i // dimension, i % dimension);
        larger actions toggle the flag on cell i - dimension**2.

    Rewards:
        - +1 for opening a safe cell
        - +10 for winning the game
        - -10 for opening a mine
        - 0 for toggling a flag
        - -0.1 for an action that changed nothing
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.BEGINNER,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the environment.

        Args:
            difficulty: Field size for every episode.
            render_mode: How to render the environment.
        """
        super().__init__()

        self.difficulty = difficulty
        self.render_mode = render_mode
        self.engine = MinefieldEngine(difficulty)

        dimension = difficulty.dimension
        self._cells = dimension * dimension

        self.observation_space = spaces.Box(
            low=-2,
            high=9,
            shape=(dimension, dimension),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(2 * self._cells)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Start a new episode on a freshly generated field.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        engine_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.engine = MinefieldEngine(self.difficulty, seed=engine_seed)
        self._steps = 0

        return self.engine.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Open or flag action index (see class docstring).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action {action!r}")
        self._steps += 1

        is_flag, position = self._decode_action(int(action))
        if is_flag:
            reward = 0.0 if self.engine.flag_cell(position) else -0.1
            if self.engine.is_won:
                reward = 10.0
        else:
            reward = self._open_reward(position)

        observation = self.engine.get_observation()
        terminated = not self.engine.is_playing
        if terminated:
            logger.debug(
                "Episode finished after %d steps: %s",
                self._steps,
                self.engine.game_state.value.name,
            )
        return observation, reward, terminated, False, self._get_info()

    def _decode_action(self, action: int) -> Tuple[bool, Coordinate]:
        """Split an action into (is_flag, (row, col))."""
        is_flag = action >= self._cells
        index = action - self._cells if is_flag else action
        dimension = self.difficulty.dimension
        return is_flag, (index // dimension, index % dimension)

    def _open_reward(self, position: Coordinate) -> float:
        """Open a cell and score the result."""
        if not self.engine.open_cell(position):
            return -0.1
        if self.engine.is_lost:
            return -10.0
        if self.engine.is_won:
            return 10.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        grid = self.engine.cell_states.value
        opened = sum(cell.is_opened for row in grid for cell in row)
        flagged = sum(cell.is_flagged for row in grid for cell in row)

        return {
            "steps": self._steps,
            "opened": opened,
            "flagged": flagged,
            "mines": self.difficulty.num_mines,
            "game_state": self.engine.game_state.value.name,
            "play_time": self.engine.play_time.value,
        }

    def render(self) -> Optional[str]:
        """Render the current field."""
        text = render_board(self.engine.cell_states.value)
        if self.render_mode == "ansi":
            return text
        if self.render_mode == "human":
            print(text)
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of actions that would change the game.

        Returns:
            Boolean array where True = valid action.
        """
        mask = np.zeros(self.action_space.n, dtype=bool)
        if not self.engine.is_playing:
            return mask
        dimension = self.difficulty.dimension
        for row, col in self.engine.get_valid_actions():
            mask[row * dimension + col] = True
        # Closed and flagged cells can both be toggled.
        mask[self._cells:] = self.engine.get_observation().flatten() < 0
        return mask
