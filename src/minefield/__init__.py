"""
Minefield game module.

Provides the minefield engine, its observable state, the play clock and
the front ends that drive it.
"""
from .cell import MINE, CellState, CellStatus
from .engine import (
    Coordinate,
    Difficulty,
    FieldConfig,
    GameState,
    MinefieldEngine,
    OutOfBoundsError,
)
from .observable import Observable, ObservableView
from .clock import Dispatcher, PlayClock
from .console import GameSession, PlayConfig, render_board
from .environment import MinefieldEnv

__all__ = [
    "MINE",
    "CellState",
    "CellStatus",
    "Coordinate",
    "Difficulty",
    "FieldConfig",
    "GameState",
    "MinefieldEngine",
    "OutOfBoundsError",
    "Observable",
    "ObservableView",
    "Dispatcher",
    "PlayClock",
    "GameSession",
    "PlayConfig",
    "render_board",
    "MinefieldEnv",
]
