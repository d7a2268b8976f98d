"""
Text front end for the minefield engine.

Translates published cell states into glyphs, formats the play clock and
runs an interactive session on stdin/stdout.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, TextIO, Tuple

from .cell import CellState
from .clock import Dispatcher, PlayClock
from .engine import (
    Coordinate,
    Difficulty,
    GameState,
    MinefieldEngine,
    OutOfBoundsError,
)


logger = logging.getLogger(__name__)

Command = Tuple[str, Optional[Coordinate]]


# ============================================================================
# Configuration
# ============================================================================

# Every glyph in a style occupies the same number of terminal columns.
GLYPHS = {
    "ascii": {
        "closed": ".",
        "flag": "F",
        "mine": "*",
        "empty": " ",
        "digits": "012345678",
        "width": 1,
    },
    "emoji": {
        "closed": "\u2b1b",
        "flag": "\U0001f6a9",
        "mine": "\U0001f4a3",
        "empty": "\u2b1c",
        # Fullwidth digits match the two-column emoji.
        "digits": "\uff10\uff11\uff12\uff13\uff14\uff15\uff16\uff17\uff18",
        "width": 2,
    },
}


@dataclass
class PlayConfig:
    """Settings for an interactive session."""

    difficulty: Difficulty = Difficulty.BEGINNER
    seed: Optional[int] = None
    tick_interval: float = 1.0
    style: str = "ascii"

    def __post_init__(self) -> None:
        if self.style not in GLYPHS:
            raise ValueError(
                f"Unknown glyph style {self.style!r} (choose from "
                f"{', '.join(sorted(GLYPHS))})"
            )
        if self.tick_interval <= 0:
            raise ValueError("Tick interval must be positive")


# ============================================================================
# Rendering
# ============================================================================

def cell_glyph(cell: CellState, style: str = "ascii") -> str:
    """Glyph for one cell."""
    glyphs = GLYPHS[style]
    if cell.is_closed:
        return glyphs["closed"]
    if cell.is_flagged:
        return glyphs["flag"]
    if cell.is_mine:
        return glyphs["mine"]
    if cell.adjacent_mines == 0:
        return glyphs["empty"]
    return glyphs["digits"][cell.adjacent_mines]


def render_board(
    grid: Sequence[Sequence[CellState]], style: str = "ascii"
) -> str:
    """
    Render a grid snapshot as text with row and column indices.

    Args:
        grid: Rows of cell states, as published by the engine.
        style: Key into ``GLYPHS``.
    """
    width = len(grid[0]) if grid else 0
    index_width = len(str(max(len(grid), width) - 1)) if grid else 1
    cell_width = GLYPHS[style]["width"]
    header = " " * index_width + " " + " ".join(
        str(col % 10).ljust(cell_width) for col in range(width)
    )
    lines = [header.rstrip()]
    for row_index, row in enumerate(grid):
        cells = " ".join(cell_glyph(cell, style) for cell in row)
        lines.append(f"{row_index:>{index_width}} {cells}")
    return "\n".join(lines)


def format_play_time(seconds: float) -> str:
    """Format elapsed seconds as ``Time elapsed: HH:MM:SS``."""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"Time elapsed: {hours:02d}:{minutes:02d}:{secs:02d}"


def outcome_message(state: GameState) -> Optional[str]:
    """Banner for a finished game, or None while playing."""
    if state == GameState.LOST:
        return "KABOOM! Too bad, you lose."
    if state == GameState.WON:
        return "YOU WIN! Woohoo!"
    return None


# ============================================================================
# Input
# ============================================================================

_ACTIONS = {
    "f": "flag",
    "flag": "flag",
    "o": "open",
    "open": "open",
}


def parse_command(text: str) -> Command:
    """
    Parse one line of player input.

    Accepted forms are ``f ROW COL`` / ``flag ROW COL``, ``o ROW COL`` /
    ``open ROW COL`` and ``q`` / ``quit``.

    Raises:
        ValueError: If the line is not a valid command.
    """
    parts = text.replace(",", " ").split()
    if not parts:
        raise ValueError("Empty command")
    verb = parts[0].lower()
    if verb in ("q", "quit", "exit"):
        return "quit", None
    if verb not in _ACTIONS:
        raise ValueError(f"Unknown command {parts[0]!r}")
    if len(parts) != 3:
        raise ValueError(f"Usage: {_ACTIONS[verb]} ROW COL")
    try:
        row, col = int(parts[1]), int(parts[2])
    except ValueError:
        raise ValueError("ROW and COL must be integers") from None
    return _ACTIONS[verb], (row, col)


# ============================================================================
# Session
# ============================================================================

class GameSession:
    """
    One game played through text commands.

    Observes the engine the way a view would: every grid change marks the
    board for redraw, a terminal game state prints the outcome and stops
    the clock, and each tick updates the time label. Commands and ticks
    both run on the thread that calls :meth:`execute` / :meth:`play`.
    """

    def __init__(
        self,
        config: Optional[PlayConfig] = None,
        output: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config or PlayConfig()
        self.output = output or print
        self.engine = MinefieldEngine(
            self.config.difficulty, seed=self.config.seed
        )
        self.dispatcher = Dispatcher()
        self.clock = PlayClock(
            self.engine,
            post=self.dispatcher.post,
            interval=self.config.tick_interval,
        )
        self.time_label = format_play_time(0)
        self.needs_redraw = True
        self.messages: List[str] = []

        self.engine.cell_states.observe(self._on_cells_changed)
        self.engine.game_state.observe(self._on_game_state_changed)
        self.engine.play_time.observe(self._on_play_time_changed)

    # ========================================================================
    # Observers
    # ========================================================================

    def _on_cells_changed(self, _grid) -> None:
        self.needs_redraw = True

    def _on_game_state_changed(self, state: GameState) -> None:
        self.clock.stop()
        message = outcome_message(state)
        if message:
            self.messages.append(message)

    def _on_play_time_changed(self, seconds: int) -> None:
        self.time_label = format_play_time(seconds)

    # ========================================================================
    # Commands
    # ========================================================================

    def execute(self, command: Command) -> bool:
        """
        Apply one parsed command after any pending ticks.

        Returns:
            Whether the command changed the game.
        """
        self.dispatcher.drain()
        action, coordinate = command
        if action == "flag":
            return self.engine.flag_cell(coordinate)
        if action == "open":
            return self.engine.open_cell(coordinate)
        raise ValueError(f"Cannot execute {action!r}")

    def render(self) -> str:
        """Current screen: time label, board and any outcome banner."""
        self.needs_redraw = False
        board = render_board(self.engine.cell_states.value, self.config.style)
        lines = [self.time_label, board]
        lines.extend(self.messages)
        return "\n".join(lines)

    def play(
        self, lines: Iterable[str], prompt: Optional[TextIO] = None
    ) -> GameState:
        """
        Run the session over an iterable of input lines.

        Stops at end of input, on ``quit``, or when the game ends.
        """
        self.clock.start()
        self.output(self.render())
        try:
            self._prompt(prompt)
            for line in lines:
                if not self._handle_line(line):
                    break
                self._prompt(prompt)
        finally:
            self.clock.stop()
            self.clock.join(self.config.tick_interval)
        logger.info(
            "Session ended: %s after %ds",
            self.engine.game_state.value.name,
            self.engine.play_time.value,
        )
        return self.engine.game_state.value

    def _handle_line(self, line: str) -> bool:
        """Apply one input line. Returns False when the session should end."""
        try:
            command = parse_command(line)
        except ValueError as error:
            self.output(str(error))
            return True
        if command[0] == "quit":
            return False
        try:
            self.execute(command)
        except OutOfBoundsError as error:
            self.output(str(error))
            return True
        if self.needs_redraw:
            self.output(self.render())
        return self.engine.is_playing

    @staticmethod
    def _prompt(prompt: Optional[TextIO]) -> None:
        if prompt is not None:
            prompt.write("> ")
            prompt.flush()
