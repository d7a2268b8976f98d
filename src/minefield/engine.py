"""
Minefield engine.

Implements the square minefield with mine placement, neighbour counting,
flagging, flood-fill opening and win/loss determination. All state the
presentation layer needs is published through observables.
"""
import logging
import random
from dataclasses import InitVar, dataclass, field
from enum import Enum, auto
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from .cell import CellState
from .observable import Observable, ObservableView


logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]
Grid = Tuple[Tuple[CellState, ...], ...]


# ============================================================================
# Constants
# ============================================================================

class GameState(Enum):
    """Possible states of the game."""

    PLAYING = auto()
    WON = auto()
    LOST = auto()


@dataclass(frozen=True)
class FieldConfig:
    """
    Size of a square minefield.

    Attributes:
        dimension: Number of rows (and columns).
        num_mines: Total mines to place.
    """

    dimension: int
    num_mines: int

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.dimension < 1:
            raise ValueError("Field dimension must be positive")
        if self.num_mines < 0:
            raise ValueError("Number of mines cannot be negative")
        max_mines = self.dimension * self.dimension - 1
        if self.num_mines > max_mines:
            raise ValueError(f"Too many mines (max {max_mines})")


class Difficulty(Enum):
    """Preset field sizes."""

    BEGINNER = FieldConfig(8, 10)
    INTERMEDIATE = FieldConfig(16, 40)
    EXPERT = FieldConfig(32, 99)

    @property
    def dimension(self) -> int:
        return self.value.dimension

    @property
    def num_mines(self) -> int:
        return self.value.num_mines

    @classmethod
    def from_name(cls, name: str) -> "Difficulty":
        """Look up a difficulty by case-insensitive name."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            choices = ", ".join(member.name.lower() for member in cls)
            raise ValueError(
                f"Unknown difficulty {name!r} (choose from {choices})"
            ) from None


class OutOfBoundsError(IndexError):
    """A coordinate lies outside the minefield."""

    def __init__(self, coordinate: Coordinate, dimension: int) -> None:
        super().__init__(
            f"Coordinate {coordinate!r} is outside the "
            f"{dimension}x{dimension} minefield"
        )
        self.coordinate = coordinate
        self.dimension = dimension


# ============================================================================
# Engine
# ============================================================================

@dataclass(eq=False)
class MinefieldEngine:
    """
    Minesweeper game engine.

    Owns the grid of cells and the two coordinate sets that decide the
    win. The grid, game state and play time are published as observables;
    the first two can only change through :meth:`flag_cell` and
    :meth:`open_cell`, while play time is advanced by an external clock.

    The game is won when every mine is flagged and no other cell is.

    Args:
        difficulty: Preset field size.
        seed: Seed for mine placement; ``None`` for a fresh random field.
        mines: Explicit mine layout, overriding random placement. Must hold
            exactly ``difficulty.num_mines`` distinct coordinates.
    """

    difficulty: Difficulty = Difficulty.BEGINNER
    seed: InitVar[Optional[int]] = None
    mines: InitVar[Optional[Iterable[Coordinate]]] = None
    _grid: List[List[CellState]] = field(
        default_factory=list, init=False, repr=False
    )
    _mines: FrozenSet[Coordinate] = field(
        default_factory=frozenset, init=False, repr=False
    )
    _unswept_mines: Set[Coordinate] = field(
        default_factory=set, init=False, repr=False
    )
    _misflagged_cells: Set[Coordinate] = field(
        default_factory=set, init=False, repr=False
    )

    def __post_init__(
        self,
        seed: Optional[int],
        mines: Optional[Iterable[Coordinate]],
    ) -> None:
        """Generate the field. The engine is fully playable on return."""
        self._init_grid()
        if mines is None:
            positions = self._random_mine_positions(seed)
        else:
            positions = self._validate_mine_layout(mines)
        self._place_mines(positions)
        self._calculate_adjacent_mines()

        self._cell_states: Observable[Grid] = Observable(self._snapshot())
        self._game_state: Observable[GameState] = Observable(GameState.PLAYING)
        self.cell_states: ObservableView[Grid] = self._cell_states.read_only()
        self.game_state: ObservableView[GameState] = self._game_state.read_only()
        self.play_time: Observable[int] = Observable(0)

        logger.debug(
            "Generated %s field: %dx%d with %d mines",
            self.difficulty.name.lower(),
            self.dimension,
            self.dimension,
            len(self._mines),
        )

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _init_grid(self) -> None:
        """Create a grid of closed, empty cells."""
        self._grid = [
            [CellState() for _ in range(self.dimension)]
            for _ in range(self.dimension)
        ]

    def _random_mine_positions(self, seed: Optional[int]) -> List[Coordinate]:
        """
        Pick mine positions with every cell equally likely.

        Shuffles the full coordinate list and takes a prefix, so placement
        runs in linear time no matter how dense the field is.
        """
        positions = self._all_positions()
        random.Random(seed).shuffle(positions)
        return positions[: self.difficulty.num_mines]

    def _validate_mine_layout(
        self, mines: Iterable[Coordinate]
    ) -> List[Coordinate]:
        """Check an explicit layout against the difficulty."""
        positions = [self._check_bounds(coordinate) for coordinate in mines]
        if len(set(positions)) != len(positions):
            raise ValueError("Mine layout contains duplicate coordinates")
        if len(positions) != self.difficulty.num_mines:
            raise ValueError(
                f"{self.difficulty.name.lower()} needs "
                f"{self.difficulty.num_mines} mines, got {len(positions)}"
            )
        return positions

    def _place_mines(self, positions: Sequence[Coordinate]) -> None:
        """Turn the given cells into closed mines."""
        for row, col in positions:
            self._grid[row][col] = CellState(is_mine=True)
        self._mines = frozenset(positions)
        self._unswept_mines = set(positions)

    def _calculate_adjacent_mines(self) -> None:
        """Calculate adjacent mine counts for all non-mine cells."""
        for row in range(self.dimension):
            for col in range(self.dimension):
                if not self._grid[row][col].is_mine:
                    count = self._count_adjacent_mines(row, col)
                    self._grid[row][col] = CellState(adjacent_mines=count)

    def _count_adjacent_mines(self, row: int, col: int) -> int:
        """Count mines adjacent to a specific cell."""
        count = 0
        for neighbor_row, neighbor_col in self._get_neighbors(row, col):
            if self._grid[neighbor_row][neighbor_col].is_mine:
                count += 1
        return count

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def _all_positions(self) -> List[Coordinate]:
        return [
            (row, col)
            for row in range(self.dimension)
            for col in range(self.dimension)
        ]

    def _get_neighbors(self, row: int, col: int) -> List[Coordinate]:
        """
        Get valid neighbouring cell positions (Moore neighbourhood).

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            List of (row, col) tuples for in-bounds neighbours.
        """
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self._is_valid_position(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def _is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within field bounds."""
        return 0 <= row < self.dimension and 0 <= col < self.dimension

    def _check_bounds(self, coordinate: Coordinate) -> Coordinate:
        """Return ``coordinate`` as a tuple, or raise OutOfBoundsError."""
        row, col = coordinate
        if not self._is_valid_position(row, col):
            raise OutOfBoundsError((row, col), self.dimension)
        return row, col

    # ========================================================================
    # Publishing
    # ========================================================================

    def _snapshot(self) -> Grid:
        return tuple(tuple(row) for row in self._grid)

    def _set_cell(self, row: int, col: int, state: CellState) -> None:
        """Write one cell and publish the new grid."""
        self._grid[row][col] = state
        rows = list(self._cell_states.value)
        rows[row] = tuple(self._grid[row])
        self._cell_states.value = tuple(rows)

    # ========================================================================
    # Game Actions (Mid-level)
    # ========================================================================

    def flag_cell(self, coordinate: Coordinate) -> bool:
        """
        Toggle the flag on a cell.

        Args:
            coordinate: (row, col) of the cell.

        Returns:
            True if the flag was toggled, False if the game is over or the
            cell is already open.

        Raises:
            OutOfBoundsError: If the coordinate is outside the field.
        """
        row, col = self._check_bounds(coordinate)
        if not self.is_playing:
            return False

        cell = self._grid[row][col]
        position = (row, col)
        # Sets change before the grid is published so observers never see
        # them out of step.
        if cell.is_closed:
            if cell.is_mine:
                assert position in self._unswept_mines
                self._unswept_mines.remove(position)
            else:
                assert position not in self._misflagged_cells
                self._misflagged_cells.add(position)
            self._set_cell(row, col, cell.flagged())
        elif cell.is_flagged:
            if cell.is_mine:
                assert position not in self._unswept_mines
                self._unswept_mines.add(position)
            else:
                assert position in self._misflagged_cells
                self._misflagged_cells.remove(position)
            self._set_cell(row, col, cell.closed())
        else:
            return False

        self._check_win_condition()
        return True

    def open_cell(self, coordinate: Coordinate) -> bool:
        """
        Open a closed cell.

        Opening a mine loses the game and reveals the whole field. Opening
        a cell with no neighbouring mines opens its neighbours too, and so
        on until the region is bounded by numbered cells or the edge.

        Args:
            coordinate: (row, col) of the cell.

        Returns:
            True if the cell was opened, False if the game is over or the
            cell is flagged or already open.

        Raises:
            OutOfBoundsError: If the coordinate is outside the field.
        """
        row, col = self._check_bounds(coordinate)
        if not self.is_playing:
            return False

        cell = self._grid[row][col]
        if not cell.is_closed:
            return False

        self._set_cell(row, col, cell.opened())
        if cell.is_mine:
            self._explode((row, col))
        elif cell.adjacent_mines == 0:
            self._open_neighbors(row, col)
            self._check_win_condition()
        return True

    def _open_neighbors(self, row: int, col: int) -> None:
        """Flood-open the zero-count region around an opened empty cell."""
        pending = [(row, col)]
        opened = 0
        while pending:
            current_row, current_col = pending.pop()
            for neighbor_row, neighbor_col in self._get_neighbors(
                current_row, current_col
            ):
                neighbor = self._grid[neighbor_row][neighbor_col]
                if not neighbor.is_closed:
                    continue
                # A zero cell never borders a mine.
                assert not neighbor.is_mine
                self._set_cell(neighbor_row, neighbor_col, neighbor.opened())
                opened += 1
                if neighbor.adjacent_mines == 0:
                    pending.append((neighbor_row, neighbor_col))
        logger.debug("Cascade from (%d, %d) opened %d cells", row, col, opened)

    def _explode(self, position: Coordinate) -> None:
        """Lose the game and reveal the field."""
        logger.info("Mine opened at %s, game lost", position)
        self._game_state.value = GameState.LOST
        self._open_all_cells()

    def _check_win_condition(self) -> None:
        """Win once every mine is flagged and no other cell is."""
        if self._unswept_mines or self._misflagged_cells:
            return
        logger.info("All %d mines flagged, game won", len(self._mines))
        self._game_state.value = GameState.WON
        self._open_all_cells()

    def _open_all_cells(self) -> None:
        """Open every closed or flagged cell."""
        for row in range(self.dimension):
            for col in range(self.dimension):
                cell = self._grid[row][col]
                if not cell.is_opened:
                    self._set_cell(row, col, cell.opened())

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    @property
    def dimension(self) -> int:
        return self.difficulty.dimension

    @property
    def num_mines(self) -> int:
        return self.difficulty.num_mines

    @property
    def is_playing(self) -> bool:
        """Check if game is still in progress."""
        return self._game_state.value == GameState.PLAYING

    @property
    def is_won(self) -> bool:
        """Check if game was won."""
        return self._game_state.value == GameState.WON

    @property
    def is_lost(self) -> bool:
        """Check if game was lost."""
        return self._game_state.value == GameState.LOST

    @property
    def mine_positions(self) -> FrozenSet[Coordinate]:
        """Where the mines are. Fixed at generation."""
        return self._mines

    @property
    def unswept_mines(self) -> FrozenSet[Coordinate]:
        """Mines not yet flagged."""
        return frozenset(self._unswept_mines)

    @property
    def misflagged_cells(self) -> FrozenSet[Coordinate]:
        """Non-mine cells currently flagged."""
        return frozenset(self._misflagged_cells)

    def cell_state(self, coordinate: Coordinate) -> CellState:
        """
        Get the state of one cell.

        Raises:
            OutOfBoundsError: If the coordinate is outside the field.
        """
        row, col = self._check_bounds(coordinate)
        return self._grid[row][col]

    def get_observation(self) -> np.ndarray:
        """
        Get the grid as a numpy array for automated players.

        Returns:
            2D int8 array where:
                -1 = closed
                -2 = flagged
                0-8 = opened with adjacent count
                9 = opened mine
        """
        obs = np.zeros((self.dimension, self.dimension), dtype=np.int8)
        for row in range(self.dimension):
            for col in range(self.dimension):
                obs[row, col] = self._grid[row][col].to_observation()
        return obs

    def get_valid_actions(self) -> List[Coordinate]:
        """
        Get the cells that can still be opened.

        Returns:
            (row, col) positions of closed cells; empty once the game ends.
        """
        if not self.is_playing:
            return []
        return [
            (row, col)
            for row, col in self._all_positions()
            if self._grid[row][col].is_closed
        ]
