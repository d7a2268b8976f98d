"""
Cell module for the minefield engine.

Represents the published state of a single cell: whether it is closed,
flagged or opened, and what it holds (a mine or a neighbour count).
"""
from dataclasses import dataclass, replace
from enum import Enum, auto


# ============================================================================
# Constants
# ============================================================================

# Classic encoding of "this cell is a mine" in a neighbour-count field.
MINE = -1


class CellStatus(Enum):
    """Possible visual states of a cell."""

    CLOSED = auto()
    FLAGGED = auto()
    OPENED = auto()


# ============================================================================
# Cell State
# ============================================================================

@dataclass(frozen=True)
class CellState:
    """
    Immutable state of one cell in the minefield grid.

    The mine flag and neighbour count are fixed when the field is
    generated; only ``status`` changes as the player flags and opens
    cells, and each transition produces a new value.

    Attributes:
        status: Closed, flagged or opened.
        is_mine: Whether this cell holds a mine.
        adjacent_mines: Mines in the Moore neighbourhood (0-8). Always 0
            for a mine cell, whose neighbours are never counted.
    """

    status: CellStatus = CellStatus.CLOSED
    is_mine: bool = False
    adjacent_mines: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.adjacent_mines <= 8:
            raise ValueError(
                f"Adjacent mine count must be in 0-8, got {self.adjacent_mines}"
            )
        if self.is_mine and self.adjacent_mines:
            raise ValueError("A mine cell carries no neighbour count")

    # ========================================================================
    # Constructors
    # ========================================================================

    @classmethod
    def from_count(cls, status: CellStatus, count: int) -> "CellState":
        """
        Build a cell from the sentinel encoding.

        Args:
            status: Visual state of the cell.
            count: ``MINE`` for a mine, otherwise the neighbour count.
        """
        if count == MINE:
            return cls(status, is_mine=True)
        return cls(status, adjacent_mines=count)

    @classmethod
    def closed_with(cls, count: int) -> "CellState":
        return cls.from_count(CellStatus.CLOSED, count)

    @classmethod
    def flagged_with(cls, count: int) -> "CellState":
        return cls.from_count(CellStatus.FLAGGED, count)

    @classmethod
    def opened_with(cls, count: int) -> "CellState":
        return cls.from_count(CellStatus.OPENED, count)

    # ========================================================================
    # Transitions
    # ========================================================================

    def closed(self) -> "CellState":
        """Same cell, closed."""
        return replace(self, status=CellStatus.CLOSED)

    def flagged(self) -> "CellState":
        """Same cell, flagged."""
        return replace(self, status=CellStatus.FLAGGED)

    def opened(self) -> "CellState":
        """Same cell, opened."""
        return replace(self, status=CellStatus.OPENED)

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def count(self) -> int:
        """Neighbour count, or ``MINE`` if this cell is a mine."""
        return MINE if self.is_mine else self.adjacent_mines

    @property
    def is_closed(self) -> bool:
        """Check if cell is closed."""
        return self.status == CellStatus.CLOSED

    @property
    def is_flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.status == CellStatus.FLAGGED

    @property
    def is_opened(self) -> bool:
        """Check if cell is opened."""
        return self.status == CellStatus.OPENED

    def to_observation(self) -> int:
        """
        Convert cell to an observation value for automated players.

        Returns:
            -1: Closed cell
            -2: Flagged cell
            0-8: Opened cell with adjacent mine count
            9: Opened mine
        """
        if self.status == CellStatus.CLOSED:
            return -1
        if self.status == CellStatus.FLAGGED:
            return -2
        if self.is_mine:
            return 9
        return self.adjacent_mines
