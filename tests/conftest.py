"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import CellState, Difficulty, MinefieldEngine


# Ten mines across the bottom two rows of a beginner field.
BOTTOM_ROW_MINES = [(7, col) for col in range(8)] + [(6, 0), (6, 7)]


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def beginner_engine() -> MinefieldEngine:
    """Create a seeded beginner engine (8x8, 10 mines)."""
    return MinefieldEngine(Difficulty.BEGINNER, seed=1234)


@pytest.fixture
def intermediate_engine() -> MinefieldEngine:
    """Create a seeded intermediate engine (16x16, 40 mines)."""
    return MinefieldEngine(Difficulty.INTERMEDIATE, seed=1234)


@pytest.fixture
def expert_engine() -> MinefieldEngine:
    """Create a seeded expert engine (32x32, 99 mines)."""
    return MinefieldEngine(Difficulty.EXPERT, seed=1234)


@pytest.fixture
def bottom_mined_engine() -> MinefieldEngine:
    """Beginner engine with every mine in the last two rows."""
    return MinefieldEngine(Difficulty.BEGINNER, mines=BOTTOM_ROW_MINES)


@pytest.fixture
def safe_cell(beginner_engine: MinefieldEngine):
    """Coordinate of some non-mine cell on the beginner engine."""
    for row in range(beginner_engine.dimension):
        for col in range(beginner_engine.dimension):
            if (row, col) not in beginner_engine.mine_positions:
                return row, col
    raise AssertionError("no safe cell")


@pytest.fixture
def mine_cell(beginner_engine: MinefieldEngine):
    """Coordinate of some mine on the beginner engine."""
    return sorted(beginner_engine.mine_positions)[0]


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def closed_cell() -> CellState:
    """Create a closed cell with no neighbouring mines."""
    return CellState()


@pytest.fixture
def closed_mine() -> CellState:
    """Create a closed cell containing a mine."""
    return CellState(is_mine=True)


@pytest.fixture
def numbered_cell() -> CellState:
    """Create an opened cell with three adjacent mines."""
    return CellState(adjacent_mines=3).opened()
