"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path
from typing import List

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import Board, BoardConfig, Cell, ChangeEvent


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def default_board() -> Board:
    """Create a seeded 9x9 board with 10 mines."""
    return Board(BoardConfig(9, 9, 10 / 81, seed=1234))


@pytest.fixture
def empty_board() -> Board:
    """Create a 5x5 board with no mines for cascade testing."""
    return Board(BoardConfig(5, 5, 0.0))


@pytest.fixture
def center_mine_board() -> Board:
    """3x3 board with a single mine in the middle."""
    return Board.from_layout(3, 3, [(1, 1)])


@pytest.fixture
def wall_board() -> Board:
    """
    5x5 board with a full column of mines splitting it in two.

        0 1 2 3 4
      0 0 2 @ 2 0
      1 0 3 @ 3 0
      2 0 3 @ 3 0
      3 0 3 @ 3 0
      4 0 2 @ 2 0
    """
    return Board.from_layout(5, 5, [(row, 2) for row in range(5)])


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(is_mine=True)


# ============================================================================
# Event Fixtures
# ============================================================================

class Recorder:
    """Collects delivered events."""

    def __init__(self) -> None:
        self.events: List[ChangeEvent] = []

    def __call__(self, event: ChangeEvent) -> None:
        self.events.append(event)

    def values(self):
        return [(e.old_value, e.new_value) for e in self.events]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_recorder():
    return Recorder
