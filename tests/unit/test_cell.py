"""
Unit tests for Cell class.

Tests cell state management, open/flag behavior, and observation codes.
"""
import pytest
from minefield import Cell, CellState


# ============================================================================
# Cell Initialization Tests
# ============================================================================

class TestCellInitialization:
    """Test cell creation and default values."""

    def test_default_cell_is_not_mine(self) -> None:
        """New cell should not be a mine by default."""
        cell = Cell()
        assert cell.is_mine is False

    def test_default_cell_is_hidden(self) -> None:
        """New cell should be hidden by default."""
        cell = Cell()
        assert cell.state == CellState.HIDDEN
        assert cell.is_hidden is True
        assert cell.opened is False
        assert cell.flagged is False

    def test_default_cell_is_not_exploded(self) -> None:
        assert Cell().exploded is False

    def test_cell_with_adjacent_mines(self) -> None:
        """Can create a cell with adjacent mine count."""
        cell = Cell(adjacent_mines=5)
        assert cell.adjacent_mines == 5


# ============================================================================
# Cell Open Tests
# ============================================================================

class TestCellOpen:
    """Test cell open behavior."""

    def test_open_hidden_cell_returns_true(self, hidden_cell: Cell) -> None:
        assert hidden_cell.open() is True
        assert hidden_cell.opened is True

    def test_open_twice_returns_false(self, hidden_cell: Cell) -> None:
        """Opening is monotonic: a second open does nothing."""
        hidden_cell.open()
        assert hidden_cell.open() is False
        assert hidden_cell.state == CellState.OPENED

    def test_open_flagged_cell_returns_false(self, hidden_cell: Cell) -> None:
        """Cannot open a flagged cell."""
        hidden_cell.toggle_flag()
        assert hidden_cell.open() is False
        assert hidden_cell.flagged is True


# ============================================================================
# Cell Flag Tests
# ============================================================================

class TestCellFlag:
    """Test cell flagging behavior."""

    def test_flag_hidden_cell(self, hidden_cell: Cell) -> None:
        assert hidden_cell.toggle_flag() is True
        assert hidden_cell.state == CellState.FLAGGED

    def test_unflag_returns_to_hidden(self, hidden_cell: Cell) -> None:
        """Unflagging a cell should return it to hidden."""
        hidden_cell.toggle_flag()
        hidden_cell.toggle_flag()
        assert hidden_cell.is_hidden is True

    def test_flag_opened_cell_returns_false(self, hidden_cell: Cell) -> None:
        """Opened cells ignore flag toggles."""
        hidden_cell.open()
        assert hidden_cell.toggle_flag() is False
        assert hidden_cell.opened is True


# ============================================================================
# Cell Observation Tests
# ============================================================================

class TestCellObservation:
    """Test observation codes used by renderers."""

    def test_hidden_cell_is_negative_one(self, hidden_cell: Cell) -> None:
        assert hidden_cell.to_observation() == -1

    def test_flagged_cell_is_negative_two(self, hidden_cell: Cell) -> None:
        hidden_cell.toggle_flag()
        assert hidden_cell.to_observation() == -2

    @pytest.mark.parametrize("count", range(0, 9))
    def test_opened_cell_shows_adjacent_count(self, count: int) -> None:
        cell = Cell(adjacent_mines=count)
        cell.open()
        assert cell.to_observation() == count

    def test_hidden_mine_stays_hidden(self, mine_cell: Cell) -> None:
        assert mine_cell.to_observation() == -1

    def test_mine_shown_when_revealing_mines(self, mine_cell: Cell) -> None:
        assert mine_cell.to_observation(reveal_mines=True) == 9

    def test_flagged_mine_keeps_flag_when_revealing(self, mine_cell: Cell) -> None:
        mine_cell.toggle_flag()
        assert mine_cell.to_observation(reveal_mines=True) == -2

    def test_exploded_mine_is_ten(self, mine_cell: Cell) -> None:
        mine_cell.exploded = True
        assert mine_cell.to_observation() == 10
