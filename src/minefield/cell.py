"""
Cell module for the minefield engine.

Represents individual grid positions with their state
(hidden/opened/flagged) and content (mine/adjacent count).
"""
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """Possible visible states of a cell."""

    HIDDEN = auto()
    OPENED = auto()
    FLAGGED = auto()


# Observation codes shared with renderers.
OBS_HIDDEN = -1
OBS_FLAGGED = -2
OBS_MINE = 9
OBS_EXPLODED = 10


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    A single position in the minefield grid.

    Attributes:
        is_mine: Whether this cell holds a mine.
        adjacent_mines: Mines among the up-to-8 neighbors (0-8).
            Always 0 for a mine cell.
        state: Current visible state (hidden, opened, or flagged).
        exploded: Set on the mine that ended the game.
    """

    is_mine: bool = False
    adjacent_mines: int = 0
    state: CellState = CellState.HIDDEN
    exploded: bool = False

    def open(self) -> bool:
        """
        Open this cell.

        Returns:
            True if the cell was hidden and is now opened, False if it was
            already opened or is flagged.
        """
        if self.state != CellState.HIDDEN:
            return False
        self.state = CellState.OPENED
        return True

    def toggle_flag(self) -> bool:
        """
        Toggle the flag on this cell.

        Returns:
            True if the flag was toggled, False if the cell is opened.
        """
        if self.state == CellState.OPENED:
            return False
        if self.state == CellState.HIDDEN:
            self.state = CellState.FLAGGED
        else:
            self.state = CellState.HIDDEN
        return True

    @property
    def is_hidden(self) -> bool:
        """Check if cell is hidden (covered and unflagged)."""
        return self.state == CellState.HIDDEN

    @property
    def opened(self) -> bool:
        """Check if cell is opened."""
        return self.state == CellState.OPENED

    @property
    def flagged(self) -> bool:
        """Check if cell is flagged."""
        return self.state == CellState.FLAGGED

    def to_observation(self, reveal_mines: bool = False) -> int:
        """
        Convert cell to the integer code used by renderers.

        Args:
            reveal_mines: Show mines even though they are not opened
                (used once the game is lost).

        Returns:
            -1: Hidden cell
            -2: Flagged cell
            0-8: Opened cell with adjacent mine count
            9: Mine shown after a loss
            10: The mine that exploded
        """
        if self.exploded:
            return OBS_EXPLODED
        if self.is_mine and reveal_mines and not self.flagged:
            return OBS_MINE
        if self.state == CellState.HIDDEN:
            return OBS_HIDDEN
        if self.state == CellState.FLAGGED:
            return OBS_FLAGGED
        return self.adjacent_mines


@dataclass(frozen=True)
class CellView:
    """
    Read-only snapshot of a cell handed to collaborators.

    ``has_mine`` is None while the cell is still covered and the game is
    not lost; ``adjacent_mines`` is None until the cell is opened.
    """

    row: int
    col: int
    opened: bool
    flagged: bool
    exploded: bool
    has_mine: Optional[bool]
    adjacent_mines: Optional[int]
