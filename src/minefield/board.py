"""
Board module for the minefield engine.

Implements the game board with mine placement, cell revealing, flagging,
chord-opening and win/lose state management. Every counter change and
terminal outcome is published through named events.
"""
import logging
import math
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from numbers import Real
from typing import Callable, Deque, Iterable, List, Optional, Tuple

import numpy as np

from .cell import Cell, CellView
from .errors import InvalidConfiguration, InvalidCoordinate
from .events import ChangeEvent, EventBus
from .placement import (
    adjacent_counts,
    choose_mine_indices,
    mine_count,
    mine_mask_from_indices,
    mine_mask_from_positions,
)


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

DEFAULT_ROWS = 32
DEFAULT_COLS = 32
DEFAULT_PROBABILITY = 0.12

EVENT_CELLS_TO_GO = "cellsToGo"
EVENT_MINES_TO_FLAG = "minesToFlag"
EVENT_LOST = "lost"
EVENT_WON = "won"
EVENT_NAMES = (EVENT_CELLS_TO_GO, EVENT_MINES_TO_FLAG, EVENT_LOST, EVENT_WON)

# Posts a task to run later, e.g. TaskQueue or a UI toolkit's "call soon".
Scheduler = Callable[[Callable[[], None]], None]


class Outcome(Enum):
    """Possible states of a game."""

    IN_PROGRESS = auto()
    WON = auto()
    LOST = auto()


@dataclass
class BoardConfig:
    """
    Configuration for a minefield board.

    Attributes:
        rows: Number of rows.
        cols: Number of columns.
        mine_probability: Fraction of cells holding a mine (0.0-1.0).
        seed: Seed for the mine placement generator; None for entropy.
    """

    rows: int = DEFAULT_ROWS
    cols: int = DEFAULT_COLS
    mine_probability: float = DEFAULT_PROBABILITY
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        for name in ("rows", "cols"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfiguration(f"{name} must be an integer")
            if value < 1:
                raise InvalidConfiguration("Board dimensions must be positive")
        probability = self.mine_probability
        if isinstance(probability, bool) or not isinstance(probability, Real):
            raise InvalidConfiguration("Mine probability must be a number")
        if math.isnan(probability) or not 0.0 <= probability <= 1.0:
            raise InvalidConfiguration(
                f"Mine probability must be within [0, 1], got {probability}"
            )

    @property
    def mine_count(self) -> int:
        """Number of mines a board with this configuration holds."""
        return mine_count(self.rows, self.cols, self.mine_probability)


# Preset difficulty levels
BEGINNER = BoardConfig(9, 9, 10 / 81)
INTERMEDIATE = BoardConfig(16, 16, 40 / 256)
EXPERT = BoardConfig(16, 30, 99 / 480)

PRESETS = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "expert": EXPERT,
}


# ============================================================================
# Board Class
# ============================================================================

@dataclass(eq=False)
class Board:
    """
    Minesweeper game board.

    Owns the grid of cells and the cells-to-go / mines-to-flag counters,
    runs the reveal cascade and tracks the outcome. Collaborators observe
    it through ``subscribe`` and read it through ``cell``; they never
    touch the grid directly.

    Mutating calls must come from one thread at a time. When a
    ``scheduler`` is given, cascade steps are posted to it one by one
    instead of running before ``reveal`` returns. Pass a ``TaskQueue`` (or a
    UI toolkit's "call later") to let player input interleave with a
    running cascade.
    """

    config: BoardConfig = field(default_factory=BoardConfig)
    scheduler: Optional[Scheduler] = field(default=None, repr=False)
    _grid: List[List[Cell]] = field(default_factory=list, init=False, repr=False)
    _outcome: Outcome = field(default=Outcome.IN_PROGRESS, init=False)
    _mine_count: int = field(default=0, init=False)
    _cells_remaining: int = field(default=0, init=False)
    _mines_to_flag: int = field(default=0, init=False)
    _exploded: Optional[Tuple[int, int]] = field(default=None, init=False)
    _pending: Deque[Tuple[int, int]] = field(
        default_factory=deque, init=False, repr=False
    )
    _draining: bool = field(default=False, init=False, repr=False)
    _scheduled: bool = field(default=False, init=False, repr=False)
    _generation: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        """Set up notifications and lay out the first minefield."""
        self._events = EventBus(self, EVENT_NAMES)
        self._rng = np.random.default_rng(self.config.seed)
        self._install_layout(self._sample_layout())

    @classmethod
    def create(
        cls,
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        mine_probability: float = DEFAULT_PROBABILITY,
        seed: Optional[int] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> "Board":
        """Build a board from plain dimensions."""
        return cls(BoardConfig(rows, cols, mine_probability, seed), scheduler)

    @classmethod
    def from_layout(
        cls,
        rows: int,
        cols: int,
        mines: Iterable[Tuple[int, int]],
        scheduler: Optional[Scheduler] = None,
    ) -> "Board":
        """
        Build a board with mines at fixed positions.

        The configured probability is set to the layout's density, so a
        later ``reinitialize`` samples the same number of mines.

        Raises:
            InvalidConfiguration: The dimensions are not positive integers.
            InvalidCoordinate: A mine position lies outside the board.
        """
        # Checks the dimensions before they are used as a divisor.
        BoardConfig(rows, cols, 0.0)
        positions = set(mines)
        for row, col in positions:
            if not (0 <= row < rows and 0 <= col < cols):
                raise InvalidCoordinate(row, col, rows, cols)
        config = BoardConfig(rows, cols, len(positions) / (rows * cols))
        board = cls(config, scheduler)
        board._install_layout(mine_mask_from_positions(rows, cols, positions))
        return board

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _sample_layout(self) -> np.ndarray:
        """Draw a fresh random mine mask for the configured board."""
        indices = choose_mine_indices(
            self.rows * self.cols, self.config.mine_count, self._rng
        )
        return mine_mask_from_indices(self.rows, self.cols, indices)

    def _install_layout(self, mask: np.ndarray) -> None:
        """Replace the grid with one built from ``mask`` and reset counters."""
        counts = adjacent_counts(mask)
        self._grid = [
            [
                Cell(is_mine=bool(mask[row, col]),
                     adjacent_mines=int(counts[row, col]))
                for col in range(self.cols)
            ]
            for row in range(self.rows)
        ]
        self._mine_count = int(mask.sum())
        self._cells_remaining = self.rows * self.cols - self._mine_count
        self._mines_to_flag = self._mine_count
        self._outcome = Outcome.IN_PROGRESS
        self._exploded = None
        self._pending.clear()
        self._generation += 1
        logger.info(
            "Laid out %dx%d board with %d mines",
            self.rows, self.cols, self._mine_count,
        )

    def reinitialize(self) -> None:
        """
        Start a new game on the same configuration.

        Mines are sampled afresh. Listeners are told about the reset
        counters when their values change.
        """
        old_cells = self._cells_remaining
        old_mines = self._mines_to_flag
        self._install_layout(self._sample_layout())
        if old_cells != self._cells_remaining:
            self._emit(EVENT_CELLS_TO_GO, old_cells, self._cells_remaining)
        if old_mines != self._mines_to_flag:
            self._emit(EVENT_MINES_TO_FLAG, old_mines, self._mines_to_flag)

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def _get_neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """In-board positions of the up-to-8 cells surrounding (row, col)."""
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self.is_valid_position(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _check_position(self, row: int, col: int) -> Cell:
        if not self.is_valid_position(row, col):
            raise InvalidCoordinate(row, col, self.rows, self.cols)
        return self._grid[row][col]

    # ========================================================================
    # Game Actions (Mid-level)
    # ========================================================================

    def reveal(self, row: int, col: int) -> bool:
        """
        Reveal the cell at (row, col).

        A mine loses the game. A zero-count cell opens its whole connected
        empty region and the numbered border around it. Revealing an
        already opened numbered cell chord-opens it.

        Without a scheduler the cascade completes before this returns.
        With one, only the clicked cell opens now and the cascade continues
        one step per scheduled task.

        Args:
            row: Row index to reveal.
            col: Column index to reveal.

        Returns:
            True if the action had an effect, False for a no-op (flagged
            cell, unsatisfied chord, game already over).

        Raises:
            InvalidCoordinate: (row, col) is outside the board.
        """
        cell = self._check_position(row, col)
        if not self.is_playing or cell.flagged:
            return False
        if cell.opened:
            return self._chord(row, col)

        logger.debug("Reveal (%d, %d)", row, col)
        self._open_now([(row, col)])
        return True

    def _chord(self, row: int, col: int) -> bool:
        """Open every unflagged neighbor once the flags match the count."""
        cell = self._grid[row][col]
        if cell.adjacent_mines == 0:
            return False
        neighbors = self._get_neighbors(row, col)
        flags = self._count_adjacent_flags(neighbors)
        if flags != cell.adjacent_mines:
            return False

        targets = [
            (r, c) for r, c in neighbors if self._grid[r][c].is_hidden
        ]
        if not targets:
            return False
        logger.debug("Chord (%d, %d) opens %d cells", row, col, len(targets))
        self._open_now(targets)
        return True

    def _count_adjacent_flags(self, neighbors: List[Tuple[int, int]]) -> int:
        """Count flagged cells among ``neighbors``."""
        return sum(1 for r, c in neighbors if self._grid[r][c].flagged)

    def _open_now(self, positions: List[Tuple[int, int]]) -> None:
        """
        Uncover player-chosen positions, then run or schedule the cascade.

        Calls made by listeners while a step is being delivered only add to
        the queue; the step already running picks them up.
        """
        if self._draining:
            self._pending.extend(positions)
            return
        generation = self._generation
        self._draining = True
        try:
            for row, col in positions:
                if not self.is_playing or generation != self._generation:
                    break
                self._uncover(row, col)
            if self.scheduler is None:
                while self._pending and self.is_playing:
                    self._uncover(*self._pending.popleft())
        finally:
            self._draining = False
        self._settle()

    def _cascade_step(self) -> None:
        """One deferred cascade step, run by the scheduler."""
        self._scheduled = False
        if self._pending and self.is_playing:
            self._draining = True
            try:
                self._uncover(*self._pending.popleft())
            finally:
                self._draining = False
        self._settle()

    def _settle(self) -> None:
        """Drop leftover work once the game ended, or book the next step."""
        if not self.is_playing:
            self._pending.clear()
        elif self._pending and self.scheduler is not None and not self._scheduled:
            self._scheduled = True
            self.scheduler(self._cascade_step)

    @property
    def cascade_pending(self) -> bool:
        """True while queued cascade steps have not run yet."""
        return bool(self._pending)

    def _uncover(self, row: int, col: int) -> None:
        """Open one cell if it is still covered and unflagged."""
        cell = self._grid[row][col]
        if not cell.is_hidden:
            return

        if cell.is_mine:
            cell.exploded = True
            self._exploded = (row, col)
            self._outcome = Outcome.LOST
            logger.info("Mine hit at (%d, %d); game lost", row, col)
            self._emit(EVENT_LOST, False, True)
            return

        generation = self._generation
        cell.open()
        old = self._cells_remaining
        self._cells_remaining -= 1
        self._emit(EVENT_CELLS_TO_GO, old, self._cells_remaining)
        if generation != self._generation:
            # A listener reinitialized the board.
            return

        if self._cells_remaining == 0:
            self._outcome = Outcome.WON
            logger.info("All safe cells opened; game won")
            self._emit(EVENT_WON, False, True)
        elif cell.adjacent_mines == 0:
            self._pending.extend(
                (r, c) for r, c in self._get_neighbors(row, col)
                if self._grid[r][c].is_hidden
            )

    def toggle_flag(self, row: int, col: int) -> bool:
        """
        Toggle the flag on a covered cell.

        The mines-to-flag counter moves by one either way and is not
        checked against the real mines, so it can go negative.

        Returns:
            True if the flag was toggled, False otherwise.

        Raises:
            InvalidCoordinate: (row, col) is outside the board.
        """
        cell = self._check_position(row, col)
        if not self.is_playing or not cell.toggle_flag():
            return False

        old = self._mines_to_flag
        self._mines_to_flag += -1 if cell.flagged else 1
        self._emit(EVENT_MINES_TO_FLAG, old, self._mines_to_flag)
        return True

    # ========================================================================
    # Notifications
    # ========================================================================

    def subscribe(
        self, name: str, listener: Callable[[ChangeEvent], None]
    ) -> None:
        """Register ``listener`` for one of the board events."""
        self._events.subscribe(name, listener)

    def unsubscribe(
        self, name: str, listener: Callable[[ChangeEvent], None]
    ) -> bool:
        """Remove one registration of ``listener``."""
        return self._events.unsubscribe(name, listener)

    def _emit(self, name: str, old_value, new_value) -> None:
        self._events.emit(name, old_value, new_value)

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    @property
    def rows(self) -> int:
        return self.config.rows

    @property
    def cols(self) -> int:
        return self.config.cols

    @property
    def mine_count(self) -> int:
        """Mines on the current layout."""
        return self._mine_count

    @property
    def cells_remaining(self) -> int:
        """Safe cells not yet opened."""
        return self._cells_remaining

    @property
    def mines_to_flag(self) -> int:
        """Player-facing counter: mines minus flags placed."""
        return self._mines_to_flag

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def is_playing(self) -> bool:
        """Check if game is still in progress."""
        return self._outcome == Outcome.IN_PROGRESS

    @property
    def is_won(self) -> bool:
        return self._outcome == Outcome.WON

    @property
    def is_lost(self) -> bool:
        return self._outcome == Outcome.LOST

    @property
    def exploded_position(self) -> Optional[Tuple[int, int]]:
        """Where the game was lost, if it was."""
        return self._exploded

    def cell(self, row: int, col: int) -> CellView:
        """
        Read-only view of one cell.

        Mines are only disclosed for opened cells or after a loss, and the
        adjacent count only for opened cells.

        Raises:
            InvalidCoordinate: (row, col) is outside the board.
        """
        cell = self._check_position(row, col)
        disclose = cell.opened or cell.exploded or self.is_lost
        return CellView(
            row=row,
            col=col,
            opened=cell.opened,
            flagged=cell.flagged,
            exploded=cell.exploded,
            has_mine=cell.is_mine if disclose else None,
            adjacent_mines=cell.adjacent_mines if cell.opened else None,
        )

    def get_observation(self) -> np.ndarray:
        """
        Get board state as a numpy array for renderers.

        Returns:
            2D int8 array where:
                -1 = hidden
                -2 = flagged
                0-8 = opened with adjacent count
                9 = mine (only after a loss)
                10 = exploded mine
        """
        obs = np.zeros((self.rows, self.cols), dtype=np.int8)
        reveal_mines = self.is_lost
        for row in range(self.rows):
            for col in range(self.cols):
                obs[row, col] = self._grid[row][col].to_observation(reveal_mines)
        return obs

    def dump(self) -> str:
        """Full layout for debugging: ``@`` for mines, counts elsewhere."""
        border = "+" + "--" * self.cols + "-+"
        lines = [border]
        for row in self._grid:
            text = ""
            for cell in row:
                if cell.is_mine:
                    text += " @"
                elif cell.adjacent_mines == 0:
                    text += "  "
                else:
                    text += f" {cell.adjacent_mines}"
            lines.append("|" + text + " |")
        lines.append(border)
        return "\n".join(lines)
