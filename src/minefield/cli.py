"""
Text front end: argument parsing, board rendering and the play loop.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from .board import (
    DEFAULT_COLS,
    DEFAULT_PROBABILITY,
    DEFAULT_ROWS,
    EVENT_CELLS_TO_GO,
    EVENT_LOST,
    EVENT_WON,
    PRESETS,
    Board,
    BoardConfig,
)
from .cell import OBS_EXPLODED, OBS_FLAGGED, OBS_HIDDEN, OBS_MINE
from .chronograph import Chronograph
from .errors import InvalidConfiguration, InvalidCoordinate
from .events import ChangeEvent
from .hall_of_fame import HallOfFame


logger = logging.getLogger(__name__)


DEFAULT_SCORES_DIR = Path.home() / ".minefield"

HELP = """Commands:
    r ROW COL   reveal a cell (chord-open if it is already opened)
    f ROW COL   toggle a flag
    n           new game
    s           show the hall of fame
    h           help
    q           quit"""

_SYMBOLS = {
    OBS_HIDDEN: ".",
    OBS_FLAGGED: "F",
    OBS_MINE: "*",
    OBS_EXPLODED: "X",
    0: " ",
}


# ============================================================================
# Rendering
# ============================================================================

def render_board(board: Board) -> str:
    """Render board as ASCII with row and column indices."""
    obs = board.get_observation()
    width = len(str(board.rows - 1))
    header = " " * (width + 3) + " ".join(
        str(col % 10) for col in range(board.cols)
    )
    lines = [header, " " * (width + 1) + "+" + "-" * (2 * board.cols + 1) + "+"]
    for row in range(board.rows):
        cells = " ".join(
            _SYMBOLS.get(int(val), str(int(val))) for val in obs[row]
        )
        lines.append(f"{row:>{width}} | {cells} |")
    lines.append(lines[1])
    return "\n".join(lines)


def render_status(board: Board, chrono: Chronograph) -> str:
    return (
        f"Cells to go: {board.cells_remaining}  "
        f"Mines to flag: {board.mines_to_flag}  "
        f"Time: {chrono}"
    )


# ============================================================================
# Session
# ============================================================================

class GameSession:
    """
    Wires a board to its stopwatch and hall of fame.

    The stopwatch starts on the first opened cell of each game and stops
    when the game is won or lost. Winning times go to the hall of fame.
    """

    def __init__(
        self,
        board: Board,
        chrono: Optional[Chronograph] = None,
        hall: Optional[HallOfFame] = None,
        out: Callable[[str], None] = print,
    ) -> None:
        self.board = board
        self.chrono = chrono or Chronograph()
        self.hall = hall
        self.out = out
        board.subscribe(EVENT_WON, self._on_won)
        board.subscribe(EVENT_LOST, self._on_lost)
        self._arm_clock()

    def _arm_clock(self) -> None:
        self.board.subscribe(EVENT_CELLS_TO_GO, self._start_clock)

    def _start_clock(self, event: ChangeEvent) -> None:
        # One-shot: later cell changes must not restart the clock.
        self.board.unsubscribe(EVENT_CELLS_TO_GO, self._start_clock)
        self.chrono.start()

    def _on_lost(self, event: ChangeEvent) -> None:
        self.chrono.stop()
        self.out("BOOM! You stepped on a mine.")

    def _on_won(self, event: ChangeEvent) -> None:
        self.chrono.stop()
        self.out(f"Well done! All mines located in {self.chrono}.")
        if self.hall is None:
            return
        score = self.hall.add_score(self.chrono.elapsed_ms)
        self.out(f"Hall of fame position: {self.hall.position(score)}")
        try:
            self.hall.save()
        except OSError as exc:
            logger.warning("Could not save scores: %s", exc)
            self.out(f"Could not save scores: {exc}")

    def new_game(self) -> None:
        """Reset board and stopwatch."""
        self.board.unsubscribe(EVENT_CELLS_TO_GO, self._start_clock)
        self.board.reinitialize()
        self.chrono.reset()
        self._arm_clock()

    def show(self) -> None:
        self.out(render_board(self.board))
        self.out(render_status(self.board, self.chrono))

    def handle(self, line: str) -> bool:
        """
        Execute one command line.

        Returns:
            False when the player asked to quit, True otherwise.
        """
        parts = line.split()
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]

        if command == "q":
            return False
        if command == "h":
            self.out(HELP)
            return True
        if command == "n":
            self.new_game()
            self.show()
            return True
        if command == "s":
            self.out(self.hall.format() if self.hall else "No hall of fame.")
            return True
        if command in ("r", "f"):
            self._cell_command(command, args)
            return True

        self.out(f"Unknown command {command!r}. Type h for help.")
        return True

    def _cell_command(self, command: str, args: List[str]) -> None:
        try:
            row, col = (int(arg) for arg in args)
        except ValueError:
            self.out(f"Usage: {command} ROW COL")
            return
        try:
            if command == "r":
                changed = self.board.reveal(row, col)
            else:
                changed = self.board.toggle_flag(row, col)
        except InvalidCoordinate as exc:
            self.out(str(exc))
            return
        if not changed:
            logger.debug("%s %d %d had no effect", command, row, col)
        self.show()

    def run(self, stream: TextIO) -> None:
        """Read commands from ``stream`` until ``q`` or end of input."""
        self.show()
        for line in stream:
            if not self.handle(line):
                break
        self.chrono.stop()


# ============================================================================
# Entry Point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minefield", description="Minefield - uncover the grid without hitting a mine"
    )
    parser.add_argument(
        "--rows", type=int, default=None, help=f"Board rows (default: {DEFAULT_ROWS})"
    )
    parser.add_argument(
        "--cols", type=int, default=None, help=f"Board columns (default: {DEFAULT_COLS})"
    )
    parser.add_argument(
        "--prob",
        type=float,
        default=None,
        help=f"Mine probability per cell (default: {DEFAULT_PROBABILITY})",
    )
    parser.add_argument(
        "--preset", choices=sorted(PRESETS), default=None, help="Standard board size"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--scores-dir",
        type=Path,
        default=DEFAULT_SCORES_DIR,
        help="Directory holding hall of fame files",
    )
    parser.add_argument(
        "--no-scores", action="store_true", help="Do not keep a hall of fame"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Debug logging"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> BoardConfig:
    """
    Combine preset and explicit flags; explicit flags win.

    Raises:
        InvalidConfiguration: The resulting values are out of range.
    """
    base = PRESETS[args.preset] if args.preset else BoardConfig()
    return BoardConfig(
        rows=args.rows if args.rows is not None else base.rows,
        cols=args.cols if args.cols is not None else base.cols,
        mine_probability=args.prob if args.prob is not None else base.mine_probability,
        seed=args.seed,
    )


def main(argv: Optional[List[str]] = None, stream: Optional[TextIO] = None) -> int:
    """Parse arguments and play until the player quits."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = config_from_args(args)
    except InvalidConfiguration as exc:
        parser.error(str(exc))

    board = Board(config)
    hall = None
    if not args.no_scores:
        hall = HallOfFame(args.scores_dir, board.rows, board.cols, board.mine_count)

    print(f"Board: {board.rows}x{board.cols} with {board.mine_count} mines")
    print("Type h for help.")
    session = GameSession(board, Chronograph(), hall)
    session.run(stream or sys.stdin)
    return 0
