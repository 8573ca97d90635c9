"""
Unit tests for the text front end.
"""
import io
from pathlib import Path
from typing import List

import pytest

from minefield import Board, Chronograph, HallOfFame
from minefield.cli import GameSession, build_parser, config_from_args, main, render_board


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def output() -> List[str]:
    return []


@pytest.fixture
def session(center_mine_board: Board, clock: FakeClock, output: List[str]) -> GameSession:
    return GameSession(center_mine_board, Chronograph(clock=clock), out=output.append)


# ============================================================================
# Rendering Tests
# ============================================================================

class TestRenderBoard:
    """Test ASCII rendering."""

    def test_fresh_board(self, center_mine_board: Board) -> None:
        assert render_board(center_mine_board).splitlines() == [
            "    0 1 2",
            "  +-------+",
            "0 | . . . |",
            "1 | . . . |",
            "2 | . . . |",
            "  +-------+",
        ]

    def test_header_indices_sit_above_cells(self, center_mine_board: Board) -> None:
        center_mine_board.reveal(0, 0)
        header, _, first_row = render_board(center_mine_board).splitlines()[:3]
        assert header.index("0") == first_row.index("1")

    def test_opened_and_flagged_cells(self, center_mine_board: Board) -> None:
        center_mine_board.reveal(0, 0)
        center_mine_board.toggle_flag(1, 1)
        lines = render_board(center_mine_board).splitlines()
        assert lines[2] == "0 | 1 . . |"
        assert lines[3] == "1 | . F . |"

    def test_exploded_mine(self, center_mine_board: Board) -> None:
        center_mine_board.reveal(1, 1)
        assert render_board(center_mine_board).splitlines()[3] == "1 | . X . |"

    def test_zero_cells_render_blank(self, empty_board: Board) -> None:
        empty_board.reveal(0, 0)
        assert render_board(empty_board).splitlines()[2] == "0 |           |"


# ============================================================================
# Session Tests
# ============================================================================

class TestGameSession:
    """Test command handling and collaborator wiring."""

    def test_quit(self, session: GameSession) -> None:
        assert session.handle("q") is False

    def test_blank_line_ignored(self, session: GameSession, output) -> None:
        assert session.handle("   ") is True
        assert output == []

    def test_help(self, session: GameSession, output) -> None:
        session.handle("h")
        assert "reveal a cell" in output[-1]

    def test_unknown_command(self, session: GameSession, output) -> None:
        session.handle("x 1 1")
        assert output[-1].startswith("Unknown command 'x'")

    @pytest.mark.parametrize("line", ["r", "r 1", "r a b", "f 1 2 3"])
    def test_bad_arguments(self, session: GameSession, output, line: str) -> None:
        session.handle(line)
        assert output[-1].startswith("Usage:")

    def test_out_of_range_cell(self, session: GameSession, output) -> None:
        session.handle("r 5 5")
        assert "outside" in output[-1]
        assert session.board.cells_remaining == 8

    def test_flag_command(self, session: GameSession) -> None:
        session.handle("f 1 1")
        assert session.board.mines_to_flag == 0

    def test_clock_starts_on_first_opened_cell(self, session: GameSession) -> None:
        session.handle("f 0 0")
        assert session.chrono.is_started is False
        session.handle("r 0 1")
        assert session.chrono.is_started is True

    def test_clock_stops_on_loss(self, session: GameSession, clock, output) -> None:
        session.handle("r 0 0")
        clock.now = 3.0
        session.handle("r 1 1")
        assert session.board.is_lost is True
        assert session.chrono.is_started is False
        assert session.chrono.elapsed_ms == 3_000
        assert any("BOOM" in line for line in output)

    def test_new_game_resets(self, session: GameSession, clock) -> None:
        session.handle("r 0 0")
        clock.now = 1.0
        session.handle("r 1 1")
        session.handle("n")
        assert session.board.is_playing is True
        assert session.board.cells_remaining == 8
        assert session.chrono.elapsed_ms == 0

    def test_hall_of_fame_without_scores(self, session: GameSession, output) -> None:
        session.handle("s")
        assert output[-1] == "No hall of fame."

    def test_run_stops_at_quit(self, session: GameSession) -> None:
        session.run(io.StringIO("r 0 0\nq\nr 2 2\n"))
        assert session.board.cell(0, 0).opened is True
        assert session.board.cell(2, 2).opened is False


class TestWinning:
    """Test score recording on a win."""

    def test_win_records_score(self, tmp_path: Path, clock, output) -> None:
        board = Board.from_layout(1, 2, [(0, 1)])
        hall = HallOfFame(tmp_path, 1, 2, 1, player="alice")
        session = GameSession(board, Chronograph(clock=clock), hall, out=output.append)

        session.handle("r 0 0")

        assert board.is_won is True
        assert len(hall) == 1
        assert "Hall of fame position: 1" in output
        assert hall.score_file.exists()


# ============================================================================
# Entry Point Tests
# ============================================================================

class TestEntryPoint:
    """Test argument handling."""

    def test_defaults(self) -> None:
        config = config_from_args(build_parser().parse_args([]))
        assert (config.rows, config.cols, config.mine_probability) == (32, 32, 0.12)

    def test_explicit_flags_override_preset(self) -> None:
        args = build_parser().parse_args(["--preset", "expert", "--rows", "20"])
        config = config_from_args(args)
        assert (config.rows, config.cols) == (20, 30)
        assert config.mine_count == round(20 * 30 * 99 / 480)

    def test_main_plays_from_stream(self, capsys) -> None:
        argv = ["--rows", "3", "--cols", "3", "--prob", "0", "--no-scores"]
        assert main(argv, stream=io.StringIO("r 0 0\n")) == 0
        captured = capsys.readouterr().out
        assert "Board: 3x3 with 0 mines" in captured
        assert "Well done!" in captured

    def test_main_rejects_bad_probability(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["--prob", "1.5", "--no-scores"], stream=io.StringIO(""))
        assert excinfo.value.code == 2
