"""
Hall of fame: best winning times per board size.

Each player keeps a score file per (rows, cols, mines) key in a shared
directory. Loading merges every player's file for the key; saving only
rewrites the current player's own file.

File name: ``{rows}x{cols}-M={mines}-O={player}.score``
Line format: ``who:when:score:checksum`` where ``when`` is milliseconds
since the epoch, ``score`` the winning time in milliseconds and
``checksum`` the CRC-32 of ``who:when:score``.
"""
import bisect
import getpass
import logging
import re
import time
import zlib
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .chronograph import format_duration


logger = logging.getLogger(__name__)


_FIELDS = 4

# Recorded when the login name cannot be determined.
ANONYMOUS = "anonymous"


def default_player() -> str:
    """Login name of the current user, or ANONYMOUS when there is none."""
    try:
        return getpass.getuser()
    except (KeyError, OSError) as exc:
        logger.warning("Cannot determine login name: %s", exc)
        return ANONYMOUS


def checksum(who: str, when: int, score: int) -> int:
    """Tamper check stored with every line."""
    return zlib.crc32(f"{who}:{when}:{score}".encode("utf-8"))


@dataclass(frozen=True, order=True)
class Score:
    """A winning time. Orders by time, then date, then player."""

    score: int
    when: int
    who: str

    @property
    def score_text(self) -> str:
        return format_duration(self.score)

    @property
    def when_text(self) -> str:
        return datetime.fromtimestamp(self.when / 1000).strftime("%Y-%m-%d %H:%M:%S")

    def to_line(self) -> str:
        return f"{self.who}:{self.when}:{self.score}:{checksum(self.who, self.when, self.score)}"


class HallOfFame:
    """
    Ordered scores for one board size.

    Args:
        base_dir: Directory holding the score files.
        rows: Board rows.
        cols: Board columns.
        mines: Mines on the board.
        player: Name recorded with new scores (login name by default).
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        rows: int,
        cols: int,
        mines: int,
        player: Optional[str] = None,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.rows = rows
        self.cols = cols
        self.mines = mines
        self.player = player or default_player()
        self.score_file = self.base_dir / self._file_name(self.player)
        self._scores: List[Score] = []
        logger.info("Hall of fame directory: %s", self.base_dir)
        logger.info("Score file: %s", self.score_file)
        self.load()

    def _file_name(self, player: str) -> str:
        return f"{self.rows}x{self.cols}-M={self.mines}-O={player}.score"

    # ========================================================================
    # Persistence
    # ========================================================================

    def load(self) -> None:
        """(Re)read every player's file for this board size."""
        pattern = re.compile(
            re.escape(f"{self.rows}x{self.cols}-M={self.mines}-O=")
            + r"(.+)\.score"
        )
        scores = set()
        try:
            paths = sorted(self.base_dir.iterdir())
        except OSError as exc:
            logger.warning("Cannot read score directory %s: %s", self.base_dir, exc)
            paths = []

        for path in paths:
            if not pattern.fullmatch(path.name):
                continue
            logger.info("Reading scores from %s", path.name)
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as exc:
                logger.warning("Cannot load %s: %s", path, exc)
                continue
            for line_no, line in enumerate(text.splitlines(), start=1):
                if not line.strip():
                    continue
                score = self._parse_line(path, line_no, line)
                if score is not None:
                    scores.add(score)

        self._scores = sorted(scores)

    @staticmethod
    def _parse_line(path: Path, line_no: int, line: str) -> Optional[Score]:
        # Player names may contain the separator; the numeric fields never do.
        fields = [field.strip() for field in line.strip().rsplit(":", _FIELDS - 1)]
        if len(fields) != _FIELDS:
            logger.warning("%s:%d: bad syntax %r", path.name, line_no, line)
            return None
        who, when, score, stored = fields
        try:
            when_ms, score_ms, stored_sum = int(when), int(score), int(stored)
        except ValueError as exc:
            logger.warning("%s:%d: %s", path.name, line_no, exc)
            return None
        expected = checksum(who, when_ms, score_ms)
        if stored_sum != expected:
            logger.warning(
                "%s:%d: checksum %d does not match %d",
                path.name, line_no, stored_sum, expected,
            )
            return None
        return Score(score_ms, when_ms, who)

    def save(self) -> None:
        """
        Write the current player's scores.

        Raises:
            OSError: The file cannot be written.
        """
        self.base_dir.mkdir(parents=True, exist_ok=True)
        lines = [s.to_line() for s in self._scores if s.who == self.player]
        self.score_file.write_text(
            "".join(line + "\n" for line in lines), encoding="utf-8"
        )
        logger.info("Saved %d scores to %s", len(lines), self.score_file)

    # ========================================================================
    # Ranking
    # ========================================================================

    def add_score(self, score_ms: int, when: Optional[int] = None) -> Score:
        """
        Record a winning time for the current player.

        An identical entry already present is not added twice.
        """
        if when is None:
            when = int(time.time() * 1000)
        score = Score(int(score_ms), int(when), self.player)
        index = bisect.bisect_left(self._scores, score)
        if index == len(self._scores) or self._scores[index] != score:
            self._scores.insert(index, score)
        return score

    def position(self, score: Score) -> Optional[int]:
        """1-based rank of ``score``, or None if it is not listed."""
        index = bisect.bisect_left(self._scores, score)
        if index < len(self._scores) and self._scores[index] == score:
            return index + 1
        return None

    def ranking(self) -> List[Tuple[int, Score]]:
        """(position, score) pairs, best first."""
        return [(pos, score) for pos, score in enumerate(self._scores, start=1)]

    def __len__(self) -> int:
        return len(self._scores)

    def format(self, limit: int = 10) -> str:
        """Printable table of the best ``limit`` entries."""
        lines = [f"Hall of fame {self.rows}x{self.cols}, {self.mines} mines"]
        for pos, score in self.ranking()[:limit]:
            lines.append(
                f"{pos:>3}. {score.who:<16} {score.score_text:>20}  {score.when_text}"
            )
        if len(lines) == 1:
            lines.append("  (no scores yet)")
        return "\n".join(lines)
