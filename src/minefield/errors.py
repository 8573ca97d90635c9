"""
Exceptions raised by the minefield engine.

Ordinary gameplay no-ops (re-clicking an opened cell, acting after the game
ended) never raise; only malformed input does.
"""


class MinefieldError(Exception):
    """Base class for all minefield errors."""


class InvalidConfiguration(MinefieldError, ValueError):
    """Board dimensions or mine probability are out of range."""


class InvalidCoordinate(MinefieldError, IndexError):
    """A (row, col) pair lies outside the board."""

    def __init__(self, row: int, col: int, rows: int, cols: int) -> None:
        super().__init__(
            f"Cell ({row}, {col}) is outside the {rows}x{cols} board"
        )
        self.row = row
        self.col = col
