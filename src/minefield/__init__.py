"""
Minefield game module.

Provides the board engine (mine placement, reveal cascade, flags, outcome)
and the collaborators that observe it: stopwatch, hall of fame and text
front end.
"""
from .cell import Cell, CellState, CellView
from .board import (
    Scheduler,
    Board,
    BoardConfig,
    Outcome,
    BEGINNER,
    INTERMEDIATE,
    EXPERT,
    EVENT_CELLS_TO_GO,
    EVENT_MINES_TO_FLAG,
    EVENT_LOST,
    EVENT_WON,
)
from .chronograph import Chronograph, format_duration
from .errors import InvalidConfiguration, InvalidCoordinate, MinefieldError
from .events import ChangeEvent, EventBus, TaskQueue
from .hall_of_fame import HallOfFame, Score

__all__ = [
    "Cell",
    "CellState",
    "CellView",
    "Board",
    "BoardConfig",
    "Outcome",
    "Scheduler",
    "BEGINNER",
    "INTERMEDIATE",
    "EXPERT",
    "EVENT_CELLS_TO_GO",
    "EVENT_MINES_TO_FLAG",
    "EVENT_LOST",
    "EVENT_WON",
    "Chronograph",
    "format_duration",
    "InvalidConfiguration",
    "InvalidCoordinate",
    "MinefieldError",
    "ChangeEvent",
    "EventBus",
    "TaskQueue",
    "HallOfFame",
    "Score",
]
