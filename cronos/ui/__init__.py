"""UI package."""

from .runner_widget import RunnerWidget
from .history_widget import HistoryWidget
from .routine_list import RoutineListWidget
from .formatting import format_time

__all__ = [
    "RunnerWidget",
    "HistoryWidget",
    "RoutineListWidget",
    "format_time",
]
