"""jobconsole data models, all pydantic v2 and frozen."""

from jobconsole.models.console import ConsoleDecodeError, ConsoleId, ConsoleLine
from jobconsole.models.state import PROCESSING_STATE_NAME, STARTED_AT_KEY, StateData

__all__ = [
    "ConsoleDecodeError",
    "ConsoleId",
    "ConsoleLine",
    "PROCESSING_STATE_NAME",
    "STARTED_AT_KEY",
    "StateData",
]
