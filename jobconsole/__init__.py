"""jobconsole: incremental console output for background jobs.

Dashboard clients poll a job's console with a cursor and get back the lines
written since, plus the cursor for their next poll.  The stream ends when the
job leaves its processing state, when another attempt of the same job starts,
or when the job disappears.
"""

__version__ = "0.1.0"
__description__ = "Incremental retrieval and rendering of background job console output"

from jobconsole.core.reader import ReadResult, StreamEnd, read_lines
from jobconsole.models.console import ConsoleId, ConsoleLine
from jobconsole.monitor.html import fetch_and_render, render_console

__all__ = [
    "ConsoleId",
    "ConsoleLine",
    "ReadResult",
    "StreamEnd",
    "fetch_and_render",
    "read_lines",
    "render_console",
    "__version__",
]
