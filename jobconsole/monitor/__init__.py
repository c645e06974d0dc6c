"""Console display: HTML fragments for the dashboard and Rich terminal output.

Modules
-------
html
    ``render_line`` / ``render_batch`` / ``render_console`` /
    ``fetch_and_render`` produce the dashboard markup for one poll.
terminal
    ``ConsoleTailRenderer`` prints lines with Rich and can follow a live
    console until it ends.
"""
