"""Background threads draining the engine's stdout and stderr."""

import threading
from typing import IO, Callable, Optional

LineHandler = Callable[[str], None]


def read_lines(
    stream: IO[str],
    on_line: LineHandler,
    on_error: LineHandler,
    stopping: Optional[threading.Event] = None,
    *,
    label: str = "stdout",
    keep_blank: bool = False,
) -> None:
    """Forward each non-empty line of ``stream`` until EOF.

    With ``keep_blank`` only the line terminator is removed and blank lines are
    forwarded as well, so diagnostics reach ``on_line`` exactly as written.

    A read failure is reported once through ``on_error`` and ends the loop;
    failures after ``stopping`` is set come from the pipe being closed on
    shutdown and end the loop silently.
    """
    while True:
        try:
            line = stream.readline()
        except (OSError, ValueError) as exc:
            if stopping is None or not stopping.is_set():
                on_error(f"Error reading {label}: {exc}")
            return
        if line == "":
            return  # EOF
        if keep_blank:
            on_line(line.rstrip("\r\n"))
            continue
        line = line.strip()
        if not line:
            continue
        on_line(line)


def start_reader(
    name: str,
    stream: IO[str],
    on_line: LineHandler,
    on_error: LineHandler,
    stopping: Optional[threading.Event] = None,
    *,
    keep_blank: bool = False,
) -> threading.Thread:
    thread = threading.Thread(
        target=read_lines,
        args=(stream, on_line, on_error, stopping),
        kwargs={"label": name, "keep_blank": keep_blank},
        name=f"uci-{name}-reader",
        daemon=True,
    )
    thread.start()
    return thread
