"""Logging setup for the pomodoro process."""

import logging
from pathlib import Path

LOG_FORMAT = "POMODORO: %(asctime)s %(filename)s:%(lineno)d [%(levelname)s] %(message)s"


def configure_logging(level: str = "INFO", log_file: Path | None = None, disable_console: bool = False) -> None:
    """Configure the ``pomodoro`` logger hierarchy.

    Args:
        level: Level name such as ``"INFO"`` or ``"debug"``.
        log_file: Optional file that receives a copy of every record.
        disable_console: Skip the stderr handler, e.g. when a UI owns the terminal.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers: list[logging.Handler] = []
    if log_file is not None:
        log_file = Path(log_file).expanduser().resolve()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    if not disable_console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger("pomodoro")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    if not handlers:
        root.addHandler(logging.NullHandler())
    root.setLevel(log_level)
    root.propagate = False
