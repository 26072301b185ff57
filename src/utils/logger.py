import logging

from rich.console import Console
from rich.logging import RichHandler

from utils import config


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        dynamic_width = CenteredFormatter.longest_name_length + 2
        record.name = f"{record.name.center(dynamic_width - 2)}"
        return super().format(record)


_log_console = None


def _console():
    """
    Console the handlers render to.
    With AGRIHUB_LOG_FILE set, output goes to that file so it does not
    draw over the running TUI.
    """
    global _log_console
    if _log_console is None and config.LOG_FILE:
        _log_console = Console(
            file=open(config.LOG_FILE, "a", encoding="utf-8"),
            width=120,
            no_color=True,
        )
    return _log_console


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    """
    if name is None:
        name = "agrihub"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if config.DEBUG else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        format_pattern = "[%(name)s]  %(message)s"
        formatter = CenteredFormatter(format_pattern)

        handler = RichHandler(
            console=_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized with RichHandler.")

    return logger
