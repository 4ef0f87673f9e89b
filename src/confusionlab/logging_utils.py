"""
Root-logger setup for confusionlab experiment runs.

The runner calls :func:`setup_colored_logging` with the resolved config. Every
record is printed as ``[time] [LEVEL] [logger.func:line] message``. The level
and function name are colored from the ``logging.colors`` mapping, and
missing entries fall back to :data:`DEFAULT_COLORS`.
"""

import logging
from typing import Any, Dict

from termcolor import colored

DEFAULT_COLORS: Dict[str, str] = {
    "debug": "blue",
    "info": "green",
    "warning": "yellow",
    "error": "red",
    "critical": "magenta",
    "function_names": "cyan",
}


class ColoredFormatter(logging.Formatter):
    def __init__(self, colors: Dict[str, str], *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.colors = {**DEFAULT_COLORS, **colors}

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.colors.get(record.levelname.lower(), "white")
        func_color = self.colors.get("function_names", "cyan")

        # copy so other handlers still see the plain record
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = colored(record.levelname, level_color)
        record.funcName = colored(record.funcName, func_color)

        return super().format(record)


def setup_colored_logging(config: Dict[str, Any]) -> logging.Logger:
    """Set up the root logger with colored output according to config."""

    logging_cfg = config.get("logging") or {}
    level_name = str(logging_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    colors = logging_cfg.get("colors") or {}

    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicate logs if reconfigured
    logger.handlers.clear()

    handler = logging.StreamHandler()
    formatter = ColoredFormatter(
        colors=colors,
        fmt="[%(asctime)s] [%(levelname)s] [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


__all__ = ["DEFAULT_COLORS", "ColoredFormatter", "setup_colored_logging"]
