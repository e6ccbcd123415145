"""On-demand logging for model traffic and flow runs.

Nothing is written until ``enable_chat_logging()`` is called (the CLI's
``--log`` flag). Model requests and replies go to the ``chat`` logger; flow,
tool and controller events go to the ``campus`` logger tree.
"""
import logging
from pathlib import Path
from typing import Any, Optional

LOGGER_NAMES = ("chat", "campus")
DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def enable_chat_logging(
    level: int = logging.INFO,
    to_console: bool = True,
    to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> None:
    """Attach console and ``chat.log`` handlers to the chat and campus loggers.

    Calling it again only changes the level.
    """
    loggers = [logging.getLogger(name) for name in LOGGER_NAMES]
    for logger in loggers:
        logger.setLevel(level)
    bare = [logger for logger in loggers if not logger.handlers]
    if not bare:
        return

    formatter = logging.Formatter(_FORMAT)
    handlers = []
    if to_file:
        directory = Path(log_dir) if log_dir is not None else DEFAULT_LOG_DIR
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(directory / "chat.log", encoding="utf-8"))
    if to_console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)

    for logger in bare:
        for handler in handlers:
            logger.addHandler(handler)
        # these handlers own the output; the root handler would repeat it
        logger.propagate = False


def safe_preview(text: Any, limit: int = 2000) -> str:
    """Stringify ``text`` and cut it at ``limit`` characters for log lines."""
    if text is None:
        return ""
    s = str(text)
    return s if len(s) <= limit else s[:limit] + "... [truncated]"
