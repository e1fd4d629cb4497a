"""
Logging setup shared by every Vigil module.

Each logger gets two handlers: a console handler that prints through
prompt_toolkit (colored when stderr is a terminal) and a rotating file
handler under ``logs/``. All loggers of one process write to the same file.

Usage
-----
    from vigil.util.logger import get_logger

    logger = get_logger("audit_sink")
    logger.info("[AUDIT] ...")
"""

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path
from datetime import datetime
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

# -------------------- Configuration --------------------
LOGS_DIR: Path = (Path(__file__).parents[3] / "logs").resolve()
LOGS_DIR.mkdir(parents=True, exist_ok=True)

LOG_FORMAT: str = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H-%M-%S"

CONSOLE_LEVEL = logging.INFO
FILE_LEVEL = logging.DEBUG
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# ANSI escape per level name; CRITICAL uses the 256-color palette
LOG_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[38;5;88m",
}
RESET_COLOR = "\033[0m"

# Seconds within which a log file from today is considered the same session
SESSION_REUSE_SECONDS = 60

LOG_FILEPATH: Path | None = None


# -------------------- Formatters --------------------
class ColorFormatter(logging.Formatter):
    """
    Formatter that paints the whole formatted line in its level's color.

    The line is produced by the regular :class:`logging.Formatter` first, so
    tracebacks attached to the record are colored too. Levels missing from
    ``LOG_COLORS`` (custom levels, for instance) are returned unchanged and
    no reset code is appended.

    Example:
        An ERROR record becomes ``"\\033[31m[...] [ERROR] ...\\033[0m"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = LOG_COLORS.get(record.levelname)
        if not color:
            return line
        return f"{color}{line}{RESET_COLOR}"


class PromptToolkitHandler(logging.Handler):
    """
    Console handler that writes records with ``print_formatted_text``.

    Output goes through prompt_toolkit rather than ``print`` so the ANSI
    sequences from :class:`ColorFormatter` are interpreted consistently and
    log lines do not corrupt a prompt that is being drawn. Failures while
    formatting or printing are routed to :meth:`logging.Handler.handleError`
    instead of propagating into the caller.

    Args:
        formatter (logging.Formatter | None): Formatter to install, if any.
    """

    def __init__(self, formatter: logging.Formatter | None = None):
        super().__init__()
        if formatter is not None:
            self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print_formatted_text(ANSI(self.format(record)))
        except Exception:
            self.handleError(record)


def should_use_color() -> bool:
    """
    Tell whether console output should carry ANSI colors.

    Colors are used only when stderr is an interactive terminal, so output
    redirected to a file or captured by a service manager stays plain. A
    stream without a working ``isatty`` (closed or replaced) counts as "no".

    Returns:
        bool: True when stderr is a TTY.
    """
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


plain_formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
console_formatter = ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT) if should_use_color() else plain_formatter


# -------------------- Log File --------------------
def _latest_log_from_today() -> Path | None:
    today_prefix = datetime.now().strftime("%Y-%m-%d")
    candidates = list(LOGS_DIR.glob(f"{today_prefix}*.log"))
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


def get_log_filepath() -> Path:
    """
    Return the log file of the current session, choosing it on first call.

    A restart within ``SESSION_REUSE_SECONDS`` of the last write keeps
    appending to today's most recent file. Otherwise a fresh file named
    after the current time is used. The choice is cached in ``LOG_FILEPATH``
    so later loggers share it.

    Returns:
        Path: File that every logger of this process writes to.
    """
    global LOG_FILEPATH

    if LOG_FILEPATH is not None:
        return LOG_FILEPATH

    latest = _latest_log_from_today()
    if latest is not None and datetime.now().timestamp() - latest.stat().st_mtime < SESSION_REUSE_SECONDS:
        LOG_FILEPATH = latest
    else:
        LOG_FILEPATH = LOGS_DIR / f"{datetime.now().strftime(DATE_FORMAT)}.log"
    return LOG_FILEPATH


# -------------------- Logger Setup --------------------
def _build_console_handler() -> logging.Handler:
    handler = PromptToolkitHandler(formatter=console_formatter)
    handler.setLevel(CONSOLE_LEVEL)
    return handler


def _build_file_handler() -> logging.Handler:
    handler = RotatingFileHandler(
        get_log_filepath(),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(FILE_LEVEL)
    handler.setFormatter(plain_formatter)
    return handler


def get_logger(logger_name: str) -> logging.Logger:
    """Return the named logger, attaching Vigil's handlers the first time.

    Parameters
    ----------
    logger_name:
        Short component name, e.g. ``"audit_sink"``.

    Returns
    -------
    logging.Logger
        Logger at DEBUG level that does not propagate to the root logger.
        The console shows INFO and above; the file receives everything.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(_build_console_handler())
    logger.addHandler(_build_file_handler())
    return logger


# -------------------- Exception Handling --------------------
def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """
    ``sys.excepthook`` replacement that records uncaught exceptions.

    The traceback is logged at ERROR through the root logger, so it ends up
    wherever logging is configured rather than only on stderr. Ctrl+C is
    handed to ``sys.__excepthook__`` untouched and keeps its usual behavior.

    Args:
        exception_type: Class of the uncaught exception.
        exception_instance: The exception object.
        exception_traceback: Traceback of the failure.
    """
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
        return
    logging.error("Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback))


# -------------------- Library Loggers --------------------
# py-cord gateway chatter and connection libraries log heavily at INFO
NOISY_LOGGERS = (
    "discord",
    "discord.client",
    "discord.gateway",
    "discord.http",
    "discord.state",
    "aiohttp",
    "aiosqlite",
    "asyncio",
    "websockets",
)


def silence_noisy_loggers(names=NOISY_LOGGERS) -> None:
    """Raise the given library loggers to ERROR and detach their own handlers."""
    for name in names:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(logging.ERROR)
        library_logger.propagate = False
        library_logger.handlers = []


silence_noisy_loggers()
sys.excepthook = handle_exception
