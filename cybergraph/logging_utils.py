"""Colored, filtered console logging plus a verbose rotating log file."""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional


class Colors:
    """ANSI color codes."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


class ColoredFormatter(logging.Formatter):
    """A logging formatter that adds colors to the output."""

    LOG_LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record):
        color = self.LOG_LEVEL_COLORS.get(record.levelno)
        message = super().format(record)
        if color:
            return color + message + Colors.RESET
        return message


class SessionFilter(logging.Filter):
    """Stamp `session_addr` (the connected wallet, or "-") on every record at emit time."""

    def __init__(self, session=None):
        super().__init__()
        self.session = session

    def filter(self, record):
        address = self.session.address if self.session is not None else None
        record.session_addr = address or "-"
        return True


class ConsoleFilter(logging.Filter):
    """Let warnings through, plus the INFO lines a user cares about."""

    INFO_PATTERNS = {
        "cybergraph.mutation": ("Follow", "Unfollow"),
        "cybergraph.store": ("Loaded",),
        "cybergraph.session": ("Session switched",),
    }

    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True

        if record.levelno == logging.INFO:
            patterns = self.INFO_PATTERNS.get(record.name)
            if patterns:
                msg = record.getMessage()
                return any(pattern in msg for pattern in patterns)
            # The CLI script logs under its own name.
            if "follow_graph" in record.name:
                return True

        return False


def setup_logging(
    console_level=logging.INFO,
    file_level=logging.DEBUG,
    quiet=False,
    log_dir: Optional[Path] = None,
    session=None,
):
    """
    Set up logging with a colored, filtered console handler and a verbose
    rotating file handler. Every record carries the address of ``session``
    when one is given.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    session_filter = SessionFilter(session)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level)
        console_handler.setFormatter(
            ColoredFormatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        console_handler.addFilter(ConsoleFilter())
        console_handler.addFilter(session_filter)
        root_logger.addHandler(console_handler)

    log_dir = Path(log_dir or "logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "cybergraph.log", maxBytes=5 * 1024 * 1024, backupCount=5
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d [%(session_addr)s]: %(message)s"
        )
    )
    file_handler.addFilter(session_filter)
    root_logger.addHandler(file_handler)

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Colored and filtered logging initialized.")
