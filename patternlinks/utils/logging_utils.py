import copy
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .colors import Colors
from .structured_logging import JSONFormatter

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """
    Custom formatter to add colors to log levels and specific messages.
    Link creation is highlighted, guard trips stand out, scan chatter is dimmed.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.GREY,
        logging.INFO: Colors.BLUE,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED
    }

    def format(self, record):
        # Copy so other handlers (the log file) never see ANSI codes
        record = copy.copy(record)

        color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"

        if isinstance(record.msg, str):
            if record.msg.startswith("Guard tripped"):
                record.msg = f"{Colors.MAGENTA}{Colors.BOLD}{record.msg}{Colors.RESET}"
            elif record.msg.startswith("Scanning") or record.msg.startswith("Debounced"):
                record.msg = f"{Colors.GREY}{record.msg}{Colors.RESET}"
            elif record.msg.startswith("Link created"):
                record.msg = f"{Colors.GREEN}{record.msg}{Colors.RESET}"

        return super().format(record)


def setup_logging(debug_config) -> logging.Logger:
    """
    Configure the root logger from a DebugConfig.

    Console output goes to stderr (stdout carries the links).  With file
    logging enabled a size-rotated file is added, formatted as JSON when
    ``log_format`` is ``json``.

    Returns:
        The "PatternLinks" logger.
    """
    level_name = str(debug_config.log_level).upper()
    level = logging._nameToLevel.get(level_name, logging.INFO)
    if debug_config.enabled:
        level = logging.DEBUG

    console = logging.StreamHandler(sys.stderr)
    if sys.stderr.isatty():
        console.setFormatter(ColoredFormatter(LOG_FORMAT))
    else:
        console.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers = [console]

    if debug_config.file_logging:
        log_path = Path(debug_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max(1, debug_config.log_file_max_size) * 1024 * 1024,
            backupCount=1,
            encoding="utf-8",
        )
        if debug_config.log_format == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    logger = logging.getLogger("PatternLinks")
    if level_name not in logging._nameToLevel:
        logger.warning("Invalid log level '%s'; defaulting to INFO", debug_config.log_level)
    return logger
