"""
Centralized Logging Module for the XLIFF inspection tools.

Provides consistent logging across all modules with output to:
- Console (stderr, INFO and above, for CLI users)
- File (logs/xliffgate.log for post-mortem analysis of scans)
"""
import logging
import os
import sys

# Log directory defaults to <project>/logs, XLIFFGATE_LOG_DIR overrides it
LOG_DIR = os.environ.get(
    "XLIFFGATE_LOG_DIR",
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs"),
)
LOG_FILE = os.path.join(LOG_DIR, "xliffgate.log")

# Formatter with timestamp, level, module, and message
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s() | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """
    Returns a configured logger instance.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        A logging.Logger instance configured for file and console output.
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    # File Handler - captures everything (DEBUG and above)
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    except OSError as e:
        # Console logging only when the log directory is not writable
        sys.stderr.write(f"Cannot open log file {LOG_FILE}: {e}\n")
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Console Handler - only INFO and above, on stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def setup_exception_hook():
    """
    Installs a global exception hook to log uncaught exceptions before exit.
    Call this once at CLI startup.
    """
    root_logger = get_logger("CRASH")

    def exception_hook(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            # Allow Ctrl+C to exit without logging
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        root_logger.critical("Uncaught exception!", exc_info=(exc_type, exc_value, exc_tb))
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = exception_hook
