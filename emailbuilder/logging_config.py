from loguru import logger
import sys

_logging_initialized = False

LEVEL_NAMES = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _build_format_string(record: dict) -> str:
    """Build format string dynamically based on log level"""
    format_parts = ["<level>{level: <7}</level>", "{time:HH:mm:ss}"]

    # Location only helps when something went wrong or while debugging
    if record["level"].name in ("DEBUG", "WARNING", "ERROR", "CRITICAL"):
        format_parts.append("<cyan>{file.name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>")

    format_parts.append("<level>{message}</level>{exception}")
    return " | ".join(format_parts) + "\n"


def _stderr_sink(message) -> None:
    # sys.stderr is looked up on every write; it may be swapped after setup
    sys.stderr.write(message)


def setup_logging(level: str = "INFO", *, force: bool = False):
    """Setup centralized logging configuration

    Args:
        level (str): Minimum level to show, e.g. "DEBUG" or "WARNING"
        force (bool): Reconfigure even if logging was already set up
    """
    global _logging_initialized

    if _logging_initialized and not force:
        return

    level = level.upper()
    if level not in LEVEL_NAMES:
        level = "INFO"

    # Remove any existing handlers
    logger.remove()

    logger.add(
        _stderr_sink,
        format=lambda record: _build_format_string(record),
        level=level,
        backtrace=True,
        diagnose=False,
    )

    _logging_initialized = True
