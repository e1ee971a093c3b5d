import sys
import os
from pathlib import Path
from loguru import logger

# Flag to track if logging has been configured
_logging_configured = False

LOG_DIR = Path(".argus") / "logs"
LOG_FILE_NAME = "argus.log"


def _truthy_env(name):
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def resolve_log_dir(log_dir=None):
    """
    Directory for the file sink: explicit argument, then ARGUS_LOG_DIR, then
    .argus/logs under the current working directory.
    """
    if log_dir is not None:
        return Path(log_dir)
    env_dir = os.getenv("ARGUS_LOG_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.cwd() / LOG_DIR


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, log_dir=None):
    """
    Configures the global logger.

    Console logging goes to stderr unless suppressed. File logging is opt-in via
    ARGUS_FILE_LOGGING=1 or enable_file_logging=True.

    Args:
        level: Console logging level (default: INFO)
        suppress_console: If True, suppress console logging. If None, check ARGUS_MACHINE_MODE env var.
        enable_file_logging: If True, enable file logging. If None, check ARGUS_FILE_LOGGING env var.
        log_dir: Directory for argus.log. If None, check ARGUS_LOG_DIR, then use ./.argus/logs.
    """
    global _logging_configured

    # Only configure once to avoid duplicate handlers
    if _logging_configured:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = _truthy_env("ARGUS_MACHINE_MODE")

    # Agents read stdout, so the console stream is always stderr
    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True
        )

    if enable_file_logging is None:
        enable_file_logging = _truthy_env("ARGUS_FILE_LOGGING")

    if enable_file_logging:
        target_dir = resolve_log_dir(log_dir)
        target_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            target_dir / LOG_FILE_NAME,
            level="INFO",
            rotation="10 MB",
            retention="1 day",
            compression="gz",
            catch=True,
            serialize=False
        )


def reset_logging():
    """Allow setup_logging() to run again (used by the CLI and tests)."""
    global _logging_configured
    _logging_configured = False


# Configure the logger on import (will check env vars for machine mode and file logging)
setup_logging()
