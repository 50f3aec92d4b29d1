import os
import sys
from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

_logging_configured = False


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, force=False):
    """
    Configure the global loguru logger.

    Console output goes to stderr so it never mixes with --json output on
    stdout. The file sink under .inscribe/logs/ is opt-in.

    Args:
        level: Console level (default: INFO)
        suppress_console: Drop the console sink. None reads INSCRIBE_MACHINE_MODE.
        enable_file_logging: Add the file sink. None reads INSCRIBE_FILE_LOGGING.
        force: Reconfigure even if logging was already set up.

    Environment:
        INSCRIBE_FILE_LOG_LEVEL: file sink level (default: INFO)
        INSCRIBE_LOG_JSON: write the file sink as JSON lines
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = _env_flag("INSCRIBE_MACHINE_MODE")
    if not suppress_console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if enable_file_logging is None:
        enable_file_logging = _env_flag("INSCRIBE_FILE_LOGGING")
    if enable_file_logging:
        from inscribe.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        logger.add(
            paths.logs_dir / "inscribe.log",
            level=os.getenv("INSCRIBE_FILE_LOG_LEVEL", "INFO").upper(),
            rotation="5 MB",
            retention=3,
            compression="gz",
            enqueue=True,
            catch=True,
            serialize=_env_flag("INSCRIBE_LOG_JSON"),
        )


# Configure on import; INSCRIBE_MACHINE_MODE decides whether the console sink is added
setup_logging()
