import logging
from typing import Union

from scopedfs.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] [cwd=%(cwd)s] %(message)s"


# --- Custom Logging Filter ---
# Records emitted by ScopedFileSystem carry the handle's working directory as
# 'cwd'. Records from anywhere else do not, so the filter fills in a
# placeholder before the formatter runs.
class ScopedFsLogFilter(logging.Filter):
    """
    A logging filter that ensures 'cwd' and a normalized 'name'
    are present on log records for consistent formatting.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        current_cwd = getattr(record, "cwd", None)
        if current_cwd is None:
            record.cwd = "-"
        else:
            record.cwd = str(current_cwd)

        current_logger_name = getattr(record, "name", None)
        if not current_logger_name or current_logger_name == "root":
            record.name = "DefaultLogger"
        else:
            record.name = str(current_logger_name)

        return True


def parse_log_level(level: Union[int, str]) -> int:
    """
    Convert a logging level name or number to its numeric value.

    Raises:
        ConfigurationError: If ``level`` is not a known level name
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ConfigurationError(
            f"Unknown log level: {level!r}",
            setting="log_level",
            value=level,
            valid_values=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        )
    return value


# --- Logging Setup Utility ---
def init_logging(
    level: Union[int, str] = logging.INFO, clear_existing_handlers: bool = True
) -> None:
    """
    Sets up a console logging configuration for scopedfs.

    Args:
        level: The desired logging level for the root logger, as a number or
               a level name such as "DEBUG".
        clear_existing_handlers: If True, removes any handlers already attached to the
                                 root logger, preventing duplicate output when
                                 called more than once.
    """
    numeric_level = parse_log_level(level)
    root_logger = logging.getLogger()

    if clear_existing_handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    stream_handler.addFilter(ScopedFsLogFilter())

    root_logger.addHandler(stream_handler)
    root_logger.setLevel(numeric_level)

    logger.debug(
        f"Logging setup complete. Root logger level set to {logging.getLevelName(numeric_level)}."
    )
