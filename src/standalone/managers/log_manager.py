"""
Log Manager

Two-stage logging setup:

1. bootstrap_logger() configures the console logger at the level resolved
   from the command line / environment, so configuration discovery is
   already visible.
2. handoff_logger() looks for a logging configuration file in the
   configuration directories and, if a valid one is found, reconfigures the
   same logger instance from it. Otherwise the bootstrap setup is kept.
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

from standalone.managers.config_manager import ConfigParseError, iter_candidates, parse_document
from standalone.models.log_config import LogConfig
from standalone.utils.logger import Logger, LogCategory, LogLevel, configure_logger, get_logger

log = get_logger().for_category(LogCategory.LOG_SETUP)

DEFAULT_LOG_CONFIG_FILES = ("constellation-log.yaml",)


def _console_supports_color() -> bool:
    stream = sys.stdout
    return stream is not None and hasattr(stream, "isatty") and stream.isatty()


def bootstrap_logger(level: LogLevel, logger: Optional[Logger] = None) -> Logger:
    """
    Reset the logger to console-only output at `level`.

    Returns:
        The logger handle later passed to handoff_logger()
    """
    logger = logger if logger is not None else get_logger()
    logger.close_file()
    configure_logger(
        min_level=level,
        use_colors=_console_supports_color(),
        console=True,
        category_levels={},
        logger=logger,
    )
    log.debug("bootstrap logger initialized", min_level=level.name)
    return logger


def parse_log_config(path: Path) -> LogConfig:
    """
    Load and validate a logging configuration file.

    Relative `file` entries are resolved against the config file's directory.

    Raises:
        ConfigParseError: unreadable, unparseable, or fails validation
    """
    config = parse_document(path, LogConfig)
    if config.file is not None and not config.file.is_absolute():
        config = config.model_copy(update={"file": path.parent / config.file})
    return config


def apply_log_config(logger: Logger, config: LogConfig) -> None:
    """
    Reconfigure `logger` in place.

    Raises:
        OSError: the log file cannot be opened (logger left unchanged)
    """
    if config.file is not None:
        logger.set_file(config.file, append=config.append)
    else:
        logger.close_file()

    configure_logger(
        min_level=config.level,
        use_colors=config.colors,
        console=config.console,
        category_levels=config.categories,
        logger=logger,
    )


def handoff_logger(
    logger: Logger,
    dirs: Sequence[Path],
    names: Sequence[str] = DEFAULT_LOG_CONFIG_FILES,
) -> bool:
    """
    Replace the bootstrap configuration with the first valid log config file.

    Args:
        logger: Handle returned by bootstrap_logger()
        dirs: Configuration directories, in search order
        names: Logging configuration file names, in order of preference

    Returns:
        True if a configuration file was applied, False if the bootstrap
        logger was kept
    """
    log.debug("loading permanent logging configuration")

    for path in iter_candidates(dirs, names, log):
        log.debug("loading log config file", path=path)
        try:
            config = parse_log_config(path)
            apply_log_config(logger, config)
        except ConfigParseError as ex:
            log.error("error loading config file", error=str(ex))
            continue
        except OSError as ex:
            log.error("error opening log file", path=path, error=str(ex))
            continue

        log.debug("permanent logger initialized", path=path)
        return True

    log.debug("keeping bootstrap logger")
    return False
