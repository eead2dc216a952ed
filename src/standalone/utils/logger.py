import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from standalone.models.enums import LogLevel, LogCategory
from standalone.utils.enum_helper import EnumHelper

# === ANSI COLORS ===
class Colors:
    """ANSI escape codes for colored terminal output"""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    # Foreground colors
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    # Bright foreground colors
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_MAGENTA = '\033[95m'
    BRIGHT_CYAN = '\033[96m'
    BRIGHT_WHITE = '\033[97m'


CATEGORY_COLORS = {
    LogCategory.CONFIG: Colors.CYAN,
    LogCategory.LOG_SETUP: Colors.BRIGHT_CYAN,
    LogCategory.SIGNAL: Colors.BRIGHT_MAGENTA,
    LogCategory.LIFECYCLE: Colors.BRIGHT_BLUE,
    LogCategory.SHUTDOWN: Colors.MAGENTA,
    LogCategory.SYSTEM: Colors.BRIGHT_WHITE,
}

LEVEL_SYMBOLS = {
    LogLevel.TRACE: '∙',
    LogLevel.DEBUG: '·',
    LogLevel.INFO: '✓',
    LogLevel.WARN: '⚠',
    LogLevel.ERROR: '✗',
}

LEVEL_COLORS = {
    LogLevel.TRACE: Colors.DIM,
    LogLevel.DEBUG: Colors.DIM,
    LogLevel.INFO: Colors.GREEN,
    LogLevel.WARN: Colors.YELLOW,
    LogLevel.ERROR: Colors.RED,
}

LEVEL_PRIORITY = {
    LogLevel.TRACE: 0,
    LogLevel.DEBUG: 1,
    LogLevel.INFO: 2,
    LogLevel.WARN: 3,
    LogLevel.ERROR: 4,
    LogLevel.OFF: 5,
}

DETAIL_INDENT = " " * 11


def parse_log_level(value: Union[str, LogLevel]) -> LogLevel:
    """
    Parse a level name ("error", "warn", "info", "debug", "trace", "off").

    "warning" is accepted as an alias of WARN.

    Raises:
        ValueError: unknown level name
    """
    if isinstance(value, LogLevel):
        return value
    return EnumHelper.from_string(LogLevel, value, aliases={"WARNING": LogLevel.WARN})


# === CORE LOGGER ===
class Logger:
    """
    Structured logger with compact output format

    Format:
    [HH:MM:SS] CATEGORY · Message
               ├─ Detail 1
               └─ Detail 2

    Example:
    [14:23:45] CONFIG    · adding configuration directory
               └─ path: /usr/local/etc/constellation/

    Output goes to the console (stdout) and, once a log configuration file
    has been loaded, optionally to a file as well. File output is never
    colorized.
    """

    def __init__(self, min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
        """
        Initialize logger

        Args:
            min_level: Minimum log level to display
            use_colors: Enable ANSI color codes on the console
        """
        self.min_level = min_level
        self.use_colors = use_colors
        self.console = True
        self.category_levels: Dict[LogCategory, LogLevel] = {}
        self._file: Optional[TextIO] = None
        self._file_path: Optional[Path] = None

    @property
    def file_path(self) -> Optional[Path]:
        return self._file_path

    def is_enabled_for(self, category: LogCategory, level: LogLevel) -> bool:
        """Check if message should be logged based on level (and category override)"""
        if level is LogLevel.OFF:
            return False
        threshold = self.category_levels.get(category, self.min_level)
        return LEVEL_PRIORITY[level] >= LEVEL_PRIORITY[threshold]

    def _colorize(self, text: str, color: str, colors: bool) -> str:
        """Apply color to text if colors enabled"""
        if not colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def _format_timestamp(self) -> str:
        """Format current time as [HH:MM:SS]"""
        return datetime.now().strftime('[%H:%M:%S]')

    def _format_lines(
        self,
        timestamp: str,
        category: LogCategory,
        level: LogLevel,
        message: str,
        details: List[str],
        trace_lines: List[str],
        colors: bool,
    ) -> List[str]:
        cat = self._colorize(category.name.ljust(9), CATEGORY_COLORS.get(category, Colors.WHITE), colors)
        sym = self._colorize(LEVEL_SYMBOLS.get(level, '·'), LEVEL_COLORS.get(level, Colors.WHITE), colors)
        msg = self._colorize(message, LEVEL_COLORS.get(level, Colors.WHITE), colors)

        lines = [f"{timestamp} {cat} {sym} {msg}"]

        # Details with tree structure, last item gets a different tree character
        for i, d in enumerate(details):
            tree = "└─" if i == len(details) - 1 else "├─"
            lines.append(f"{DETAIL_INDENT}{self._colorize(tree, Colors.DIM, colors)} {d}")

        for t in trace_lines:
            lines.append(f"{DETAIL_INDENT}{self._colorize(t, Colors.DIM, colors)}")

        return lines

    def _trace_lines(self, exc_info) -> List[str]:
        if not exc_info:
            return []
        if isinstance(exc_info, BaseException):
            exc = exc_info
        else:
            exc = sys.exc_info()[1]
        if exc is None:
            return []
        formatted = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return [line for chunk in formatted for line in chunk.rstrip("\n").split("\n")]

    # === Sinks ===
    def set_file(self, path: Union[str, Path], append: bool = True) -> None:
        """
        Start writing log lines to a file (replacing any previous file sink).

        Raises:
            OSError: file cannot be opened
        """
        path = Path(path)
        handle = open(path, "a" if append else "w", encoding="utf-8")
        self.close_file()
        self._file = handle
        self._file_path = path

    def close_file(self) -> None:
        if self._file is not None:
            self._file.close()
        self._file = None
        self._file_path = None

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[list] = None,
        exc_info=False,
        **kwargs
    ):
        """
        Log a structured message

        Args:
            category: Log category (CONFIG, SIGNAL, etc.)
            message: Main message text
            level: Log level (TRACE, DEBUG, INFO, WARN, ERROR)
            details: List of detail strings to show below message
            exc_info: True for the exception being handled, or an exception
                instance; its traceback is printed below the details
            **kwargs: Additional key-value pairs to show as details

        Example:
            logger.log(
                LogCategory.CONFIG,
                "loading config file",
                level=LogLevel.DEBUG,
                path="/etc/constellation/echo.yaml"
            )

            Output:
            [14:23:45] CONFIG    · loading config file
                       └─ path: /etc/constellation/echo.yaml
        """
        self._emit(category, message, level, details, exc_info, kwargs)

    def _emit(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel,
        details: Optional[list],
        exc_info,
        fields: Dict[str, Any],
    ) -> None:
        # Every key in fields is a detail, including "level" or "category"
        if not self.is_enabled_for(category, level):
            return

        all_details = list(details or [])
        for k, v in fields.items():
            all_details.append(f"{k}: {v}")

        timestamp = self._format_timestamp()
        trace_lines = self._trace_lines(exc_info)

        if self.console:
            for line in self._format_lines(timestamp, category, level, message,
                                           all_details, trace_lines, self.use_colors):
                print(line, flush=True)

        if self._file is not None:
            for line in self._format_lines(timestamp, category, level, message,
                                           all_details, trace_lines, False):
                self._file.write(line + "\n")
            self._file.flush()

    def _shortcut(self, category: LogCategory, message: str, level: LogLevel, kw: Dict[str, Any]) -> None:
        details = kw.pop("details", None)
        exc_info = kw.pop("exc_info", False)
        self._emit(category, message, level, details, exc_info, kw)

    # === Level helpers ===
    def trace(self, category: LogCategory, message: str, **kw): self._shortcut(category, message, LogLevel.TRACE, kw)
    def debug(self, category: LogCategory, message: str, **kw): self._shortcut(category, message, LogLevel.DEBUG, kw)
    def info(self, category: LogCategory, message: str, **kw): self._shortcut(category, message, LogLevel.INFO, kw)
    def warn(self, category: LogCategory, message: str, **kw): self._shortcut(category, message, LogLevel.WARN, kw)
    def error(self, category: LogCategory, message: str, **kw): self._shortcut(category, message, LogLevel.ERROR, kw)

    # === Contextual logger creation ===
    def for_category(self, category: LogCategory) -> 'BoundLogger':
        """Return a contextual logger bound to a specific category."""
        return BoundLogger(self, category)


class BoundLogger:
    """Logger bound to a default category, with ability to override if needed."""

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self._category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, category: Optional[LogCategory] = None, **kw):
        """Allows overriding category if necessary."""
        self._base.log(category or self._category, message, level, **kw)

    def _shortcut(self, message: str, level: LogLevel, kw: Dict[str, Any]) -> None:
        category = kw.pop("category", None) or self._category
        self._base._shortcut(category, message, level, kw)

    # Shortcut methods
    def trace(self, message: str, **kw): self._shortcut(message, LogLevel.TRACE, kw)
    def debug(self, message: str, **kw): self._shortcut(message, LogLevel.DEBUG, kw)
    def info(self, message: str, **kw): self._shortcut(message, LogLevel.INFO, kw)
    def warn(self, message: str, **kw): self._shortcut(message, LogLevel.WARN, kw)
    def error(self, message: str, **kw): self._shortcut(message, LogLevel.ERROR, kw)

    def with_category(self, category: LogCategory) -> 'BoundLogger':
        """Create another bound logger from this one."""
        return BoundLogger(self._base, category)


# === Global instance helpers ===
_logger = Logger()

def get_logger() -> Logger:
    return _logger

def get_category_logger(category: LogCategory) -> BoundLogger:
    """Returns a logger bound to a specific category"""
    return _logger.for_category(category)

def configure_logger(
    min_level: Optional[LogLevel] = None,
    use_colors: Optional[bool] = None,
    console: Optional[bool] = None,
    category_levels: Optional[Dict[LogCategory, LogLevel]] = None,
    logger: Optional[Logger] = None,
) -> Logger:
    """
    Configure the logger singleton (modify in-place, don't create new instance).

    Arguments left as None keep their current value. Module-level bound
    loggers created with for_category() keep working after reconfiguration.
    Pass `logger` to configure a different instance (tests).
    """
    target = logger if logger is not None else _logger
    if min_level is not None:
        target.min_level = min_level
    if use_colors is not None:
        target.use_colors = use_colors
    if console is not None:
        target.console = console
    if category_levels is not None:
        target.category_levels = dict(category_levels)
    return target
