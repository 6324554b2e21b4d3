"""Utilities related to logging."""

import io
import logging
import logging.config
import os
import sys
import threading
from importlib import resources
from typing import Any, Callable, Mapping, Optional, Tuple

import yaml
from pythonjsonlogger import jsonlogger

from .error import LoggerAlreadyInitializedError

DEFAULT_LOGGING_CONFIG_PATH_INI = "aries_credx.config:default_logging_config.ini"
LOG_FILTER_ENV_VAR = "CREDX_LOG"
LOG_FORMAT = "{levelname:>5}|{name:<30}|{pathname:>35}:{lineno:<4}| {message}"
LOG_FORMAT_JSON = "%(levelname)s %(name)s %(pathname)s %(lineno)d %(message)s"

TRACE = 5
OFF = logging.CRITICAL + 10
logging.addLevelName(TRACE, "TRACE")

LEVELS = {
    "off": OFF,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

# numeric severities reported to callback sinks
LEVEL_ERROR = 1
LEVEL_WARN = 2
LEVEL_INFO = 3
LEVEL_DEBUG = 4
LEVEL_TRACE = 5

EnabledCallback = Callable[[Any, int, str], bool]
LogCallback = Callable[[Any, int, str, str, Optional[str], Optional[str], int], None]
FlushCallback = Callable[[Any], None]


def callback_level(levelno: int) -> int:
    """Map a python logging level to the severity reported to callbacks."""
    if levelno >= logging.ERROR:
        return LEVEL_ERROR
    if levelno >= logging.WARNING:
        return LEVEL_WARN
    if levelno >= logging.INFO:
        return LEVEL_INFO
    if levelno >= logging.DEBUG:
        return LEVEL_DEBUG
    return LEVEL_TRACE


def parse_filter_pattern(pattern: Optional[str]) -> Tuple[int, Mapping[str, int]]:
    """
    Parse a log filter pattern.

    The pattern is a comma separated list of directives, each either a bare
    level applying to all loggers or `target=level` for a logger and its
    children, for example `warn,aries_credx.encoding=trace`. Directives that
    cannot be parsed are ignored.

    Args:
        pattern: The filter pattern, may be empty

    Returns:
        A tuple of the default level and a mapping of logger name to level

    """
    default = OFF
    targets = {}
    for directive in (pattern or "").split(","):
        directive = directive.strip()
        if not directive:
            continue
        target, sep, level = directive.partition("=")
        if not sep:
            level = LEVELS.get(target.lower())
            if level is not None:
                default = level
            else:
                # a bare target enables everything for it
                targets[target] = TRACE
            continue
        level = LEVELS.get(level.strip().lower())
        if target and level is not None:
            targets[target.strip()] = level
    return default, targets


class CallbackLogHandler(logging.Handler):
    """Log handler forwarding records to host-provided callbacks."""

    def __init__(
        self,
        context: Any,
        log: LogCallback,
        enabled: EnabledCallback = None,
        flush: FlushCallback = None,
        level: int = logging.NOTSET,
    ):
        """
        Initialize the handler.

        Args:
            context: Opaque value passed back to every callback
            log: Called with (context, level, target, message, module, file, line)
            enabled: Optional check called with (context, level, target)
            flush: Optional callback called with (context) on flush
            level: Minimum python logging level handled

        """
        super().__init__(level)
        self.context = context
        self.log_callback = log
        self.enabled_callback = enabled
        self.flush_callback = flush

    def filter(self, record: logging.LogRecord) -> bool:
        """Apply handler filters then the enabled callback."""
        if not super().filter(record):
            return False
        if self.enabled_callback:
            return bool(
                self.enabled_callback(
                    self.context, callback_level(record.levelno), record.name
                )
            )
        return True

    def emit(self, record: logging.LogRecord):
        """Forward a record to the log callback."""
        try:
            self.log_callback(
                self.context,
                callback_level(record.levelno),
                record.name,
                record.getMessage(),
                record.module,
                record.pathname,
                record.lineno or 0,
            )
        except Exception:
            self.handleError(record)

    def flush(self):
        """Invoke the flush callback, if any."""
        if self.flush_callback:
            self.flush_callback(self.context)


def load_resource(path: str, encoding: str = None):
    """Open a resource file located in a python package or the local filesystem.

    Args:
        path: The resource path in the form of `dir/file` or `package:dir/file`
        encoding: Text encoding, opens in binary mode when not given
    Returns:
        A file-like object representing the resource
    """
    components = path.rsplit(":", 1)
    try:
        if len(components) == 1:
            # Local filesystem resource
            return open(components[0], encoding=encoding)
        else:
            # Package resource
            package, resource = components
            bstream = resources.files(package).joinpath(resource).open("rb")
            if encoding:
                return io.TextIOWrapper(bstream, encoding=encoding)
            return bstream
    except (IOError, ModuleNotFoundError):
        pass


class LoggingConfigurator:
    """Utility class used to configure logging."""

    default_config_path_ini = DEFAULT_LOGGING_CONFIG_PATH_INI

    _installed = False
    _install_lock = threading.Lock()

    @classmethod
    def _claim_sink(cls):
        with cls._install_lock:
            if cls._installed:
                raise LoggerAlreadyInitializedError("Logger is already initialized")
            cls._installed = True

    @classmethod
    def init_callback(
        cls,
        context: Any,
        log: LogCallback,
        enabled: EnabledCallback = None,
        flush: FlushCallback = None,
        logger: logging.Logger = None,
    ) -> CallbackLogHandler:
        """
        Install a callback log sink for the process.

        Args:
            context: Opaque value passed back to every callback
            log: Record callback
            enabled: Optional enabled check callback
            flush: Optional flush callback
            logger: Logger to attach to, the root logger by default

        Returns:
            The installed handler

        Raises:
            LoggerAlreadyInitializedError: If a sink was already installed

        """
        cls._claim_sink()
        logger = logger or logging.getLogger()
        handler = CallbackLogHandler(context, log, enabled, flush)
        logger.addHandler(handler)
        logger.setLevel(TRACE)
        return handler

    @classmethod
    def init_default(
        cls,
        pattern: str = None,
        json_format: bool = False,
        stream=None,
        logger: logging.Logger = None,
    ) -> logging.Handler:
        """
        Install the default stream log sink for the process.

        Args:
            pattern: Filter pattern, falls back to the `CREDX_LOG` environment
                variable; everything is disabled when neither is set
            json_format: Emit JSON records instead of the column format
            stream: Output stream, stderr by default
            logger: Logger to attach to, the root logger by default

        Returns:
            The installed handler

        Raises:
            LoggerAlreadyInitializedError: If a sink was already installed

        """
        cls._claim_sink()
        if pattern is None:
            pattern = os.getenv(LOG_FILTER_ENV_VAR)
        default_level, targets = parse_filter_pattern(pattern)

        logger = logger or logging.getLogger()
        handler = logging.StreamHandler(stream or sys.stderr)
        if json_format:
            handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT_JSON))
        else:
            handler.setFormatter(logging.Formatter(LOG_FORMAT, style="{"))
        logger.addHandler(handler)
        logger.setLevel(default_level)
        for target, level in targets.items():
            logging.getLogger(target).setLevel(level)
        return handler

    @classmethod
    def configure(
        cls,
        log_config_path: str = None,
        log_level: str = None,
        log_file: str = None,
    ):
        """Configure logger from a config file.

        :param log_config_path: str: (Default value = None) Optional path to
            custom logging config, YAML (dict config) or INI

        :param log_level: str: (Default value = None)

        :param log_file: str: (Default value = None) Optional file name to write logs to
        """
        log_config, is_dict_config = cls._load_log_config(
            log_config_path or cls.default_config_path_ini
        )

        if not log_config:
            logging.basicConfig(level=logging.WARNING)
            logging.root.warning(f"Logging config file not found: {log_config_path}")
        elif is_dict_config:
            logging.config.dictConfig(log_config)
        else:
            with log_config:
                logging.config.fileConfig(log_config, disable_existing_loggers=False)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT_JSON))
            logging.root.handlers.append(file_handler)

        if log_level:
            logging.root.setLevel(log_level.upper())

    @classmethod
    def _load_log_config(cls, log_config_path):
        if ".yml" in log_config_path or ".yaml" in log_config_path:
            with open(log_config_path, "r") as stream:
                return yaml.safe_load(stream), True
        return load_resource(log_config_path, "utf-8"), False
