import inspect
import logging
import os

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "dinemap"

# LogRecord attributes that must not be overwritten through 'extra'
_RESERVED_FIELDS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

# Keyword arguments handled by logging itself rather than emitted as fields
_LOGGING_KWARGS = ("exc_info", "stack_info", "stacklevel")


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


class Logger(logging.LoggerAdapter):
    """Process-wide JSON logger; keyword arguments become JSON fields."""

    _instance = None
    _initialized = False

    def __new__(cls) -> "Logger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if Logger._initialized:
            return

        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(message)s",
            rename_fields={"asctime": "@timestamp", "levelname": "log_level"},
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(_resolve_level(os.getenv("LOG_LEVEL", "INFO")))
        logger.addHandler(handler)
        logger.propagate = False

        super().__init__(logger)
        Logger._initialized = True

    def _caller(self) -> str:
        # Two frames up: the caller of error()/exception()
        frame = inspect.currentframe()
        caller = frame.f_back.f_back if frame and frame.f_back else None
        if caller is None:
            return "unknown:0"
        return f"{caller.f_code.co_filename}:{caller.f_lineno}"

    def error(self, msg: str, *args: tuple, **kwargs: dict) -> None:
        """Log at ERROR level with the caller's file and line."""
        kwargs["file"] = self._caller()
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(
        self, msg: str, *args: tuple, exc_info: bool = True, **kwargs: dict
    ) -> None:
        """Log at ERROR level with traceback and the caller's file and line."""
        kwargs["file"] = self._caller()
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        result_kwargs = {
            key: kwargs.pop(key)
            for key in _LOGGING_KWARGS
            if kwargs.get(key) is not None
        }
        for key in _LOGGING_KWARGS:
            kwargs.pop(key, None)

        if kwargs:
            result_kwargs["extra"] = {
                (f"{key}_" if key in _RESERVED_FIELDS else key): value
                for key, value in kwargs.items()
            }
        return msg, result_kwargs


def preview(text: str | None, length: int = 50) -> str:
    """Shorten text for log fields."""
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[:length] + "..."


logger = Logger()
logger.debug(
    f"Logging level set to {logging.getLevelName(logger.logger.getEffectiveLevel())}"
)
