"""JSON logging for the whole service through one shared adapter."""

import inspect
import logging
import os

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "carecoord"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Keyword arguments logging understands itself; anything else becomes a field.
_LOGGING_KWARGS = ("exc_info", "stack_info", "stacklevel")


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            LOG_FORMAT,
            rename_fields={"asctime": "@timestamp", "levelname": "log_level"},
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


class Logger(logging.LoggerAdapter):
    """
    Process-wide adapter: ``logger.info("msg", table="x")`` logs ``table`` as a field.

    Level comes from LOG_LEVEL (default INFO).
    """

    _instance: "Logger | None" = None

    def __new__(cls) -> "Logger":
        if cls._instance is None:
            base = logging.getLogger(LOGGER_NAME)
            level = os.getenv("LOG_LEVEL", "INFO").upper()
            base.setLevel(logging.getLevelNamesMapping().get(level, logging.INFO))
            base.addHandler(_json_handler())
            base.propagate = False

            instance = super().__new__(cls)
            logging.LoggerAdapter.__init__(instance, base)
            cls._instance = instance
        return cls._instance

    def __init__(self) -> None:
        # Configured once in __new__.
        pass

    @staticmethod
    def _caller_location() -> str:
        # Two frames up: the adapter method, then its caller.
        frame = inspect.currentframe()
        caller = frame.f_back.f_back if frame and frame.f_back else None
        if caller is None:
            return "unknown:0"
        return f"{caller.f_code.co_filename}:{caller.f_lineno}"

    def error(self, msg, *args, **kwargs) -> None:
        """ERROR record tagged with the calling file and line."""
        kwargs.setdefault("file", self._caller_location())
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg, *args, exc_info=True, **kwargs) -> None:
        """ERROR record with traceback, tagged with the calling file and line."""
        kwargs.setdefault("file", self._caller_location())
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def process(self, msg, kwargs):
        passthrough = {}
        for key in _LOGGING_KWARGS:
            value = kwargs.pop(key, None)
            if value is not None:
                passthrough[key] = value
        if kwargs:
            passthrough["extra"] = kwargs
        return msg, passthrough


logger = Logger()
