import inspect
import logging
import os

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "cemtras-api"
PASSTHROUGH_KWARGS = ("exc_info", "stack_info", "stacklevel")


def _level_from_env() -> int:
    """Resolve LOG_LEVEL to a logging level, INFO if unset or unknown."""
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


class Logger(logging.LoggerAdapter):
    """Process-wide JSON logger.

    Keyword arguments passed to a log call become top-level fields of the JSON
    record, e.g. ``logger.info("Saved history", user_id=user.id)``.
    """

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
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={
                "asctime": "@timestamp",
                "levelname": "log_level",
                "name": "logger",
            },
            static_fields={"service": SERVICE_NAME},
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        base = logging.getLogger("cemtras")
        base.setLevel(_level_from_env())
        base.addHandler(handler)

        super().__init__(base)
        Logger._initialized = True

    @staticmethod
    def _caller_location() -> str:
        # two frames up: past this helper and past error()/exception()
        frame = inspect.currentframe()
        caller = frame.f_back.f_back if frame and frame.f_back else None
        if caller is None:
            return "unknown:0"
        return f"{caller.f_code.co_filename}:{caller.f_lineno}"

    def error(self, msg: str, *args: tuple, **kwargs: dict) -> None:
        """Log at ERROR level, tagging the record with the caller's file and line."""
        kwargs["file"] = self._caller_location()
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(
        self, msg: str, *args: tuple, exc_info: bool = True, **kwargs: dict
    ) -> None:
        kwargs["file"] = self._caller_location()
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        log_kwargs = {
            key: kwargs.pop(key) for key in PASSTHROUGH_KWARGS if key in kwargs
        }
        if kwargs:
            log_kwargs["extra"] = kwargs
        return msg, log_kwargs


logger = Logger()
logger.debug(
    "Logger configured",
    log_level=logging.getLevelName(logger.logger.getEffectiveLevel()),
)
