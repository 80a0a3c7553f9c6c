import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Loggers of the HTTP server that share our handler instead of uvicorn's default config.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# SDK transport loggers; they log every request at INFO.
QUIET_LOGGERS = ("httpx", "openai")


class Log:
    """Application logger for the service and the HTTP server it runs in."""

    _logger: logging.Logger = logging.getLogger("fitscore")
    _handler: logging.Handler | None = None

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Attach one stdout handler to the app and server loggers.

        Safe to call more than once; the handler is created on the first call
        and only the level changes afterwards.
        """
        level = log_level.upper()
        if cls._handler is None:
            cls._handler = logging.StreamHandler(sys.stdout)
            cls._handler.setFormatter(logging.Formatter(LOG_FORMAT))

        for name in ("fitscore", *SERVER_LOGGERS):
            logger = logging.getLogger(name)
            logger.setLevel(level)
            logger.propagate = False
            if cls._handler not in logger.handlers:
                logger.addHandler(cls._handler)

        quiet_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(quiet_level)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        """Log an info message."""
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        """Log an error message."""
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log at ERROR with the active exception's traceback."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        """Log a warning message."""
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        cls._logger.debug(message, extra=kwargs)
