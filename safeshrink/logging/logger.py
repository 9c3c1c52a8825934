import logging
import sys

LOGGER_NAME = "safeshrink"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class Log:
    """Single logging entry point for admission, scanning and transcoding."""

    _logger: logging.Logger = logging.getLogger(LOGGER_NAME)

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Apply ``log_level`` and attach one stdout handler.

        Repeated calls only change the level.
        """
        cls._logger.setLevel(log_level.upper())
        if any(getattr(h, "_safeshrink", False) for h in cls._logger.handlers):
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._safeshrink = True  # type: ignore[attr-defined]
        cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
