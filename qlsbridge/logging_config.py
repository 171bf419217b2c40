import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%m/%d/%Y %H:%M:%S"


def setup_logging(log_file: Optional[str] = None, level: str = "INFO") -> logging.Logger:
    """Configure the ``qlsbridge`` logger.

    Records go to ``log_file`` (appended) when one is given, otherwise to stderr.
    Calling this again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger("qlsbridge")
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_qlsbridge", False):
            logger.removeHandler(handler)
            handler.close()

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler._qlsbridge = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
