import logging
import logging.config
from pathlib import Path
from typing import Optional, Union

NAME = "securecrypt"


def setup_logging(level: str = "WARNING", log_file: Optional[Union[str, Path]] = None,
                  console: bool = True) -> logging.Logger:
    """
    Configure the ``securecrypt`` logger tree.

    Console output goes to stderr so it never mixes with results on stdout;
    the optional file handler captures everything down to DEBUG.
    """
    handlers = {}
    if console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": "ext://sys.stderr",
            "level": level.upper(),
        }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "plain",
            "filename": str(log_file),
            "encoding": "utf-8",
            "level": "DEBUG",
        }
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "{asctime} {levelname:<7} {name} - {message}", "style": "{"},
            "console": {"format": "{levelname:<7} {message}", "style": "{"},
        },
        "handlers": handlers,
        "loggers": {
            NAME: {
                "level": "DEBUG" if log_file else level.upper(),
                "handlers": list(handlers),
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(config)
    return logging.getLogger(NAME)
