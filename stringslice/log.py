"""structlog configuration for stringslice.

The library only emits `debug` events where a new buffer is allocated. Its
loggers wrap stdlib loggers directly, so nothing is printed until an
application installs handlers, for example through `configure_logging`:

- Human (default): colored console lines on stderr
- JSON (`log_json=True`): structured JSON lines on stderr
"""

import logging
import os
import sys
from typing import Final, List

import structlog

LOGGER_NAME: Final[str] = "stringslice"
DEFAULT_LEVEL: Final[str] = os.environ.get("STRINGSLICE_LOG_LEVEL", "WARNING").upper()


def get_logger(name: str = LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(verbose: bool = False, log_json: bool = False) -> None:
    """Route `stringslice` log records to stderr.

    Args:
        verbose: Enable DEBUG-level output. Otherwise `STRINGSLICE_LOG_LEVEL`
            decides, defaulting to WARNING.
        log_json: Use the JSON renderer instead of the console renderer.
    """
    level = logging.DEBUG if verbose else logging.getLevelName(DEFAULT_LEVEL)
    if not isinstance(level, int):
        level = logging.WARNING

    pre_chain: List[structlog.types.Processor] = [
        structlog.stdlib.ExtraAdder(),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAME).setLevel(level)
