"""
Process-wide logging setup.

Logs go to stderr only. Module loggers are obtained with
``logging.getLogger(__name__)`` everywhere else; this module merely
binds the root handler once at startup.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        format=LOG_FORMAT,
    )
