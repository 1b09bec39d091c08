"""
Logging setup for the suite backend.
"""

import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# PUBLIC_INTERFACE
def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a single stream handler.

    Calling this more than once replaces the handler instead of stacking them.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        if getattr(handler, "_suite_api", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._suite_api = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
