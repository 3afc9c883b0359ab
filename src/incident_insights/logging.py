from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
# Third-party loggers that flood DEBUG output while rendering figures.
QUIET_LOGGERS = ("matplotlib", "PIL")


def configure_logging(level: str = "INFO", *, verbose: bool = False) -> None:
    resolved = "DEBUG" if verbose else level.upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
