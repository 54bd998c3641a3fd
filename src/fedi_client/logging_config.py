"""Configure logging for the command-line client."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Send ``fedi_client`` logs to stderr.

    Without ``debug`` only warnings show, so command output stays readable;
    the client logs every failed exchange at WARNING.
    """
    logger = logging.getLogger("fedi_client")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    # main() runs once per invocation, but tests invoke it repeatedly
    for handler in list(logger.handlers):
        if getattr(handler, "_fedi_client", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._fedi_client = True
    logger.addHandler(handler)

    # httpx logs every request at INFO
    wire_level = logging.DEBUG if debug else logging.WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(wire_level)
