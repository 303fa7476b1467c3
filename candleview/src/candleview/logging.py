import logging
import sys

# requests logs every connection at DEBUG through urllib3
_NOISY_LOGGERS = ("urllib3",)

def configure_logging(level=logging.INFO, stream=None):
    """
    Configure candleview diagnostics on stderr.
    Rejected rows and timestamp fallbacks are logged at DEBUG/WARNING,
    so pass level=logging.DEBUG to see every dropped row.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if root_logger.handlers:
        root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def level_for(verbose: int, quiet: bool = False) -> int:
    """Map -v/-q style CLI flags to a logging level."""
    if quiet:
        return logging.ERROR
    if verbose >= 1:
        return logging.DEBUG
    return logging.INFO
