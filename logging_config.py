"""
Logging setup for the globe viewer.

Every module logs under its own name (`globe`, `geodata`, `countries`, ...),
so handlers are attached to the root logger once, from `globe.main`.
"""
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, Union

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%H:%M:%S'

# Third-party loggers that are chatty at INFO/DEBUG (connection pool events)
NOISY_LOGGERS = ('urllib3',)


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None,
                  quiet: Iterable[str] = NOISY_LOGGERS) -> logging.Logger:
    """
    Send globe logs to stdout and, optionally, to a file.

    Args:
        level: Level number or name ("DEBUG", "INFO", ...)
        log_file: Also append records to this file; parent folders are created
        quiet: Loggers held at WARNING or above whatever `level` is

    Returns:
        The configured root logger
    """
    if isinstance(level, str):
        name, level = level, logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    root.debug("Logging to %s", log_file or "stdout only")
    return root
