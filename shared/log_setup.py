"""On-demand logging setup for the advisor and chat loggers."""
import logging
from pathlib import Path

LOGGER_NAMES = ("advisor", "chat")


def enable_logging(level: int = logging.INFO, to_console: bool = True, to_file: bool = True) -> None:
    """Enable advisor logging on demand.

    Adds console and file handlers to the 'advisor' and 'chat' loggers. Safe to call multiple times.
    """
    fmt = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handlers: list[logging.Handler] = []
    if to_file:
        log_dir = Path(__file__).parent.parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "advisor.log", encoding="utf-8")
        fh.setFormatter(fmt)
        handlers.append(fh)
    if to_console:
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        handlers.append(sh)

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if logger.handlers:
            continue
        for handler in handlers:
            logger.addHandler(handler)
