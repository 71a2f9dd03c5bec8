import os
import sys
import time
from typing import Optional

from loguru import logger

# Remove loguru's default handler to avoid duplicate logging outputs
logger.remove()

logger.level("DEBUG", color="<d>")
logger.level("INFO", color="<k>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red>")

LEVEL_ENV_VAR = "MCMC_VIZ_LOG_LEVEL"

_START_TIME = time.time()


def _format(record) -> str:
    elapsed = int(time.time() - _START_TIME)
    minutes = elapsed // 60
    seconds = elapsed % 60
    elapsed_str = f"{minutes:02d}:{seconds:02d}"
    level_name = record["level"].name
    level_part = f"<bold><level>{level_name}</level></bold>"
    message_part = f"<level>{record['message']}</level>"
    return (
        f"|{elapsed_str}| <blue>mcmc_viz</blue> | {level_part} | "
        f"{message_part}\n"
    )


def _default_level() -> str:
    return os.getenv(LEVEL_ENV_VAR, "INFO").strip().upper() or "INFO"


# Single stdout sink; handler id kept for dynamic level changes
_level = _default_level()
_handler_id = logger.add(sys.stdout, format=_format, level=_level)


def get_level() -> str:
    return _level


def set_level(level: Optional[str] = None):
    """Replace the stdout sink with one at ``level``.

    ``None`` re-reads ``MCMC_VIZ_LOG_LEVEL`` (default ``INFO``).
    """
    global _handler_id, _level
    level = _default_level() if level is None else level.strip().upper()
    try:
        logger.remove(_handler_id)
    except ValueError:
        # handler already gone, clear whatever is left
        logger.remove()
    _handler_id = logger.add(sys.stdout, format=_format, level=level)
    _level = level
