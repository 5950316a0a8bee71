"""Loguru sinks for the plan engine.

Engine modules log plain messages with structured context passed as keyword
arguments (``logger.info("Analyzed plan compliance", weeks=4)``). Loguru keeps
those in ``record["extra"]``; the formatters below render them as trailing
``key=value`` pairs so a compliance run or a matching batch reads on one line.
"""

import sys
from pathlib import Path

from loguru import logger

from plan_engine.config.settings import EngineSettings, settings

CONSOLE_PREFIX = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"
FILE_PREFIX = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _with_context(prefix: str):
    def formatter(record) -> str:
        context = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
        return f"{prefix} {context}".rstrip() + "\n{exception}"

    return formatter


def setup_logger(config: EngineSettings | None = None, level: str | None = None) -> None:
    """Replace loguru's sinks with the engine's console and file sinks.

    Library modules only emit records; entry points (the CLI, a host
    application) call this once.

    Args:
        config: Settings providing log_level, log_file, log_rotation and log_retention
        level: Level override (e.g. from a --log-level flag)
    """
    config = config or settings
    level = (level or config.log_level).upper()

    logger.remove()
    logger.add(sys.stderr, format=_with_context(CONSOLE_PREFIX), level=level, colorize=True)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=_with_context(FILE_PREFIX),
            level=level,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
        )

    logger.debug("Plan engine logging configured", level=level, log_file=config.log_file)
