import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """
    Replace loguru's default sink with a stderr sink at the given level.

    :param level: Minimal level name, e.g. ``"DEBUG"`` or ``"WARNING"``.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}",
    )


__all__ = ["logger", "configure_logging"]
