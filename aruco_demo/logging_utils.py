import logging
import sys
from typing import IO, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s [{tool}] %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Accepts a logging constant or a name such as "debug"; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logger(
    tool_name: str,
    level: Union[int, str] = logging.INFO,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Logger ``aruco_demo.<tool_name>`` writing to stderr (or ``stream``).

    Calling it again for the same tool swaps the handler instead of adding
    a second one, so the level and stream of the latest call win.
    """
    logger = logging.getLogger(f"aruco_demo.{tool_name}")
    logger.setLevel(resolve_level(level))

    for old in [h for h in logger.handlers if getattr(h, "_aruco_tool", None)]:
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT.format(tool=tool_name)))
    handler._aruco_tool = tool_name
    logger.addHandler(handler)
    return logger
