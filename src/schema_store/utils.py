"""Utility functions for schema-store."""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
) -> None:
    """
    Configure logging for applications that embed the store.

    The library never calls this on import; it only logs through loguru.

    Args:
        log_level: Minimum level to emit
        log_file: Optional file to log to, rotated at 10 MB
        console: Whether to log to stderr
    """
    logger.remove()

    if console:
        logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=True)

    if log_file:
        logger.add(
            str(log_file),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=True,
            enqueue=True,
            colorize=False,
        )


def load_schema_file(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Load schema definitions from a YAML or JSON file.

    The file holds either a list of schema mappings or a mapping with a
    ``schemas`` key.
    """
    path = Path(path)
    # JSON is a subset of YAML, one parser covers both
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("schemas")
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of schema definitions")
    return data
