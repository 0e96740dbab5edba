"""Logging utilities for posetree.

This module provides a custom GROWTH log level and a handle for enabling and
disabling posetree logging with loguru.

GROWTH records describe every node decision made during induction (split or
leaf, and why). They sit between DEBUG and INFO so that a plain INFO handler
only sees the start and end of each training run.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) to
    prevent duplicate output when ``enable_logging()`` adds its own handler.
    If the handler was already removed the ``ValueError`` is suppressed.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

GROWTH_LEVEL: Final[str] = "GROWTH"
GROWTH_LEVEL_NUMBER: Final[int] = 15  # Between DEBUG (10) and INFO (20)


def _register_growth_level() -> None:
    """Register the GROWTH custom log level with loguru.

    If the level already exists with a different numeric value a UserWarning
    is emitted, since loguru does not allow changing it.
    """
    try:
        existing_level = logger.level(GROWTH_LEVEL)
    except ValueError:
        logger.level(GROWTH_LEVEL, no=GROWTH_LEVEL_NUMBER, icon="🌳")
    else:
        if existing_level.no != GROWTH_LEVEL_NUMBER:
            msg = (
                f"GROWTH level already registered with numeric value {existing_level.no},"
                f" expected {GROWTH_LEVEL_NUMBER}"
            )
            warnings.warn(msg, stacklevel=2)


_register_growth_level()

type LogLevel = Literal[
    "TRACE",
    "DEBUG",
    "GROWTH",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

type LogFormat = Literal["short", "full"]


class LoggingHandle:
    """Handle for managing a posetree logging handler.

    Examples:
        >>> with enable_logging(level="GROWTH"):  # doctest: +SKIP
        ...     tree = grow_tree(patches, TrainingConfig(max_depth=4))
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        """Initialize the logging handle.

        Args:
            handler_id (int): The loguru handler ID from logger.add().
        """
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove the handler owned by this handle.

        When the last active handle is disabled, ``logger.disable("posetree")``
        is called so records stop flowing to any handler.
        """
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        """Enter context manager.

        Returns:
            LoggingHandle: This handle instance.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit context manager and disable logging."""
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Return the number of currently active logging handles.

        Returns:
            int: Count of handles that have not been disabled.
        """
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = "INFO",
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Enable posetree logging on stderr.

    Args:
        level (LogLevel): Minimum log level to display. Defaults to "INFO",
            which reports the start and end of each training run. Use
            "GROWTH" to follow every node decision, or "DEBUG" to also see
            split search outcomes.
        log_format (LogFormat): "short" shows the function name only; "full"
            adds module and line number.

    Returns:
        LoggingHandle: Independent handle for managing the logging handler.
    """
    logger.enable(PACKAGE_NAME)

    if log_format == "short":
        format_str = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
            "<cyan>{function}</cyan> - "
            "<level>{message}</level> {extra}"
        )
    else:
        format_str = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level> {extra}"
        )

    handler_id = logger.add(
        sys.stderr,
        level=level,
        filter=_is_posetree_record,
        format=format_str,
    )

    return LoggingHandle(handler_id)


def _is_posetree_record(record: Record) -> bool:
    """Filter passing only records emitted from posetree modules.

    Args:
        record (Record): The loguru Record object to filter.

    Returns:
        bool: True if the record originates from posetree.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
