"""Scoped handling of generated files.

Files registered with ``removed_on_exit`` are deleted when the block exits,
whether it returns, raises, or is interrupted. ``exit_on_signals`` turns
SIGTERM/SIGHUP into ``SystemExit`` so those paths unwind the same way as
Ctrl-C does.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType

from fibenload.core.logging import get_logger

logger = get_logger(__name__)

_EXIT_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if sig
)


def _raise_exit(signum: int, frame: FrameType | None) -> None:
    raise SystemExit(128 + signum)


@contextmanager
def exit_on_signals() -> Iterator[None]:
    """Raise SystemExit on termination signals for the duration of the block.

    Only installs handlers from the main thread; elsewhere it is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {sig: signal.signal(sig, _raise_exit) for sig in _EXIT_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@contextmanager
def removed_on_exit(paths: Iterable[Path]) -> Iterator[list[Path]]:
    """Delete ``paths`` (those that exist) when the block exits."""
    tracked = list(paths)
    try:
        yield tracked
    finally:
        logger.info("exiting")
        for path in tracked:
            if path.exists():
                logger.info("cleaning_up", path=str(path))
                path.unlink()
