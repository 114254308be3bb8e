"""Timing utilities for render profiling.

Enabled via the CHATROOM_RENDER_DEBUG_TIMING environment variable
("1", "true" or "yes").
"""

import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Union


def is_timing_enabled() -> bool:
    return os.getenv("CHATROOM_RENDER_DEBUG_TIMING", "").lower() in ("1", "true", "yes")


@contextmanager
def log_timing(
    phase: Union[str, Callable[[], str]],
    t_start: Optional[float] = None,
) -> Iterator[None]:
    """Context manager printing how long a render phase took.

    Args:
        phase: Phase name, or a callable returning it (evaluated at the end)
        t_start: Optional start time for also reporting total elapsed time

    Example:
        with log_timing(lambda: f"Render ({len(records)} records)", t_start):
            html = await renderer.render(records, avatar)
    """
    if not is_timing_enabled():
        yield
        return

    t_phase_start = time.time()
    try:
        yield
    finally:
        t_now = time.time()
        phase_name = phase() if callable(phase) else phase
        line = f"[TIMING] {phase_name:40s} {t_now - t_phase_start:8.3f}s"
        if t_start is not None:
            line += f" (total: {t_now - t_start:8.3f}s)"
        print(line, flush=True)
