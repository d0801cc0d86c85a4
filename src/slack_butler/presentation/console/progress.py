"""Countdown shown while waiting out a rate limit."""

import math
import sys
import time
from collections.abc import Callable
from typing import TextIO

from tqdm import tqdm


def wait_with_progress(
    seconds: float,
    out: TextIO | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Sleep for ``seconds``, advancing a progress bar once per second.

    The bar is only drawn when ``out`` is a terminal.
    """
    if seconds <= 0:
        return
    out = out if out is not None else sys.stderr
    remaining = seconds
    with tqdm(
        total=math.ceil(seconds),
        desc="Rate limited, waiting",
        unit="s",
        file=out,
        disable=not out.isatty(),
    ) as progress:
        while remaining > 0:
            step = min(1.0, remaining)
            sleep(step)
            remaining -= step
            progress.update(1)
