#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Console spinner used to time pipeline stages."""

from __future__ import annotations

import sys
import threading
import time
from typing import Callable


def run_with_spinner(label: str, func: Callable[[], None]) -> float:
    """Run func() while showing a lightweight CLI spinner; return elapsed seconds.

    Output format: ⠋ XXXX.XXs label (during) / ⣿ XXXX.XXs label (done).
    Exceptions raised by func are re-raised after the final line is printed.
    """
    done = threading.Event()
    err: list[BaseException] = []

    def worker() -> None:
        try:
            func()
        except BaseException as exc:  # noqa: BLE001
            err.append(exc)
        finally:
            done.set()

    start = time.perf_counter()
    thread = threading.Thread(target=worker, daemon=True)
    thread.start()
    frames = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
    idx = 0
    while not done.wait(0.1):
        elapsed = time.perf_counter() - start
        sys.stdout.write(f"\r{frames[idx % len(frames)]} {elapsed:7.2f}s {label}    ")
        sys.stdout.flush()
        idx += 1
    thread.join()
    elapsed = time.perf_counter() - start
    complete = "⣿" if not err else "✗"
    sys.stdout.write(f"\r{complete} {elapsed:7.2f}s {label}    \n")
    sys.stdout.flush()
    if err:
        raise err[0]
    return elapsed


__all__ = ["run_with_spinner"]
