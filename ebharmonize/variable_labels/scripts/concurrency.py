#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Process-pool helpers for running independent group partitions side by side.

Partitions share no state, so each one can be standardized in its own worker.
Small runs and restricted environments fall back to a plain serial loop.
"""

from __future__ import annotations

import logging
import multiprocessing
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Callable, Iterable, List, Sequence, TypeVar

from tqdm import tqdm

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)

WORKERS_ENV_VAR = "EBH_MAX_WORKERS"


def _available_cpus() -> int:
    """Best-effort logical cpu count respecting scheduler affinity."""
    try:
        return len(os.sched_getaffinity(0))  # type: ignore[attr-defined]
    except (AttributeError, OSError):
        count = os.cpu_count()
        return count if isinstance(count, int) and count > 0 else 1


def _env_requested_workers() -> int | None:
    """Parse EBH_MAX_WORKERS; unset or unparsable means no override."""
    raw = os.getenv(WORKERS_ENV_VAR)
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", WORKERS_ENV_VAR, raw)
        return None
    return max(value, 0)


def resolve_worker_count(explicit: int | None = None, task_size: int | None = None) -> int:
    """Env override first, then the explicit request; serial otherwise."""
    requested = _env_requested_workers()
    if requested is None:
        requested = explicit
    if requested is None or requested <= 1:
        return 1
    cap = _available_cpus()
    if task_size is not None:
        cap = min(cap, task_size)
    return max(1, min(requested, cap))


def maybe_parallel_map(
    seq: Sequence[T] | Iterable[T],
    func: Callable[[T], R],
    *,
    max_workers: int | None = None,
    show_progress: bool = False,
    desc: str = "Partitions",
) -> List[R]:
    """
    Apply func across seq, in a process pool when more than one worker is resolved.

    Results keep the input order. ``func`` and the items must be picklable
    when the pool is used.
    """
    values = list(seq)
    count = len(values)
    if count == 0:
        return []

    workers = resolve_worker_count(explicit=max_workers, task_size=count)
    if workers <= 1:
        return _serial_map(values, func, show_progress, desc)

    def _run_with_executor(mp_ctx: multiprocessing.context.BaseContext | None = None) -> List[R]:
        with ProcessPoolExecutor(max_workers=workers, mp_context=mp_ctx) as executor:
            mapped = executor.map(func, values)
            if show_progress:
                mapped = tqdm(mapped, total=count, desc=desc, unit="group")
            return list(mapped)

    try:
        return _run_with_executor()
    except (OSError, PermissionError):
        # Some sandboxes reject the default start method; retry with fork.
        try:
            fork_ctx = multiprocessing.get_context("fork")
        except (AttributeError, ValueError):
            fork_ctx = None
        if fork_ctx is not None:
            try:
                return _run_with_executor(fork_ctx)
            except (OSError, PermissionError):
                pass
        logger.warning("Worker processes unavailable; running %s partitions serially", count)
        return _serial_map(values, func, show_progress, desc)


def _serial_map(values: List[T], func: Callable[[T], R], show_progress: bool, desc: str) -> List[R]:
    iterable = tqdm(values, desc=desc, unit="group") if show_progress else values
    return [func(item) for item in iterable]


__all__ = ["WORKERS_ENV_VAR", "maybe_parallel_map", "resolve_worker_count"]
