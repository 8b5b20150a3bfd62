"""
Process-pool planning for batch mass estimation.

Each event costs one grid scan plus a Brent refinement, a few milliseconds of
pure-Python work that holds the GIL. Batches are therefore spread over worker
processes, and the events are handed out in chunks so that the pickling and
dispatch overhead stays small next to the solver time.

- :func:`process_pool_plan`:
  Number of worker processes and the chunk size for ``Executor.map``.
"""

import math
import os
import warnings
from typing import Optional, Tuple

#: Smallest number of events worth starting a worker process for.
MIN_EVENTS_PER_PROCESS = 16

#: Chunks handed to each process, so a slow chunk does not stall the pool.
CHUNKS_PER_PROCESS = 4


def process_pool_plan(n_events: int, user_requested: Optional[int] = None,
                      min_events_per_process: int = MIN_EVENTS_PER_PROCESS) -> Tuple[int, int]:
    """
    Plan the worker processes for a batch of independent inversions.

    The process count is bounded by the available cores (one is left to the
    parent process) and by the batch size, so that every process gets at least
    ``min_events_per_process`` events. A user request above the core bound is
    capped with a warning.

    :param n_events: Number of events in the batch.
    :type n_events: int
    :param user_requested: Optional number of worker processes.
    :type user_requested: int or None
    :param min_events_per_process: Minimum batch share of one process.
    :type min_events_per_process: int

    :returns: Tuple (processes, chunksize), both at least 1.
    :rtype: tuple[int, int]

    :raises ValueError: If ``user_requested`` or ``min_events_per_process`` is below 1.
    """
    if min_events_per_process < 1:
        raise ValueError("min_events_per_process must be at least 1.")
    if user_requested is not None and user_requested < 1:
        raise ValueError(f"Requested {user_requested} processes; at least 1 is needed.")

    available = max(1, (os.cpu_count() or 1) - 1)
    if n_events <= 0:
        return 1, 1

    processes = available
    if user_requested is not None:
        if user_requested > available:
            warnings.warn(
                f"Requested {user_requested} processes, but only {available} cores are free. "
                f"Using {available} processes instead."
            )
        processes = min(user_requested, available)

    processes = max(1, min(processes, n_events // min_events_per_process))
    chunksize = max(1, math.ceil(n_events / (processes * CHUNKS_PER_PROCESS)))
    return processes, chunksize
