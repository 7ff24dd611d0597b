from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional
import os
import logging
import threading

from dotenv import load_dotenv

from ..models.exceptions import InvalidConfig, SupersededError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ProcessingWorker:
    """
    Runs heavy stage calls off the caller's thread.

    Jobs are grouped by key (e.g. "enhance", "color_key"). Submitting a new
    job under a key supersedes the older ones: when an older job finishes,
    its future raises SupersededError instead of returning a stale raster.
    Stages are stateless, so dropping the result is the whole cancellation.
    """

    def __init__(self, max_workers: Optional[int] = None):
        if max_workers is None:
            max_workers = int(os.getenv("GRIDSPLIT_WORKER_THREADS", "2"))
        if max_workers < 1:
            raise InvalidConfig(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self._pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="gridsplit")
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def _next_generation(self, key: str) -> int:
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
            return generation

    def is_current(self, key: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get(key) == generation

    def submit(self, key: str, fn: Callable[..., Any], *args, **kwargs) -> Future:
        generation = self._next_generation(key)

        def _run():
            result = fn(*args, **kwargs)
            if not self.is_current(key, generation):
                logger.debug(f"Dropping superseded {key} job #{generation}")
                raise SupersededError(f"{key} job #{generation} was superseded", details={"key": key})
            return result

        return self._pool.submit(_run)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> ProcessingWorker:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
