"""In-memory job registry."""

from __future__ import annotations

import threading
from collections.abc import Callable

from renderq.errors import JobNotFoundError
from renderq.jobs.models import JobState


class JobRegistry:
    """Thread-safe mapping of job id to its current state.

    States are immutable, so a reader always gets a whole state and a
    writer replaces the entry in one step. There are no cross-key
    transactions.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, JobState] = {}
        self._lock = threading.Lock()

    def put(self, job_id: str, state: JobState) -> None:
        """Insert or replace the state for ``job_id``."""
        with self._lock:
            self._jobs[job_id] = state

    def get(self, job_id: str) -> JobState:
        """Return the state for ``job_id``.

        Raises:
            JobNotFoundError: If the id is unknown or was evicted.
        """
        with self._lock:
            state = self._jobs.get(job_id)
        if state is None:
            raise JobNotFoundError(job_id)
        return state

    def find(self, job_id: str) -> JobState | None:
        """Return the state for ``job_id`` or None."""
        with self._lock:
            return self._jobs.get(job_id)

    def delete(self, job_id: str) -> bool:
        """Evict an entry. Returns False if it was already gone."""
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def remove_if(self, job_id: str, predicate: Callable[[JobState], bool]) -> bool:
        """Evict the entry only if ``predicate`` holds for its current state."""
        with self._lock:
            state = self._jobs.get(job_id)
            if state is None or not predicate(state):
                return False
            del self._jobs[job_id]
            return True

    def replace_if(
        self, job_id: str, predicate: Callable[[JobState], bool], state: JobState
    ) -> bool:
        """Replace the entry only if ``predicate`` holds for its current state."""
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None or not predicate(current):
                return False
            self._jobs[job_id] = state
            return True

    def items(self) -> list[tuple[str, JobState]]:
        """Snapshot of all entries."""
        with self._lock:
            return list(self._jobs.items())

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
