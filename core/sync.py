"""
Optimistic state sync.

Every mutation in the UI goes through one contract:

1. snapshot the current state,
2. apply the user's change locally so the next render already shows it,
3. persist only the changed entity,
4. on success keep the new state (and optionally toast),
5. on failure restore the snapshot wholesale and toast exactly once.

Nothing is queued or retried. Two in-flight mutations on the same entity are
not serialized: if the older one fails after the newer one was applied, its
rollback restores a snapshot that predates both, and the newer change is lost
locally even though it was persisted.
"""

import copy
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

from core.entities import ClinicState

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Gagal menyimpan. Perubahan dibatalkan."

Mutation = Callable[[ClinicState], ClinicState]


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    """Notifier used outside Streamlit; writes toasts to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)


class Store:
    """Holds the local view state; only apply() and rollback() replace it."""

    def __init__(self, state: Optional[ClinicState] = None):
        self._state = state if state is not None else ClinicState()

    @property
    def state(self) -> ClinicState:
        return self._state

    def snapshot(self) -> ClinicState:
        return copy.deepcopy(self._state)

    def apply(self, mutation: Mutation) -> ClinicState:
        self._state = mutation(self._state)
        return self._state

    def rollback(self, snapshot: ClinicState) -> ClinicState:
        self._state = snapshot
        return self._state


class SyncController:
    def __init__(self, store: Store, notifier: Optional[Notifier] = None):
        self.store = store
        self.notifier = notifier or LogNotifier()

    def _fail(self, snapshot: ClinicState, failure: str, label: str) -> bool:
        logger.warning("Rolling back %s", label)
        self.store.rollback(snapshot)
        self.notifier.error(failure)
        return False

    def run(
        self,
        mutation: Mutation,
        persist: Callable[[], Any],
        *,
        success: Optional[str] = None,
        failure: str = DEFAULT_FAILURE_MESSAGE,
        label: str = "mutation",
    ) -> bool:
        """Apply ``mutation`` optimistically and persist it. Returns False on rollback."""
        snapshot = self.store.snapshot()
        try:
            self.store.apply(mutation)
            persist()
        except Exception:
            logger.exception("Persisting %s failed", label)
            return self._fail(snapshot, failure, label)

        if success:
            self.notifier.success(success)
        return True

    async def run_async(
        self,
        mutation: Mutation,
        persist: Callable[[], Awaitable[Any]],
        *,
        success: Optional[str] = None,
        failure: str = DEFAULT_FAILURE_MESSAGE,
        label: str = "mutation",
    ) -> bool:
        """Same contract as run() for a coroutine-returning persist call."""
        snapshot = self.store.snapshot()
        try:
            self.store.apply(mutation)
            await persist()
        except Exception:
            logger.exception("Persisting %s failed", label)
            return self._fail(snapshot, failure, label)

        if success:
            self.notifier.success(success)
        return True
