"""
Application List Store

Holds the authoritative in-memory list. The list is only ever replaced by a
successful refresh(), so local state always equals the last confirmed
server snapshot. Mutations go through the gateway and then call refresh().
"""
from enum import Enum
from typing import Callable, List, Optional, Tuple

from jobtracker.errors import RemoteError
from jobtracker.models.application import ApplicationRecord
from jobtracker.services.gateway import ApplicationGateway
from jobtracker.services.stats import DerivedStats, compute_stats
from jobtracker.utils.logger import get_logger

logger = get_logger("jobtracker.store")


class StoreState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


Listener = Callable[["ApplicationStore"], None]


class ApplicationStore:
    """Observable container for the current application list."""

    def __init__(self, gateway: ApplicationGateway):
        self._gateway = gateway
        self._records: Tuple[ApplicationRecord, ...] = ()
        self._state = StoreState.IDLE
        self._loaded = False
        self._last_error: Optional[RemoteError] = None
        self._listeners: List[Listener] = []

    @property
    def records(self) -> Tuple[ApplicationRecord, ...]:
        return self._records

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def loaded(self) -> bool:
        """True once any refresh has succeeded"""
        return self._loaded

    @property
    def last_error(self) -> Optional[RemoteError]:
        return self._last_error

    @property
    def stats(self) -> DerivedStats:
        # Recomputed on every read; the list is small
        return compute_stats(self._records)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: StoreState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("store.listener_failed", extra={"state": state.value})

    async def refresh(self) -> Tuple[ApplicationRecord, ...]:
        """
        Re-fetch the full list and replace local state.

        On failure the previous list is kept, listeners see ERROR and then
        IDLE, last_error holds the failure and the RemoteError is re-raised.
        """
        self._set_state(StoreState.LOADING)
        try:
            records = await self._gateway.list_all()
        except RemoteError as exc:
            self._last_error = exc
            logger.error(f"Error loading applications: {exc}", extra={"state": StoreState.ERROR.value})
            self._set_state(StoreState.ERROR)
            self._set_state(StoreState.IDLE)
            raise

        self._records = tuple(records)
        self._loaded = True
        self._last_error = None
        logger.info("store.refreshed", extra={"count": len(self._records)})
        self._set_state(StoreState.IDLE)
        return self._records
