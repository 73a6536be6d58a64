"""
Draft Form Controller

Lifecycle of the "new application" dialog:
    closed -> open (editing) -> submitting -> closed
                             -> closed (cancel)

A failed validation or a failed insert/refresh leaves the dialog open with
the draft untouched so nothing the user typed is lost.
"""
import datetime as dt
from enum import Enum
from typing import Callable, Optional

from jobtracker.errors import DraftStateError, RemoteError, ValidationError
from jobtracker.models.application import build_payload
from jobtracker.models.draft import DraftForm
from jobtracker.services.application_store import ApplicationStore
from jobtracker.services.gateway import ApplicationGateway
from jobtracker.services.guard import MutationGuard
from jobtracker.utils.logger import get_logger

logger = get_logger("jobtracker.draft")


class DraftState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


class DraftFormController:

    def __init__(
        self,
        gateway: ApplicationGateway,
        store: ApplicationStore,
        guard: Optional[MutationGuard] = None,
        clock: Callable[[], dt.date] = dt.date.today,
    ):
        self._gateway = gateway
        self._store = store
        self._guard = guard or MutationGuard()
        self._clock = clock
        self._state = DraftState.CLOSED
        self._draft = DraftForm()

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state != DraftState.CLOSED

    @property
    def draft(self) -> DraftForm:
        return self._draft

    def open_modal(self) -> DraftForm:
        """Open the dialog with a fresh draft dated today."""
        self._draft = DraftForm.empty(self._clock())
        self._state = DraftState.OPEN
        return self._draft

    def close_modal(self) -> None:
        """Close from any state and discard the draft; there is no autosave."""
        self._state = DraftState.CLOSED
        self._draft = DraftForm()

    def update_field(self, name: str, value) -> DraftForm:
        if self._state != DraftState.OPEN:
            raise DraftStateError(f"cannot edit draft while {self._state.value}")
        self._draft = self._draft.with_field(name, value)
        return self._draft

    async def submit(self) -> None:
        """
        Validate, insert, refresh, close.

        Raises ValidationError (draft kept, still open), RemoteError (draft kept,
        still open), BusyError if another mutation is in flight, or
        DraftStateError if the dialog is not open.
        """
        if self._state != DraftState.OPEN:
            raise DraftStateError(f"cannot submit draft while {self._state.value}")

        try:
            payload = build_payload(self._draft)
        except ValidationError as exc:
            logger.info(f"Draft rejected: {exc}", extra={"field": exc.field})
            raise

        async with self._guard.hold("submit"):
            self._state = DraftState.SUBMITTING
            try:
                await self._gateway.insert(payload)
                await self._store.refresh()
            except RemoteError as exc:
                logger.error(f"Error adding application: {exc}", extra={"operation": exc.operation})
                # A cancel or reopen while the request was pending wins
                if self._state is DraftState.SUBMITTING:
                    self._state = DraftState.OPEN
                raise

        logger.info(f"Added application: {payload.role} at {payload.company}")
        if self._state is DraftState.SUBMITTING:
            self.close_modal()
