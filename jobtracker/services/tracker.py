"""
JobTracker: one instance per running application context.

Wires the gateway, list store, draft controller and mutation guard together,
and routes user-facing side effects (confirmation prompts, blocking notices,
file downloads) through injected capabilities. No method lets a
TrackerError escape; failures become a notice and a falsy return value.

Usage:
    async with ApplicationGateway() as gw:
        tracker = JobTracker(gw, confirm=ask_yes_no, notify=show_alert)
        await tracker.load()
        tracker.draft.open_modal()
        ...
"""
import datetime as dt
from typing import Callable, Optional, Union

from jobtracker.errors import BusyError, RemoteError, ValidationError
from jobtracker.services.application_store import ApplicationStore
from jobtracker.services.csv_export import CsvExport, export_csv
from jobtracker.services.draft_controller import DraftFormController
from jobtracker.services.gateway import ApplicationGateway
from jobtracker.services.guard import MutationGuard
from jobtracker.services.stats import DerivedStats
from jobtracker.utils.logger import get_logger

logger = get_logger("jobtracker.tracker")

Confirm = Callable[[str], bool]
Notify = Callable[[str], None]
Download = Callable[[CsvExport], None]

CONFIRM_DELETE = "Delete this application?"
CONFIRM_CLEAR = "Clear all applications? This cannot be undone."

NOTICE_LOAD_FAILED = "Error loading applications. Please try again."
NOTICE_ADD_FAILED = "Error adding application. Please try again."
NOTICE_DELETE_FAILED = "Error deleting application. Please try again."
NOTICE_CLEAR_FAILED = "Error clearing applications. Please try again."
NOTICE_NO_DATA = "No data to export"
NOTICE_BUSY = "Another change is still being saved. Please wait."


def _always_yes(message: str) -> bool:
    return True


def _log_notice(message: str) -> None:
    logger.info(f"notice: {message}")


def _no_download(export: CsvExport) -> None:
    pass


class JobTracker:

    def __init__(
        self,
        gateway: ApplicationGateway,
        confirm: Confirm = _always_yes,
        notify: Notify = _log_notice,
        download: Download = _no_download,
        clock: Callable[[], dt.date] = dt.date.today,
    ):
        self.gateway = gateway
        self.guard = MutationGuard()
        self.store = ApplicationStore(gateway)
        self.draft = DraftFormController(gateway, self.store, guard=self.guard, clock=clock)
        self._confirm = confirm
        self._notify = notify
        self._download = download
        self._clock = clock

    @property
    def busy(self) -> bool:
        """True while a mutation is in flight; presentation disables controls"""
        return self.guard.busy

    @property
    def stats(self) -> DerivedStats:
        return self.store.stats

    async def refresh(self) -> None:
        """
        Manual refresh. Rejected with BusyError while a mutation is in flight,
        so an older snapshot cannot land after the mutation's own refresh.
        """
        async with self.guard.hold("refresh"):
            await self.store.refresh()

    async def load(self) -> bool:
        """Initial (or manual) refresh."""
        try:
            await self.refresh()
        except BusyError:
            self._notify(NOTICE_BUSY)
            return False
        except RemoteError:
            self._notify(NOTICE_LOAD_FAILED)
            return False
        return True

    async def submit_draft(self) -> bool:
        try:
            await self.draft.submit()
        except ValidationError as exc:
            self._notify(f"Please check the form: {exc}")
            return False
        except BusyError:
            self._notify(NOTICE_BUSY)
            return False
        except RemoteError:
            self._notify(NOTICE_ADD_FAILED)
            return False
        return True

    async def delete(self, record_id: Union[int, str]) -> None:
        """Guarded delete-one then refresh. Raises BusyError or RemoteError."""
        async with self.guard.hold("delete"):
            await self.gateway.delete_one(record_id)
            await self.store.refresh()

    async def clear(self) -> None:
        """Guarded delete-all then refresh. Raises BusyError or RemoteError."""
        async with self.guard.hold("clear"):
            await self.gateway.delete_all()
            await self.store.refresh()

    async def delete_application(self, record_id: Union[int, str]) -> bool:
        """Delete one record after confirmation. Declining is a silent no-op."""
        if not self._confirm(CONFIRM_DELETE):
            return False
        try:
            await self.delete(record_id)
        except BusyError:
            self._notify(NOTICE_BUSY)
            return False
        except RemoteError as exc:
            logger.error(f"Error deleting application: {exc}", extra={"record_id": record_id})
            self._notify(NOTICE_DELETE_FAILED)
            return False
        return True

    async def clear_all(self) -> bool:
        """Delete every record after confirmation."""
        if not self._confirm(CONFIRM_CLEAR):
            return False
        try:
            await self.clear()
        except BusyError:
            self._notify(NOTICE_BUSY)
            return False
        except RemoteError as exc:
            logger.error(f"Error clearing applications: {exc}")
            self._notify(NOTICE_CLEAR_FAILED)
            return False
        return True

    def export(self) -> Optional[CsvExport]:
        """Export the current list and hand it to the download capability."""
        export = export_csv(self.store.records, today=self._clock())
        if export is None:
            self._notify(NOTICE_NO_DATA)
            return None
        self._download(export)
        logger.info(f"Exported {len(self.store.records)} applications to {export.filename}")
        return export
