from contextlib import asynccontextmanager
from typing import Optional

from jobtracker.errors import BusyError
from jobtracker.utils.logger import get_logger

logger = get_logger("jobtracker.guard")


class MutationGuard:
    """Busy flag allowing at most one mutation (submit/delete/clear) in flight."""

    def __init__(self):
        self._in_flight: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    @property
    def in_flight(self) -> Optional[str]:
        return self._in_flight

    @asynccontextmanager
    async def hold(self, operation: str):
        """Claim the guard for `operation`; raises BusyError if already held."""
        if self._in_flight is not None:
            logger.warning(
                f"Rejected {operation}: {self._in_flight} still in progress",
                extra={"operation": operation},
            )
            raise BusyError(operation, self._in_flight)
        self._in_flight = operation
        try:
            yield
        finally:
            self._in_flight = None
