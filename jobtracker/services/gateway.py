"""
Remote Sync Gateway: the only path between local state and the store.

Wraps the four table operations (list, insert, delete one, delete all) and
turns every failure into a RemoteError carrying the operation name and the
underlying cause. Nothing is retried here; callers decide what to do.

Usage:
    async with ApplicationGateway() as gw:
        records = await gw.list_all()
"""
from typing import List, Optional, Union

import httpx

from jobtracker.errors import RemoteError
from jobtracker.models.application import ApplicationPayload, ApplicationRecord
from jobtracker.services.supabase_client import SupabaseTable
from jobtracker.utils.logger import get_logger
from jobtracker.utils.metrics import track_duration

logger = get_logger("jobtracker.gateway")

SERVICE = "supabase"

# Newest first
DEFAULT_ORDER = "created_at.desc"

# The primary key is never null, so this matches every row without
# enumerating ids or comparing against a sentinel value
MATCH_ALL_FILTER = {"id": "not.is.null"}

# Transport and HTTP status errors, plus ValueError which covers undecodable
# JSON and rows that fail record validation
_REMOTE_FAILURES = (httpx.HTTPError, ValueError)


def _describe(exc: BaseException) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        body = exc.response.text[:200]
        return f"HTTP {exc.response.status_code}: {body}" if body else f"HTTP {exc.response.status_code}"
    return str(exc)[:200] or type(exc).__name__


class ApplicationGateway:
    """Async gateway over the applications table."""

    def __init__(self, table: Optional[SupabaseTable] = None):
        self._table = table or SupabaseTable()

    async def __aenter__(self) -> "ApplicationGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._table.aclose()

    def _fail(self, operation: str, exc: BaseException) -> RemoteError:
        detail = _describe(exc)
        logger.error(
            f"gateway.{operation}.failed",
            extra={
                "service": SERVICE,
                "operation": operation,
                "error": detail,
                "error_type": type(exc).__name__,
            },
        )
        return RemoteError(operation, exc, detail)

    async def list_all(self) -> List[ApplicationRecord]:
        """All records ordered by created_at descending. An empty table is []."""
        try:
            async with track_duration(SERVICE, "list"):
                rows = await self._table.select("*", order=DEFAULT_ORDER)
                records = [ApplicationRecord.model_validate(row) for row in rows]
        except _REMOTE_FAILURES as exc:
            raise self._fail("list", exc) from exc
        logger.debug("gateway.list", extra={"operation": "list", "count": len(records)})
        return records

    async def insert(self, payload: ApplicationPayload) -> None:
        """Insert one record. The assigned id is only visible after a re-list."""
        try:
            async with track_duration(SERVICE, "insert"):
                await self._table.insert(payload.to_row())
        except _REMOTE_FAILURES as exc:
            raise self._fail("insert", exc) from exc
        logger.info(f"gateway.insert: {payload.role} at {payload.company}", extra={"operation": "insert"})

    async def delete_one(self, record_id: Union[int, str]) -> None:
        """Delete by id. A missing id affects zero rows and is not an error."""
        try:
            async with track_duration(SERVICE, "delete_one"):
                await self._table.delete({"id": f"eq.{record_id}"})
        except _REMOTE_FAILURES as exc:
            raise self._fail("delete_one", exc) from exc
        logger.info("gateway.delete_one", extra={"operation": "delete_one", "record_id": record_id})

    async def delete_all(self) -> None:
        """Delete every record."""
        try:
            async with track_duration(SERVICE, "delete_all"):
                await self._table.delete(MATCH_ALL_FILTER)
        except _REMOTE_FAILURES as exc:
            raise self._fail("delete_all", exc) from exc
        logger.warning("gateway.delete_all", extra={"operation": "delete_all"})
