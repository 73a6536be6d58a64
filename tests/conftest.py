"""Shared fixtures: an in-memory PostgREST stand-in served through httpx.MockTransport."""
import datetime as dt
import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from jobtracker.config import Settings
from jobtracker.services.gateway import ApplicationGateway
from jobtracker.services.supabase_client import SupabaseTable
from jobtracker.services.tracker import JobTracker
from jobtracker.utils import metrics

TODAY = dt.date(2025, 3, 1)
_EPOCH = dt.datetime(2025, 1, 1, 12, 0, 0, tzinfo=dt.timezone.utc)


class FakeSupabase:
    """Implements the subset of PostgREST the gateway uses, against a list of dicts."""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []
        self.next_id = 1
        self.fail_status: Dict[str, int] = {}
        self.disconnect: set = set()

    def seed(self, **row) -> Dict[str, Any]:
        base = {
            "date": "2025-02-01",
            "company": "Acme",
            "role": "Engineer",
            "match": 70,
            "status": "Applied",
            "followup": None,
            "salary": None,
            "tags": None,
            "link": None,
            "notes": None,
        }
        base.update(row)
        return self._store(base)

    def _store(self, row: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(row)
        row["id"] = self.next_id
        row["created_at"] = (_EPOCH + dt.timedelta(minutes=self.next_id)).isoformat()
        self.next_id += 1
        self.rows.append(row)
        return row

    def count(self, method: str) -> int:
        return sum(1 for r in self.requests if r.method == method)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method in self.disconnect:
            raise httpx.ConnectError("connection refused", request=request)
        if request.method in self.fail_status:
            return httpx.Response(self.fail_status[request.method], json={"message": "store unavailable"})

        params = request.url.params
        if request.method == "GET":
            rows = list(self.rows)
            if params.get("order") == "created_at.desc":
                rows.sort(key=lambda r: r["created_at"], reverse=True)
            return httpx.Response(200, json=rows)

        if request.method == "POST":
            for row in json.loads(request.content):
                assert "id" not in row and "created_at" not in row
                self._store(row)
            return httpx.Response(201)

        if request.method == "DELETE":
            flt = params.get("id")
            if flt is None:
                return httpx.Response(400, json={"message": "DELETE requires a WHERE clause"})
            if flt == "not.is.null":
                self.rows = [r for r in self.rows if r["id"] is None]
            elif flt.startswith("eq."):
                target = flt[3:]
                self.rows = [r for r in self.rows if str(r["id"]) != target]
            else:
                return httpx.Response(400, json={"message": f"unsupported filter {flt}"})
            return httpx.Response(204)

        return httpx.Response(405)


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def settings() -> Settings:
    return Settings(supabase_url="https://test.supabase.co", supabase_anon_key="test-anon-key")


@pytest.fixture
def fake() -> FakeSupabase:
    return FakeSupabase()


def make_gateway(fake: FakeSupabase, settings: Settings) -> ApplicationGateway:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(fake.handler),
        base_url=settings.rest_url,
    )
    return ApplicationGateway(SupabaseTable(settings=settings, client=client))


@pytest.fixture
def gateway(fake, settings) -> ApplicationGateway:
    return make_gateway(fake, settings)


class Capabilities:
    """Records what the tracker asked the user and what it showed them."""

    def __init__(self):
        self.answer = True
        self.prompts: List[str] = []
        self.notices: List[str] = []
        self.downloads: list = []

    def confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer

    def notify(self, message: str) -> None:
        self.notices.append(message)

    def download(self, export) -> None:
        self.downloads.append(export)


@pytest.fixture
def caps() -> Capabilities:
    return Capabilities()


@pytest.fixture
def tracker(gateway, caps) -> JobTracker:
    return JobTracker(
        gateway,
        confirm=caps.confirm,
        notify=caps.notify,
        download=caps.download,
        clock=lambda: TODAY,
    )


def fill_draft(tracker: JobTracker, **values: Optional[str]) -> None:
    defaults = {"company": "Globex", "role": "Data Analyst", "match": "80"}
    defaults.update(values)
    for name, value in defaults.items():
        tracker.draft.update_field(name, value)
