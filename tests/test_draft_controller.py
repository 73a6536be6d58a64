import asyncio

import pytest

from jobtracker.errors import BusyError, DraftStateError, RemoteError, ValidationError
from jobtracker.services.draft_controller import DraftState
from tests.conftest import TODAY, fill_draft


def test_open_seeds_today(tracker):
    draft = tracker.draft.open_modal()
    assert tracker.draft.state is DraftState.OPEN
    assert draft.date == TODAY.isoformat()
    assert draft.company == ""
    assert draft.status == "Applied"


def test_edit_requires_open_dialog(tracker):
    with pytest.raises(DraftStateError):
        tracker.draft.update_field("company", "Acme")


def test_close_discards_draft(tracker):
    tracker.draft.open_modal()
    fill_draft(tracker, notes="call back")
    tracker.draft.close_modal()

    assert tracker.draft.state is DraftState.CLOSED
    assert tracker.draft.draft.notes == ""
    assert tracker.draft.draft.company == ""


async def test_submit_inserts_refreshes_and_closes(tracker, fake):
    fake.seed(company="Older")
    await tracker.store.refresh()

    tracker.draft.open_modal()
    fill_draft(tracker, status="Interviewing", tags="remote")
    await tracker.draft.submit()

    assert tracker.draft.state is DraftState.CLOSED
    assert tracker.draft.draft.company == ""
    records = tracker.store.records
    assert len(records) == 2
    newest = records[0]
    assert (newest.company, newest.role, newest.match, newest.status.value, newest.tags) == \
        ("Globex", "Data Analyst", 80, "Interviewing", "remote")
    assert newest.date == TODAY
    assert newest.salary is None


@pytest.mark.parametrize("match", ["-1", "101"])
async def test_invalid_match_never_reaches_store(tracker, fake, match):
    tracker.draft.open_modal()
    fill_draft(tracker, match=match)

    with pytest.raises(ValidationError):
        await tracker.draft.submit()

    assert fake.requests == []
    assert tracker.draft.state is DraftState.OPEN
    assert tracker.draft.draft.match == match


async def test_insert_failure_keeps_draft_open(tracker, fake):
    fake.fail_status["POST"] = 500
    tracker.draft.open_modal()
    fill_draft(tracker)

    with pytest.raises(RemoteError):
        await tracker.draft.submit()

    assert tracker.draft.state is DraftState.OPEN
    assert tracker.draft.draft.company == "Globex"
    assert not tracker.busy


async def test_refresh_failure_after_insert_keeps_draft_open(tracker, fake):
    fake.fail_status["GET"] = 500
    tracker.draft.open_modal()
    fill_draft(tracker)

    with pytest.raises(RemoteError) as excinfo:
        await tracker.draft.submit()

    assert excinfo.value.operation == "list"
    assert tracker.draft.state is DraftState.OPEN
    assert tracker.draft.draft.role == "Data Analyst"


async def test_submit_when_closed(tracker):
    with pytest.raises(DraftStateError):
        await tracker.draft.submit()


async def test_second_mutation_rejected_while_submitting(tracker, fake):
    gate = asyncio.Event()
    original = tracker.gateway.insert

    async def slow_insert(payload):
        await gate.wait()
        await original(payload)

    tracker.gateway.insert = slow_insert
    tracker.draft.open_modal()
    fill_draft(tracker)

    pending = asyncio.ensure_future(tracker.draft.submit())
    await asyncio.sleep(0)
    assert tracker.busy
    assert tracker.draft.state is DraftState.SUBMITTING

    with pytest.raises(BusyError):
        await tracker.delete(1)
    assert fake.count("DELETE") == 0

    gate.set()
    await pending
    assert not tracker.busy
    assert len(tracker.store.records) == 1


def _gate_insert(tracker, gate, fail: bool):
    original = tracker.gateway.insert

    async def gated_insert(payload):
        await gate.wait()
        if fail:
            raise RemoteError("insert", detail="HTTP 500")
        await original(payload)

    tracker.gateway.insert = gated_insert


async def test_cancel_during_failed_submit_stays_closed(tracker):
    gate = asyncio.Event()
    _gate_insert(tracker, gate, fail=True)
    tracker.draft.open_modal()
    fill_draft(tracker)

    pending = asyncio.ensure_future(tracker.draft.submit())
    await asyncio.sleep(0)
    tracker.draft.close_modal()
    gate.set()

    with pytest.raises(RemoteError):
        await pending
    assert tracker.draft.state is DraftState.CLOSED
    assert tracker.draft.draft.company == ""


async def test_reopen_during_successful_submit_keeps_new_draft(tracker):
    gate = asyncio.Event()
    _gate_insert(tracker, gate, fail=False)
    tracker.draft.open_modal()
    fill_draft(tracker)

    pending = asyncio.ensure_future(tracker.draft.submit())
    await asyncio.sleep(0)
    tracker.draft.close_modal()
    tracker.draft.open_modal()
    gate.set()
    await pending

    assert tracker.draft.state is DraftState.OPEN
    assert tracker.draft.draft.date == TODAY.isoformat()
    assert tracker.draft.draft.company == ""
    assert len(tracker.store.records) == 1
