"""Application Tracking Routes"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel
from typing import Any, Optional

from jobtracker.services.tracker import JobTracker
from jobtracker.utils.logger import get_logger

router = APIRouter()
logger = get_logger("jobtracker.routes")


class DraftFieldUpdate(BaseModel):
    field: str
    value: Optional[Any] = None


def get_tracker(request: Request) -> JobTracker:
    return request.app.state.tracker


def _snapshot(tracker: JobTracker) -> dict:
    store = tracker.store
    return {
        "applications": [r.to_dict() for r in store.records],
        "stats": store.stats.to_dict(),
        "state": store.state.value,
        "loaded": store.loaded,
        "busy": tracker.busy,
        "error": str(store.last_error) if store.last_error else None,
    }


def _draft_view(tracker: JobTracker) -> dict:
    return {"state": tracker.draft.state.value, "draft": tracker.draft.draft.to_dict()}


def _require_confirmation(confirm: bool) -> None:
    if not confirm:
        raise HTTPException(status_code=400, detail="Confirmation required (confirm=true)")


@router.get("/")
async def list_applications(tracker: JobTracker = Depends(get_tracker)):
    return _snapshot(tracker)


@router.post("/refresh")
async def refresh_applications(tracker: JobTracker = Depends(get_tracker)):
    await tracker.refresh()
    return _snapshot(tracker)


@router.get("/stats")
async def get_stats(tracker: JobTracker = Depends(get_tracker)):
    return {"stats": tracker.stats.to_dict()}


@router.get("/draft")
async def get_draft(tracker: JobTracker = Depends(get_tracker)):
    return _draft_view(tracker)


@router.post("/draft/open")
async def open_draft(tracker: JobTracker = Depends(get_tracker)):
    tracker.draft.open_modal()
    return _draft_view(tracker)


@router.patch("/draft")
async def update_draft(data: DraftFieldUpdate, tracker: JobTracker = Depends(get_tracker)):
    tracker.draft.update_field(data.field, data.value)
    return _draft_view(tracker)


@router.post("/draft/cancel")
async def cancel_draft(tracker: JobTracker = Depends(get_tracker)):
    tracker.draft.close_modal()
    return _draft_view(tracker)


@router.post("/draft/submit")
async def submit_draft(tracker: JobTracker = Depends(get_tracker)):
    await tracker.draft.submit()
    return {"success": True, **_snapshot(tracker)}


@router.get("/export")
async def export_applications(tracker: JobTracker = Depends(get_tracker)):
    export = tracker.export()
    if export is None:
        return Response(status_code=204)
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.delete("/{app_id}")
async def delete_application(
    app_id: str,
    confirm: bool = False,
    tracker: JobTracker = Depends(get_tracker),
):
    _require_confirmation(confirm)
    await tracker.delete(int(app_id) if app_id.isdigit() else app_id)
    return {"success": True, "message": "Application deleted", **_snapshot(tracker)}


@router.delete("/")
async def clear_applications(
    confirm: bool = False,
    tracker: JobTracker = Depends(get_tracker),
):
    _require_confirmation(confirm)
    await tracker.clear()
    return {"success": True, "message": "All applications cleared", **_snapshot(tracker)}
