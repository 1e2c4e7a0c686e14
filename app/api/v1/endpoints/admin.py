from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from app.core.deps import get_admin_waitlist_service, require_admin_key
from app.core.exceptions import WaitlistError
from app.schemas.waitlist import (
    ActionResponse,
    Pagination,
    StatusUpdateRequest,
    WaitlistEntryOut,
    WaitlistListResponse,
    WaitlistStatsResponse,
)
from app.services.admin_waitlist_service import AdminWaitlistService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_key)])


@router.get("/waitlist", response_model=WaitlistListResponse)
@router.get("/list", response_model=WaitlistListResponse, include_in_schema=False)
def list_waitlist(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=500),
    status: Optional[str] = None,
    service: AdminWaitlistService = Depends(get_admin_waitlist_service),
):
    """List entries, most recent first, optionally filtered by status."""
    result = service.list_entries(status=status, page=page, limit=limit)
    return WaitlistListResponse(
        entries=[WaitlistEntryOut.from_entry(e) for e in result["entries"]],
        pagination=Pagination(
            total=result["total"],
            page=result["page"],
            limit=result["limit"],
            pages=result["page_count"],
        ),
    )


@router.get("/waitlist/stats", response_model=WaitlistStatsResponse)
def waitlist_stats(
    tz: str = "UTC",
    service: AdminWaitlistService = Depends(get_admin_waitlist_service),
):
    return WaitlistStatsResponse(**service.stats(tz))


@router.get("/waitlist/export")
def export_waitlist(service: AdminWaitlistService = Depends(get_admin_waitlist_service)):
    return Response(
        content=service.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=waitlist.csv"},
    )


@router.get("/waitlist/{entry_id}", response_model=WaitlistEntryOut)
def get_waitlist_entry(
    entry_id: str,
    service: AdminWaitlistService = Depends(get_admin_waitlist_service),
):
    return WaitlistEntryOut.from_entry(service.get_entry(entry_id))


@router.put("/waitlist", response_model=ActionResponse)
def update_waitlist_entry(
    payload: StatusUpdateRequest,
    service: AdminWaitlistService = Depends(get_admin_waitlist_service),
):
    if not payload.id or not payload.status:
        raise WaitlistError("Missing required fields")
    service.update_status(payload.id, payload.status)
    return ActionResponse(message="Entry updated")


@router.delete("/waitlist", response_model=ActionResponse)
def delete_waitlist_entry(
    id: Optional[str] = None,
    service: AdminWaitlistService = Depends(get_admin_waitlist_service),
):
    if not id:
        raise WaitlistError("Missing required field: id", field="id")
    service.remove(id)
    return ActionResponse(message="Entry deleted")
