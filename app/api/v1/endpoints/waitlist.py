from fastapi import APIRouter, BackgroundTasks, Depends, Header

from app.core.deps import enforce_submit_rate_limit, get_waitlist_service
from app.schemas.waitlist import AdmissionData, ErrorResponse, SubmissionResponse, WaitlistSubmission
from app.services.notification_service import send_admission_notifications
from app.services.waitlist_service import WaitlistService

router = APIRouter(tags=["waitlist"])


@router.post(
    "/waitlist",
    response_model=SubmissionResponse,
    dependencies=[Depends(enforce_submit_rate_limit)],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
def join_waitlist(
    payload: WaitlistSubmission,
    background_tasks: BackgroundTasks,
    referer: str | None = Header(default=None),
    service: WaitlistService = Depends(get_waitlist_service),
):
    """Join the waitlist. The confirmation email goes out after the response."""
    confirmation = service.admit(payload.email, payload.username, source=referer)

    background_tasks.add_task(
        send_admission_notifications,
        confirmation.email,
        confirmation.twitter_handle,
        confirmation.position,
    )

    return SubmissionResponse(
        data=AdmissionData(
            twitter_handle=confirmation.twitter_handle,
            position=confirmation.position,
            joined_at=confirmation.joined_at,
            estimated_access_date=confirmation.estimated_access_date,
        )
    )
