import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from careshift.api.deps import get_request_id, get_webhook_client
from careshift.core.config import settings
from careshift.schemas.schedule import (
    ScheduleRequest,
    ScheduleResponse,
    ValidateRequest,
    ValidateResponse,
    WebhookStatus,
)
from careshift.services.ai import plan_schedule
from careshift.services.scheduling import ScheduleInputError, validate_assignments
from careshift.services.webhook import WebhookClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["schedule"])


@router.options("/generate-schedule", status_code=status.HTTP_204_NO_CONTENT)
def generate_schedule_preflight():
    if not settings.ALLOW_ORIGIN:
        return Response(status_code=status.HTTP_403_FORBIDDEN)
    return Response(
        status_code=status.HTTP_204_NO_CONTENT,
        headers={
            "Access-Control-Allow-Methods": "POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Max-Age": "600",
        },
    )


@router.post("/generate-schedule", response_model=ScheduleResponse)
def generate_schedule(
    payload: ScheduleRequest,
    force: str = "0",
    webhook: WebhookClient = Depends(get_webhook_client),
    request_id: str = Depends(get_request_id),
):
    """Run the scheduler, re-validate its output, and forward it to the webhook."""
    force_post = force == "1"

    try:
        plan = plan_schedule(
            payload.shift_template,
            payload.employees,
            payload.availability,
            payload.existing_assignments or [],
        )
        validation_errors = validate_assignments(
            plan.result.assignments,
            payload.shift_template,
            payload.employees,
            payload.availability,
        )
    except ScheduleInputError as e:
        logger.error(f"[{request_id}] Invalid schedule input: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    schedule = plan.result.to_dict()
    issues = schedule["issues"] + [e.to_issue().to_dict() for e in validation_errors]

    webhook_status = WebhookStatus(ok=False, status=0)
    if webhook.is_configured:
        result = webhook.post_schedule(
            {
                "week_id": payload.week_id,
                "start_date": payload.start_date,
                "end_date": payload.end_date,
                "assignments": schedule["assignments"],
                "totalsByEmployee": schedule["totalsByEmployee"],
                "issues": issues,
            },
            force=force_post,
        )
        webhook_status = WebhookStatus(
            ok=result.ok,
            status=result.status,
            text=None if result.ok else result.text,
        )

    logger.info(
        f"[{request_id}] Generated schedule week={payload.week_id} "
        f"shifts={len(payload.shift_template)} assignments={len(schedule['assignments'])} "
        f"issues={len(issues)} validation_errors={len(validation_errors)} "
        f"force={force_post} webhook={webhook_status.status}"
    )

    return ScheduleResponse(
        success=True,
        week_id=payload.week_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        assignments=schedule["assignments"],
        totalsByEmployee=schedule["totalsByEmployee"],
        issues=issues,
        zapier=webhook_status,
        metadata=plan.metadata,
    )


@router.post("/validate-assignments", response_model=ValidateResponse)
def validate(
    payload: ValidateRequest,
    request_id: str = Depends(get_request_id),
):
    """Re-check an externally edited assignment list."""
    try:
        errors = validate_assignments(
            payload.assignments,
            payload.shift_template,
            payload.employees,
            payload.availability,
        )
    except ScheduleInputError as e:
        logger.error(f"[{request_id}] Invalid validation input: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ValidateResponse(valid=not errors, errors=[e.to_dict() for e in errors])
