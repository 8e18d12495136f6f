"""API routes for the sleep record service"""
import logging
from datetime import datetime, timezone
from typing import Any, List
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from sleep_api.api.middleware import limiter, route_rate_limit
from sleep_api.api.models import MessageResponse, ErrorResponse, HealthCheckResponse
from sleep_api.models.sleep import SleepRecord
from sleep_api.services.sleep_service import SleepRecordService

logger = logging.getLogger(__name__)

router = APIRouter()

WELCOME_TEXT = "Welcome to sleep Data"


def get_sleep_service(request: Request) -> SleepRecordService:
    """Service instance built by create_api_application"""
    return request.app.state.sleep_service


async def read_payload(request: Request) -> Any:
    """
    Parse a JSON or URL-encoded form body.

    A missing or malformed body gives None, which the service reports as
    missing fields.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)

    try:
        return await request.json()
    except ValueError:
        return None


@router.get("/", response_class=PlainTextResponse)
async def welcome():
    """Fixed greeting, independent of storage state (never rate limited)"""
    return WELCOME_TEXT


@router.post(
    "/sleep",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": MessageResponse}}
)
@limiter.limit(route_rate_limit)
async def create_sleep_record(
    request: Request,
    service: SleepRecordService = Depends(get_sleep_service)
):
    """Log a sleep entry; the created record is not echoed back"""
    payload = await read_payload(request)
    await service.create_record(payload)
    return MessageResponse(message="User created successfully")


@router.get(
    "/sleep/{id}",
    response_model=List[SleepRecord],
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}}
)
@limiter.limit(route_rate_limit)
async def list_sleep_records(
    request: Request,
    id: str,
    service: SleepRecordService = Depends(get_sleep_service)
):
    """All sleep records for a user, oldest first"""
    return await service.list_records(id)


@router.delete(
    "/sleep/{record_id}",
    response_model=MessageResponse,
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}}
)
@limiter.limit(route_rate_limit)
async def delete_sleep_record(
    request: Request,
    record_id: str,
    service: SleepRecordService = Depends(get_sleep_service)
):
    """Delete one sleep record by its id"""
    await service.delete_record(record_id)
    return MessageResponse(message="Sleep record deleted successfully")


@router.get("/health", response_model=HealthCheckResponse)
@limiter.limit(route_rate_limit)
async def health_check(
    request: Request,
    service: SleepRecordService = Depends(get_sleep_service)
):
    """Health check endpoint"""
    try:
        await service.store.ping()
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "degraded",
        database=db_status,
        timestamp=datetime.now(timezone.utc)
    )
