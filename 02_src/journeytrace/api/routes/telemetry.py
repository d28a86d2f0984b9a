"""Browser telemetry ingestion route."""

import json

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ...app import IApplication
from ...ingestion import TelemetryError, TelemetryValidationError
from ...logging_config import get_logger

logger = get_logger(__name__)


def create_telemetry_router(app: IApplication) -> APIRouter:
    """Create telemetry router."""
    router = APIRouter(prefix="/telemetry", tags=["telemetry"])

    @router.post("/browser")
    async def ingest_browser_telemetry(request: Request) -> JSONResponse:
        """Accept a batch of browser journeys and events."""
        try:
            body = json.loads(await request.body())
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Rejected telemetry batch: body is not JSON")
            return JSONResponse(
                status_code=TelemetryValidationError.status_code,
                content={"error": TelemetryValidationError.public_message},
            )

        try:
            result = await app.ingestion.process_batch(body)
        except TelemetryError as e:
            if e.status_code == 400:
                logger.warning(f"Rejected telemetry batch: {e}")
            return JSONResponse(
                status_code=e.status_code, content={"error": e.public_message}
            )

        return JSONResponse(content=result.to_response())

    return router
