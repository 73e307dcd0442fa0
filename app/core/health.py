from urllib.parse import urlsplit

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from app.core.config import get_settings

settings = get_settings()

class HealthResponse(BaseModel):
    status: str
    version: str
    port: int
    generation_host: str

async def get_health_status() -> JSONResponse:
    """
    Simple health check to verify the service is running and which generation host it targets
    """
    return JSONResponse(
        content=HealthResponse(
            status="up",
            version=settings.VERSION,
            port=settings.PORT,
            generation_host=urlsplit(settings.GENERATION_SUBMIT_URL).hostname or ""
        ).model_dump(),
        status_code=status.HTTP_200_OK
    )
