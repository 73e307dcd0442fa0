import logging
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import json

from app.core.monitoring import REQUEST_COUNT, REQUEST_LATENCY

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Body fields that are too large or too sensitive to log
REDACTED_FIELDS = ("source_image", "credential")

def redact_body(body):
    if not isinstance(body, dict):
        return body
    return {
        key: "<redacted>" if key in REDACTED_FIELDS and value else value
        for key, value in body.items()
    }

def endpoint_label(request: Request) -> str:
    """Route template for metric labels, so raw paths never become label values"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"

class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        logger.info(f"Request: {request.method} {request.url.path}")

        response = await call_next(request)

        process_time = time.time() - start_time
        endpoint = endpoint_label(request)
        REQUEST_COUNT.labels(
            method=request.method, endpoint=endpoint, status=response.status_code
        ).inc()
        REQUEST_LATENCY.labels(method=request.method, endpoint=endpoint).observe(process_time)
        logger.info(f"Response: Status {response.status_code}, Time: {process_time:.2f}s")

        return response

class RequestValidationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.method == "POST" and logger.isEnabledFor(logging.DEBUG):
            try:
                body = await request.json()
                logger.debug(f"Request body: {json.dumps(redact_body(body))}")
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.error("Invalid JSON in request body")

        response = await call_next(request)
        return response
