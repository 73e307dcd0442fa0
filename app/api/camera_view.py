from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import AsyncIterator, Dict, Type
import logging
import time

from app.core.config import get_settings
from app.core.limiter import limiter
from app.models.camera_view import (
    DEFAULT_POSE,
    BilingualPrompt,
    CameraPose,
    CameraViewRequest,
    GenerationResult,
)
from app.services.generation_client import (
    GenerationCancelled,
    GenerationError,
    GenerationFailed,
    GenerationJobClient,
    GenerationTimeout,
    InvalidCredential,
    MissingCredential,
    NetworkError,
    SubmissionRejected,
)
from app.services.prompt_composer import InvalidPose, compose

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

# Client closed request; there is no named constant for it in starlette
HTTP_499_CLIENT_CLOSED_REQUEST = 499

ERROR_STATUS_CODES: Dict[Type[GenerationError], int] = {
    MissingCredential: status.HTTP_400_BAD_REQUEST,
    InvalidCredential: status.HTTP_401_UNAUTHORIZED,
    SubmissionRejected: status.HTTP_422_UNPROCESSABLE_ENTITY,
    GenerationFailed: status.HTTP_502_BAD_GATEWAY,
    NetworkError: status.HTTP_502_BAD_GATEWAY,
    GenerationTimeout: status.HTTP_504_GATEWAY_TIMEOUT,
    GenerationCancelled: HTTP_499_CLIENT_CLOSED_REQUEST,
}


async def get_generation_client() -> AsyncIterator[GenerationJobClient]:
    """
    Provide a generation client per request; the HTTP client is closed afterwards.
    """
    async with GenerationJobClient.from_settings(settings) as client:
        yield client


@router.get("/defaultPose", response_model=CameraPose, status_code=status.HTTP_200_OK)
async def default_pose():
    return DEFAULT_POSE


@router.post("/composePrompt", response_model=BilingualPrompt, status_code=status.HTTP_200_OK)
async def compose_prompt(pose: CameraPose):
    """
    Translate a camera pose into the bilingual prompt that would be sent for generation.
    """
    try:
        return compose(pose)
    except InvalidPose as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/generateCameraView", response_model=GenerationResult, status_code=status.HTTP_200_OK)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
async def generate_camera_view(
    request: Request,
    body: CameraViewRequest,
    client: GenerationJobClient = Depends(get_generation_client),
):
    """
    Re-render the source image from the requested camera pose.
    Returns the public URL of the generated image together with the prompt used.
    """
    try:
        prompt = compose(body.pose)
    except InvalidPose as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    logger.info(f"Generating camera view: {prompt.primary}")
    try:
        image_url = await client.generate(
            credential=body.credential or settings.GENERATION_API_KEY,
            source_image=body.source_image,
            prompt=prompt.primary,
            strength=body.strength,
            aspect_ratio=body.pose.aspect_ratio,
            quality=body.pose.quality,
        )
    except GenerationError as e:
        logger.error(f"Generation failed: {e.message}")
        raise HTTPException(
            status_code=ERROR_STATUS_CODES.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail=e.message
        )

    return GenerationResult(
        image_url=image_url,
        prompt=prompt.primary,
        timestamp=int(time.time() * 1000)
    )
