from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Quality(str, Enum):
    K1 = "1K"
    K2 = "2K"
    K4 = "4K"


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"
    PORTRAIT_9_16 = "9:16"
    LANDSCAPE_16_9 = "16:9"


class JobStatus(str, Enum):
    """Job states as reported by the generation service."""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CameraPose(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    horizontal_angle: float = Field(..., alias="horizontalAngle", description="Azimuth in degrees, wrapped mod 360")
    vertical_angle: float = Field(..., alias="verticalAngle", ge=-90.0, le=90.0)
    distance: float = Field(..., gt=0.0, description="Camera-to-subject distance")
    zoom: float = Field(..., gt=0.0, description="Lens magnification")
    tilt: float = Field(default=0.0, ge=-45.0, le=45.0)
    quality: Quality = Quality.K2
    aspect_ratio: AspectRatio = Field(default=AspectRatio.SQUARE, alias="aspectRatio")


DEFAULT_POSE = CameraPose(
    horizontal_angle=-45,
    vertical_angle=15,
    distance=6.5,
    zoom=1.0,
    tilt=0,
    quality=Quality.K2,
    aspect_ratio=AspectRatio.SQUARE,
)


class BilingualPrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    secondary: str


class GenerationRequest(BaseModel):
    """Outbound payload for the submission endpoint, serialized by alias."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    model: str
    prompt: str
    aspect_ratio: str = Field(..., alias="aspectRatio")
    image_size: str = Field(..., alias="imageSize")
    urls: List[str]
    web_hook: str = Field(default="-1", alias="webHook")
    shut_progress: bool = Field(default=True, alias="shutProgress")
    strength: float = Field(..., ge=0.0, le=1.0)
    top_p: float = Field(default=0.9, alias="topP")
    temperature: float = 1.0

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class GenerationJob(BaseModel):
    id: str
    status: JobStatus = JobStatus.QUEUED
    result_url: Optional[str] = None
    failure_reason: Optional[str] = None
    poll_attempts: int = 0


class GenerationResult(BaseModel):
    image_url: str
    prompt: str
    timestamp: int


class CameraViewRequest(BaseModel):
    pose: CameraPose = DEFAULT_POSE
    source_image: str = Field(..., min_length=1, description="Encoded source image (data URL or remote URL)")
    strength: float = Field(default=0.75, ge=0.0, le=1.0)
    credential: Optional[str] = Field(default=None, description="Bearer token; falls back to the configured key")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "pose": {
                    "horizontalAngle": -45,
                    "verticalAngle": 15,
                    "distance": 6.5,
                    "zoom": 1.0,
                    "tilt": 0,
                    "quality": "2K",
                    "aspectRatio": "1:1"
                },
                "source_image": "data:image/png;base64,iVBORw0KGgo...",
                "strength": 0.75
            }
        }
    )
