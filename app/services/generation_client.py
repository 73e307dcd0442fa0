"""
Client for the remote job-based image generation service.

A call to `GenerationJobClient.generate` submits one job, polls the result
endpoint at a fixed cadence until the job reaches a terminal state, and returns
the asset URL rewritten onto the public CDN.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from app.core.config import Settings
from app.core.monitoring import GENERATION_JOB_LATENCY, record_outcome, track_time
from app.models.camera_view import (
    AspectRatio,
    GenerationJob,
    GenerationRequest,
    JobStatus,
    Quality,
)
from app.utils.url_utils import normalize_asset_url

logger = logging.getLogger(__name__)

QUEUED_CODE = -22
SUCCESS_CODE = 0

QUALITY_IMAGE_SIZES: Dict[Quality, str] = {
    Quality.K1: "1024x1024",
    Quality.K2: "1024x1024",
    Quality.K4: "1024x1024",
}
if set(QUALITY_IMAGE_SIZES) != set(Quality):
    raise RuntimeError("every quality tier needs an image size")

Sleep = Callable[[float], Awaitable[Any]]


class GenerationError(Exception):
    """Base class for generation job failures"""
    fallback_message = "Generation request failed"
    outcome = "error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.fallback_message
        super().__init__(self.message)


class MissingCredential(GenerationError):
    fallback_message = "No API key configured"
    outcome = "missing_credential"


class InvalidCredential(GenerationError):
    fallback_message = "API key is invalid"
    outcome = "invalid_credential"


class SubmissionRejected(GenerationError):
    fallback_message = "Failed to submit generation job"
    outcome = "rejected"


class GenerationFailed(GenerationError):
    fallback_message = "Generation job failed"
    outcome = "failed"


class GenerationTimeout(GenerationError):
    fallback_message = "Generation timed out, please try again later"
    outcome = "timeout"


class GenerationCancelled(GenerationError):
    fallback_message = "Generation was cancelled"
    outcome = "cancelled"


class NetworkError(GenerationError):
    fallback_message = "Network request failed"
    outcome = "network_error"


class PollAction(Enum):
    CONTINUE = "continue"
    SUCCEED = "succeed"
    FAIL = "fail"


@dataclass(frozen=True)
class PollDecision:
    action: PollAction
    status: Optional[JobStatus] = None
    result_url: Optional[str] = None
    failure_reason: Optional[str] = None


def next_action(body: Any) -> PollDecision:
    """
    Decide what the poll loop does after observing one result-endpoint response.

    Anything that is neither a success nor a failure terminal, including bodies
    that are not JSON objects at all, means "keep polling".
    """
    if not isinstance(body, dict):
        return PollDecision(PollAction.CONTINUE)

    code = body.get("code")
    if code == QUEUED_CODE:
        return PollDecision(PollAction.CONTINUE, status=JobStatus.QUEUED)

    data = body.get("data")
    if code != SUCCESS_CODE or not isinstance(data, dict):
        return PollDecision(PollAction.CONTINUE)

    status = data.get("status")
    if status == JobStatus.SUCCEEDED.value:
        results = data.get("results")
        first = results[0] if isinstance(results, list) and results else None
        url = first.get("url") if isinstance(first, dict) else None
        if url:
            return PollDecision(PollAction.SUCCEED, status=JobStatus.SUCCEEDED, result_url=url)
        return PollDecision(PollAction.CONTINUE)

    if status == JobStatus.FAILED.value:
        return PollDecision(
            PollAction.FAIL,
            status=JobStatus.FAILED,
            failure_reason=data.get("failure_reason") or GenerationFailed.fallback_message,
        )

    if status == JobStatus.RUNNING.value:
        return PollDecision(PollAction.CONTINUE, status=JobStatus.RUNNING)
    return PollDecision(PollAction.CONTINUE)


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class GenerationJobClient:
    def __init__(
        self,
        submit_url: str,
        result_url: str,
        model: str,
        oss_id: str,
        oss_path: str,
        private_storage_domain: str,
        public_cdn_domain: str,
        poll_interval: float = 3.0,
        max_attempts: int = 60,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.submit_url = submit_url
        self.result_url = result_url
        self.model = model
        self.oss_id = oss_id
        self.oss_path = oss_path
        self.private_storage_domain = private_storage_domain
        self.public_cdn_domain = public_cdn_domain
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "GenerationJobClient":
        return cls(
            submit_url=settings.GENERATION_SUBMIT_URL,
            result_url=settings.GENERATION_RESULT_URL,
            model=settings.GENERATION_MODEL,
            oss_id=settings.OSS_ID,
            oss_path=settings.OSS_PATH,
            private_storage_domain=settings.PRIVATE_STORAGE_DOMAIN,
            public_cdn_domain=settings.PUBLIC_CDN_DOMAIN,
            poll_interval=settings.POLL_INTERVAL_SECONDS,
            max_attempts=settings.POLL_MAX_ATTEMPTS,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            **kwargs,
        )

    async def __aenter__(self) -> "GenerationJobClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def build_request(
        self,
        source_image: str,
        prompt: str,
        strength: float,
        aspect_ratio: AspectRatio,
        quality: Quality,
    ) -> GenerationRequest:
        return GenerationRequest(
            model=self.model,
            prompt=prompt,
            aspect_ratio=AspectRatio(aspect_ratio).value,
            image_size=QUALITY_IMAGE_SIZES[Quality(quality)],
            urls=[source_image],
            strength=strength,
        )

    @track_time(GENERATION_JOB_LATENCY, {"stage": "submit"})
    async def submit(self, credential: str, request: GenerationRequest) -> GenerationJob:
        """
        Submit a generation request and return the job the service created.
        """
        headers = {
            "Authorization": f"Bearer {credential}",
            "oss-id": self.oss_id,
            "oss-path": self.oss_path,
        }
        try:
            response = await self.client.post(self.submit_url, json=request.to_payload(), headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Submission request failed: {str(e)}")
            raise NetworkError(f"Submission request failed: {str(e)}") from e

        if response.status_code == 401:
            raise InvalidCredential()

        body = _decode_json(response)
        if not isinstance(body, dict):
            logger.error(f"Submission returned an unreadable response (HTTP {response.status_code})")
            raise NetworkError(f"Unexpected response from generation service (HTTP {response.status_code})")

        data = body.get("data") or {}
        job_id = data.get("id") if isinstance(data, dict) else None
        if body.get("code") != SUCCESS_CODE or not job_id:
            logger.warning(f"Generation service rejected the job: code={body.get('code')} msg={body.get('msg')}")
            raise SubmissionRejected(body.get("msg"))

        logger.info(f"Submitted generation job {job_id}")
        return GenerationJob(id=job_id)

    @track_time(GENERATION_JOB_LATENCY, {"stage": "poll"})
    async def poll(
        self,
        credential: str,
        job: GenerationJob,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationJob:
        """
        Poll the result endpoint until the job succeeds or fails.

        The loop issues at most `max_attempts` calls spaced `poll_interval` apart.
        Only server responses change `job.status`; timeout and cancellation are
        raised as errors and leave the last observed status in place.
        """
        headers = {"Authorization": f"Bearer {credential}"}

        for attempt in range(1, self.max_attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise GenerationCancelled()

            try:
                response = await self.client.post(self.result_url, json={"id": job.id}, headers=headers)
            except httpx.HTTPError as e:
                logger.error(f"Polling job {job.id} failed: {str(e)}")
                raise NetworkError(f"Polling request failed: {str(e)}") from e
            job.poll_attempts = attempt

            decision = next_action(_decode_json(response))
            if decision.status is not None:
                job.status = decision.status

            if decision.action is PollAction.SUCCEED:
                job.result_url = normalize_asset_url(
                    decision.result_url,
                    private_domain=self.private_storage_domain,
                    public_base=self.public_cdn_domain,
                    bucket_path=self.oss_path,
                )
                logger.info(f"Job {job.id} succeeded after {attempt} poll(s)")
                return job

            if decision.action is PollAction.FAIL:
                job.failure_reason = decision.failure_reason
                logger.warning(f"Job {job.id} failed: {decision.failure_reason}")
                raise GenerationFailed(decision.failure_reason)

            logger.debug(f"Job {job.id} not finished (attempt {attempt}/{self.max_attempts}, status={job.status.value})")
            if attempt < self.max_attempts:
                await self._sleep(self.poll_interval)

        logger.warning(f"Job {job.id} timed out after {self.max_attempts} polls")
        raise GenerationTimeout()

    async def generate(
        self,
        credential: Optional[str],
        source_image: str,
        prompt: str,
        strength: float = 0.75,
        aspect_ratio: AspectRatio = AspectRatio.SQUARE,
        quality: Quality = Quality.K2,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Run one generation job to completion and return the public asset URL.

        Raises a GenerationError subclass for every failure; nothing is retried
        apart from polling a job the service reports as still queued.
        """
        credential = (credential or "").strip()
        if not credential:
            record_outcome(MissingCredential.outcome)
            raise MissingCredential()
        if not source_image:
            raise ValueError("source_image must be a non-empty encoded image")
        if not 0.0 <= strength <= 1.0:
            raise ValueError(f"strength must be within [0, 1], got {strength}")

        request = self.build_request(source_image, prompt, strength, aspect_ratio, quality)
        job = None
        try:
            if cancel_event is not None and cancel_event.is_set():
                raise GenerationCancelled()
            job = await self.submit(credential, request)
            job = await self.poll(credential, job, cancel_event=cancel_event)
        except GenerationError as e:
            record_outcome(e.outcome, job.poll_attempts if job else 0)
            raise
        except asyncio.CancelledError:
            record_outcome(GenerationCancelled.outcome, job.poll_attempts if job else 0)
            raise

        record_outcome("succeeded", job.poll_attempts)
        return job.result_url
