from prometheus_client import Counter, Histogram, Info
import time
import asyncio
from functools import wraps
from typing import Callable, Any

# Metrics
REQUEST_COUNT = Counter(
    'app_request_total',
    'Total number of requests',
    ['method', 'endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'app_request_latency_seconds',
    'Request latency in seconds',
    ['method', 'endpoint']
)

GENERATION_JOB_LATENCY = Histogram(
    'app_generation_job_seconds',
    'Time spent in each stage of a remote generation job',
    ['stage'],
    buckets=(0.5, 1, 2.5, 5, 10, 30, 60, 120, 180, 240)
)

GENERATION_POLL_ATTEMPTS = Histogram(
    'app_generation_poll_attempts',
    'Number of result polls issued per generation job',
    buckets=(1, 2, 5, 10, 20, 40, 60)
)

GENERATION_OUTCOMES = Counter(
    'app_generation_outcomes_total',
    'Terminal outcomes of generation jobs',
    ['outcome']
)

APP_INFO = Info('app_info', 'Application information')
APP_INFO.info({
    'version': '1.0.0',
    'name': 'Camera View Generation API'
})

def track_time(metric: Histogram, labels: dict) -> Callable:
    """
    Decorator to track execution time of a function using a Prometheus histogram.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                metric.labels(**labels).observe(time.time() - start_time)

        @wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                metric.labels(**labels).observe(time.time() - start_time)

        return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper
    return decorator

def record_outcome(outcome: str, poll_attempts: int = 0) -> None:
    GENERATION_OUTCOMES.labels(outcome=outcome).inc()
    if poll_attempts:
        GENERATION_POLL_ATTEMPTS.observe(poll_attempts)
