from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional

class Settings(BaseSettings):
    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Camera View Generation API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # CORS Settings
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Generation service Settings
    GENERATION_SUBMIT_URL: str = "https://grsai.dakka.com.cn/v1/draw/nano-banana"
    GENERATION_RESULT_URL: str = "https://grsai.dakka.com.cn/v1/draw/result"
    GENERATION_MODEL: str = "nano-banana-pro"
    GENERATION_API_KEY: Optional[str] = None

    # Object storage routing
    OSS_ID: str = "692b1ce0469719c8c4c5af05"
    OSS_PATH: str = "bananaproimage"
    PRIVATE_STORAGE_DOMAIN: str = "r2.cloudflarestorage.com"
    PUBLIC_CDN_DOMAIN: str = "https://cdn.gordensun.com/bananaproimage"

    # Polling
    POLL_INTERVAL_SECONDS: float = 3.0
    POLL_MAX_ATTEMPTS: int = 60  # ~3 minutes at the default interval
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Rate Limiting
    RATE_LIMIT_PER_MINUTE: int = 60

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")

@lru_cache()
def get_settings() -> Settings:
    return Settings()
