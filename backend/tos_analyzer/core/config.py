from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Terms of Service Analyzer"
    LOG_LEVEL: str = "INFO"

    LLM_API_URL: str = "https://api.together.xyz/v1/chat/completions"
    LLM_API_KEY: str = ""
    LLM_MODEL: str = "meta-llama/Llama-3-70b-chat-hf"
    LLM_TIMEOUT_SECONDS: float = 120.0
    LLM_MAX_CONCURRENCY: int = 4

    CHUNK_MAX_SIZE: int = 12000
    # Sanitized text above this length is still analyzed but flagged as truncated-risk
    SOFT_LENGTH_LIMIT: int = 60000

    URL_FETCH_TIMEOUT_SECONDS: float = 20.0
    MAX_UPLOAD_SIZE_MB: int = 20

    ANALYSIS_MAX_ATTEMPTS: int = 2
    ANALYSIS_RETRY_BACKOFF_SECONDS: float = 1.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> "Settings":
    return Settings()


settings = get_settings()
