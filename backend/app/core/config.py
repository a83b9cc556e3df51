from functools import lru_cache

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Wanderlust AI Planner"
    environment: str = "local"
    llm_provider: str = "mock"
    gemini_api_key: str | None = Field(
        None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY")
    )
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3"
    llm_timeout_seconds: float | None = None
    storage_path: str = "data/wanderlust.json"
    calendar_failure_rate: float = Field(0.3, ge=0.0, le=1.0)
    calendar_latency_seconds: float = Field(1.5, ge=0.0)
    calendar_ics_url: str | None = None
    default_recipient_name: str = "Traveler"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    load_dotenv(".env")
    return Settings()


settings = get_settings()
