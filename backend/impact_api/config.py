from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    transcription_model: str = "whisper-1"
    max_tokens: int = 2048
    story_temperature: float = 0.7
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"
    log_level: str = "INFO"
    seed_sample_report: bool = True
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
