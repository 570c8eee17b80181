"""Configuration management using pydantic-settings."""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5000, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")
    cors_origins: str = Field(default="*", description="Allowed CORS origins (comma separated)")

    # Database Configuration
    database_path: str = Field(default="./data/nexusminds.db", description="DuckDB database file")
    seed_default_personalities: bool = Field(default=True, description="Seed default personas on first boot")

    # Groq Configuration
    groq_api_key: Optional[str] = Field(default=None, description="Groq API key")
    groq_base_url: Optional[str] = Field(default=None, description="Override Groq API base URL")
    default_model: str = Field(default="llama3-8b-8192", description="Hardcoded last-resort model")
    fallback_model: str = Field(default="llama3-8b-8192", description="Preferred small fallback model")
    insights_model: str = Field(default="llama3-8b-8192", description="Model used for conversation insights")
    completion_timeout: float = Field(default=60.0, description="Per-call completion timeout in seconds")
    completion_max_tokens: int = Field(default=500, description="Max tokens per agent reply")

    # Orchestration Configuration
    turn_delay: float = Field(default=1.5, description="Pause between agent replies in seconds")
    default_turn_count: int = Field(default=3, description="Turns when the request does not say")
    max_turn_count: int = Field(default=10, description="Upper bound on turns per orchestration run")

    # Realtime Configuration
    heartbeat_interval: float = Field(default=30.0, description="WebSocket heartbeat interval in seconds")
    sweep_interval: float = Field(default=60.0, description="Stale connection sweep interval in seconds")

    # Rate Limit Configuration
    orchestration_rate_limit: int = Field(default=3, description="Orchestration starts per window")
    orchestration_rate_window: float = Field(default=300.0, description="Orchestration window in seconds")
    insight_rate_limit: int = Field(default=3, description="Insight requests per window")
    insight_rate_window: float = Field(default=60.0, description="Insight window in seconds")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[str] = Field(default="./logs/nexusminds.log", description="Log file path")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, description="Rotate the log file at this size")
    log_backup_count: int = Field(default=5, description="Rotated log files to keep")

    def get_cors_origins(self) -> List[str]:
        """Get list of allowed CORS origins."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
