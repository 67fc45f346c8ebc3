# backend/config.py
"""
Configuration management for ShotCoach
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_env: str = "development"
    debug: bool = True

    # Inference provider selection: "auto", "claude" or "gemini"
    inference_provider: str = "auto"
    inference_timeout_seconds: int = 20

    # Claude AI Configuration
    anthropic_api_key: str = ""  # Empty string if not set - provider reports unavailable
    claude_model: str = "claude-sonnet-4-5-20250929"
    claude_max_tokens: int = 300
    claude_temperature: float = 0.5

    # Gemini Configuration
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_max_tokens: int = 300
    gemini_temperature: float = 0.5

    # Reference photo analysis
    reference_max_tokens: int = 300
    reference_temperature: float = 0.3
    reference_download_timeout_seconds: int = 15

    # Analysis loop timing
    analysis_min_interval_ms: int = 2000
    analysis_interval_ms: int = 3000

    # Frame encoding sent to the vision model
    encode_target_width: int = 480
    encode_jpeg_quality: int = 50  # 0-100

    # Camera
    camera_index: int = 0
    flash_on_as_torch: bool = False  # Send "on" as "torch" during live coaching

    # Coaching
    perfect_shot_threshold: int = 90
    max_instructions: int = 3

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings"""
    return settings
