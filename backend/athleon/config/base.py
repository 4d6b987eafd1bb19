"""
Base configuration settings
"""

import os
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Base settings configuration"""

    # Application settings
    APP_NAME: str = "Athleon AI"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3001
    ALLOWED_ORIGINS_STR: str = "http://localhost:5173,http://127.0.0.1:5173"
    FRONTEND_URL: str = "http://localhost:5173"

    # Database settings
    DATABASE_URL: str = "sqlite:///./athleon.db"

    # OpenRouter settings (OpenAI-compatible chat completions)
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_APP_TITLE: str = "Athleon Global Backend"
    AI_MODEL: str = "google/gemini-2.0-flash-lite-001"
    AI_REQUEST_TIMEOUT: float = 60.0

    # Video preprocessing
    MAX_VIDEO_DURATION_SECONDS: float = 600.0  # 10 minutes
    FRAME_POSITIONS_STR: str = "0.1,0.3,0.5,0.7,0.9"
    FRAME_MAX_WIDTH: int = 640
    FRAME_MAX_HEIGHT: int = 480
    FRAME_JPEG_QUALITY: int = 90

    # File upload settings
    MAX_FILE_SIZE: int = 100 * 1024 * 1024  # 100MB
    ALLOWED_EXTENSIONS_STR: str = ".mp4,.mov,.avi,.mkv,.webm"
    LOCAL_UPLOAD_DIR: str = "./uploads"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "athleon-ai.log"

    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        """Parse allowed CORS origins from string"""
        origins_str = os.getenv('ALLOWED_ORIGINS', self.ALLOWED_ORIGINS_STR)
        return [origin.strip() for origin in origins_str.split(',') if origin.strip()]

    @property
    def ALLOWED_EXTENSIONS(self) -> List[str]:
        """Parse allowed extensions from string"""
        ext_str = os.getenv('ALLOWED_EXTENSIONS', self.ALLOWED_EXTENSIONS_STR)
        return [ext.strip().lower() for ext in ext_str.split(',') if ext.strip()]

    @property
    def FRAME_POSITIONS(self) -> List[float]:
        """Relative positions (fractions of the duration) sampled for frames"""
        return [float(p) for p in self.FRAME_POSITIONS_STR.split(',') if p.strip()]

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore extra fields from .env
    }


def load_settings() -> Settings:
    """Pick the settings class for APP_ENV (development, production, or base)"""
    app_env = os.getenv('APP_ENV', '').lower()
    if app_env == 'development':
        from athleon.config.development import DevelopmentSettings
        return DevelopmentSettings()
    if app_env == 'production':
        from athleon.config.production import ProductionSettings
        return ProductionSettings()
    return Settings()


# Create settings instance
settings = load_settings()
