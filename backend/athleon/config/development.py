"""
Development environment configuration
"""

from athleon.config.base import Settings


class DevelopmentSettings(Settings):
    """Development-specific settings"""

    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"

    # Vite dev server
    ALLOWED_ORIGINS_STR: str = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"

    # Development database
    DATABASE_URL: str = "sqlite:///./athleon-dev.db"

    # Slow local models are common in development
    AI_REQUEST_TIMEOUT: float = 120.0

    LOCAL_UPLOAD_DIR: str = "./uploads"

    model_config = {
        "env_file": ".env.development",
        "case_sensitive": True,
        "extra": "ignore"
    }
