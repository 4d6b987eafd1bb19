"""
Production environment configuration
"""

from athleon.config.base import Settings


class ProductionSettings(Settings):
    """Production-specific settings"""

    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"

    ALLOWED_ORIGINS_STR: str = "https://athleon.app,https://www.athleon.app"
    FRONTEND_URL: str = "https://athleon.app"

    DATABASE_URL: str = "sqlite:////var/lib/athleon/athleon.db"

    # Strict timeouts for production
    AI_REQUEST_TIMEOUT: float = 45.0

    LOCAL_UPLOAD_DIR: str = "/var/lib/athleon/uploads"

    model_config = {
        "env_file": ".env.production",
        "case_sensitive": True,
        "extra": "ignore"
    }
