"""
Production environment configuration
"""

from barrels.config.base import Settings


class ProductionSettings(Settings):
    """Production-specific settings"""

    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"

    # Reports must survive restarts
    STORAGE_BACKEND: str = "redis"
    REDIS_KEY_PREFIX: str = "barrels"

    # Strict timeouts for production
    REPORT_TIMEOUT: int = 60

    # Ignore near-invisible landmarks from the pose model
    MIN_KEYPOINT_VISIBILITY: float = 0.3

    model_config = {
        "env_file": ".env.production",
        "case_sensitive": True,
        "extra": "ignore"
    }


# Production settings instance
prod_settings = ProductionSettings()
