"""
Development environment configuration
"""

from barrels.config.base import Settings


class DevelopmentSettings(Settings):
    """Development-specific settings"""

    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"

    # Keep everything in-process while iterating
    STORAGE_BACKEND: str = "memory"
    REDIS_KEY_PREFIX: str = "barrels-dev"

    # Relaxed timeouts for development
    REPORT_TIMEOUT: int = 600  # 10 minutes

    model_config = {
        "env_file": ".env.development",
        "case_sensitive": True,
        "extra": "ignore"
    }


# Development settings instance
dev_settings = DevelopmentSettings()
