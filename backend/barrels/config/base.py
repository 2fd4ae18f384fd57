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
    APP_NAME: str = "Barrels Swing Assessment"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ALLOWED_HOSTS_STR: str = "localhost,127.0.0.1"

    # Swing analysis defaults (used when the pose pipeline omits them)
    DEFAULT_FPS: float = 60.0
    DEFAULT_PLAYER_HEIGHT_IN: float = 70.0  # 5'10"
    DEFAULT_LEVEL: str = "hs"
    MIN_KEYPOINT_VISIBILITY: float = 0.0

    # Storage settings ("memory" or "redis")
    STORAGE_BACKEND: str = "memory"
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""
    REDIS_DB: int = 0
    REDIS_KEY_PREFIX: str = "barrels"

    # Worker settings (for Celery/Redis)
    BROKER_URL: str = "redis://localhost:6379/0"
    RESULT_BACKEND: str = "redis://localhost:6379/0"
    REPORT_TIMEOUT: int = 120  # 2 minutes

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "barrels-engine.log"

    @property
    def ALLOWED_HOSTS(self) -> List[str]:
        """Parse allowed hosts from string"""
        hosts_str = os.getenv('ALLOWED_HOSTS', self.ALLOWED_HOSTS_STR)
        return [host.strip() for host in hosts_str.split(',')]

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore extra fields from .env
    }


# Create settings instance
settings = Settings()
