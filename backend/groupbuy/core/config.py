"""
Centralized application configuration
"""
import json
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration"""

    # API Settings
    API_TITLE: str = "Group Buying API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Backend for the group-buying storefront"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False

    # Database
    DATABASE_URL: str = "postgresql://localhost:5432/groupbuy"
    CONNECTION_TIMEOUT: int = 10

    # Auth (tokens are issued by the identity provider, we only verify them)
    AUTH_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"

    # Storefront
    DEFAULT_SITE_NAME: str = "Group Buying"

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
