"""
Application Configuration
Centralized configuration management with proper typing and validation.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional
import os
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with proper validation and defaults."""

    # Application settings
    app_name: str = os.getenv("APP_NAME", "getclaps")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"

    # CORS settings
    cors_origins: List[str] = [
        "http://localhost:8080",
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Cookie security settings.
    # NOTE: the default salts and the low iteration count keep derived keys
    # stable for cookies issued by earlier deployments. Set COOKIE_SALT to
    # isolate deployments that share a SECRET_KEY.
    secret_key: str = os.getenv("SECRET_KEY", "")
    cookie_salt: Optional[str] = os.getenv("COOKIE_SALT") or None
    cookie_iterations: int = int(os.getenv("COOKIE_ITERATIONS", "999"))
    cookie_hash: str = os.getenv("COOKIE_HASH", "SHA-256")

    # Namespace for hashing visitor IPs into stable ids
    ip_salt: str = os.getenv("IP_SALT", "c4e75796-9fe6-ce66-612e-534b709074ef")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    def cookie_salt_bytes(self) -> Optional[bytes]:
        return self.cookie_salt.encode("utf-8") if self.cookie_salt else None


# Global settings instance
settings = Settings()
