"""
Application settings - read once from the environment (.env supported)
"""
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

_BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=_BASE_DIR / ".env")


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    # Server
    DEBUG: bool = _env_bool("DEBUG")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    API_PREFIX: str = os.getenv("API_PREFIX", "/api")

    # MongoDB
    MONGODB_URI: Optional[str] = os.getenv("MONGODB_URI")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "streetbites")
    MONGODB_TLS: bool = _env_bool("MONGODB_TLS", "True")
    MONGODB_TIMEOUT_MS: int = int(os.getenv("MONGODB_TIMEOUT_MS", "30000"))

    # Firebase (identity provider)
    FIREBASE_PROJECT_ID: Optional[str] = os.getenv("FIREBASE_PROJECT_ID")
    FIREBASE_CREDENTIALS: Optional[str] = os.getenv("FIREBASE_CREDENTIALS")
    FIREBASE_SERVICE_ACCOUNT_FILE: str = os.getenv("FIREBASE_SERVICE_ACCOUNT_FILE", "./serviceAccountKey.json")
    TOKEN_CLOCK_SKEW_SECONDS: int = int(os.getenv("TOKEN_CLOCK_SKEW_SECONDS", "60"))

    # Cloudinary (image storage)
    CLOUDINARY_CLOUD_NAME: Optional[str] = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY: Optional[str] = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET: Optional[str] = os.getenv("CLOUDINARY_API_SECRET")
    IMAGE_FOLDER: str = os.getenv("IMAGE_FOLDER", "recipes")
    MAX_IMAGE_BYTES: int = int(os.getenv("MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))

    # CORS
    ALLOWED_ORIGINS: List[str] = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

    # "Recipe not found" used to be answered with 400; set NOT_FOUND_STATUS=400 for old clients
    NOT_FOUND_STATUS: int = int(os.getenv("NOT_FOUND_STATUS", "404"))


settings = Settings()
