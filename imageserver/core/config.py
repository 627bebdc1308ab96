from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Load env from .env file
    model_config = {"env_file": ".env"}

    # Storage
    UPLOADS_DIR: Path = Path("uploads")
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MB

    # Largest raster a request may ask for (width * height)
    MAX_OUTPUT_PIXELS: int = 40_000_000

    # Encoding
    JPEG_QUALITY: int = 80

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"


# Instantiate settings
settings = Settings()
