# wheelstore/settings.py
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./wheelstore.db"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "us-east-1"
    # Any S3-compatible endpoint (e.g. a hosted storage gateway); None means AWS
    AWS_S3_ENDPOINT_URL: Optional[str] = None
    AWS_S3_PRODUCT_IMAGES_BUCKET: str = "product-images"
    IMAGE_MAX_WIDTH: int = 1200
    IMAGE_QUALITY: float = 0.8
    MAX_IMAGES_PER_PRODUCT: int = 6
    STAGING_PREFIX: str = "staging"
    API_BASE_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"
    SHOP_NAME: str = "Wheelstore"
    MAIL_FROM: str = "Wheelstore <noreply@wheelstore.local>"
    ADMIN_EMAIL: str = "admin@wheelstore.local"

    class Config:
        extra = "allow"
        env_file = ".env"


settings = Settings()
