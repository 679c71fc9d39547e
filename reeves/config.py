from pydantic import BaseModel
import os
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    PROJECT_NAME: str = "Reeves API"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Auth
    SECRET_KEY: str = os.getenv("SECRET_KEY", "secret")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 12))
    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")

    # MongoDB
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "reeves")

    # Redis (menu cache)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))
    REDIS_PASSWORD: str | None = os.getenv("REDIS_PASSWORD")
    MENU_CACHE_TTL: int = int(os.getenv("MENU_CACHE_TTL", 3600))

    # Media uploads: "cloudinary" or "s3"
    UPLOAD_BACKEND: str = os.getenv("UPLOAD_BACKEND", "cloudinary")
    CLOUDINARY_API: str = os.getenv("CLOUDINARY_API", "https://api.cloudinary.com/v1_1")
    CLOUDINARY_CLOUD_NAME: str | None = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_UPLOAD_PRESET: str | None = os.getenv("CLOUDINARY_UPLOAD_PRESET")
    UPLOAD_TIMEOUT: float = float(os.getenv("UPLOAD_TIMEOUT", 30))
    AWS_ACCESS_KEY_ID: str | None = os.getenv("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY: str | None = os.getenv("AWS_SECRET_ACCESS_KEY")
    AWS_REGION: str = os.getenv("AWS_REGION", "us-east-2")
    S3_BUCKET: str | None = os.getenv("S3_BUCKET")
    SES_SENDER_EMAIL: str | None = os.getenv("SES_SENDER_EMAIL")

    # Gallery
    GALLERY_PAGE_SIZE: int = int(os.getenv("GALLERY_PAGE_SIZE", 12))
    GALLERY_MAX_PAGE_SIZE: int = 60
    SLIDESHOW_INTERVAL: float = float(os.getenv("SLIDESHOW_INTERVAL", 3.0))

    # Reservations
    RESERVATION_WINDOW_DAYS: int = int(os.getenv("RESERVATION_WINDOW_DAYS", 60))

    # Seeding
    SEED_ADMIN_EMAIL: str | None = os.getenv("SEED_ADMIN_EMAIL")
    SEED_ADMIN_PASSWORD: str | None = os.getenv("SEED_ADMIN_PASSWORD")


settings = Settings()
