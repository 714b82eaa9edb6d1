# shared/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _default_database_url() -> str:
    user = os.getenv("MYSQLUSER", "root")
    password = os.getenv("MYSQLPASSWORD", "")
    host = os.getenv("MYSQLHOST", "127.0.0.1")
    port = os.getenv("MYSQLPORT", "3306")
    database = os.getenv("MYSQLDATABASE", "schools")
    return f"mysql+aiomysql://{user}:{password}@{host}:{port}/{database}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_pool_size: int = 2
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600

    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    upload_folder: str = "school-images"
    upload_max_bytes: int = 5 * 1024 * 1024

    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL") or _default_database_url(),
        db_pool_size=int(os.getenv("DB_POOL_SIZE", 2)),
        db_pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", 30)),
        db_pool_recycle=int(os.getenv("DB_POOL_RECYCLE", 3600)),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY"),
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET"),
        upload_folder=os.getenv("UPLOAD_FOLDER", "school-images"),
        upload_max_bytes=int(os.getenv("UPLOAD_MAX_BYTES", 5 * 1024 * 1024)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


settings = load_settings()
