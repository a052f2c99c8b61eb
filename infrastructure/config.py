from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # make it absolute so reload/CWD doesn't break it
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="MediaStore", validation_alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        validation_alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_dir: Path = Field(
        default=Path(__file__).resolve().parents[1] / "logs",
        validation_alias="LOG_DIR",
    )

    # API
    api_host: str = Field(default="127.0.0.1", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")

    # MongoDB
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias="MONGO_URI",
    )
    mongo_db: str = Field(default="media_store", validation_alias="MONGO_DB")
    mongo_multimedia_collection: str = Field(
        default="multimedia",
        validation_alias="MONGO_MULTIMEDIA_COLLECTION",
    )
    mongo_profiles_collection: str = Field(
        default="musician_profiles",
        validation_alias="MONGO_PROFILES_COLLECTION",
    )
    mongo_ratings_collection: str = Field(
        default="ratings",
        validation_alias="MONGO_RATINGS_COLLECTION",
    )

    # Blob Storage
    blob_backend: Literal["gridfs", "fsspec"] = Field(
        default="gridfs",
        validation_alias="BLOB_BACKEND",
    )
    gridfs_bucket: str = Field(default="files", validation_alias="GRIDFS_BUCKET")
    blob_chunk_size_bytes: int = Field(
        default=1024 * 1024,
        gt=0,
        validation_alias="BLOB_CHUNK_SIZE_BYTES",
    )
    blob_base_url: str = Field(
        default="file://" + str(Path(__file__).resolve().parents[1] / "blobs"),
        validation_alias="BLOB_BASE_URL",
        description="fsspec URL of the blob directory. Only used by the fsspec backend.",
    )
    blob_storage_options: dict = {}

    # Uploads
    max_file_size: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        validation_alias="MAX_FILE_SIZE",
        description="Largest accepted upload in bytes.",
    )


# Global settings instance
settings = Settings()
