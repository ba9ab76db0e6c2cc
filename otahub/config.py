from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="OTA Hub", alias="APP_NAME")
    database_url: str = Field(default="sqlite:///./otahub.db", alias="DATABASE_URL")
    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    admin_access_level: int = Field(default=2, alias="ADMIN_ACCESS_LEVEL")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    blob_storage_path: str = Field(default="blobs", alias="BLOB_STORAGE_PATH")
    public_blob_base_url: str = Field(default="http://localhost:8000/blobs", alias="PUBLIC_BLOB_BASE_URL")
    serve_blobs: bool = Field(default=True, alias="SERVE_BLOBS")
    allow_insecure_http: bool = Field(default=False, alias="ALLOW_INSECURE_HTTP")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()
