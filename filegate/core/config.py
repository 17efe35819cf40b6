from pydantic import field_validator
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PORT: int = 8080
    APP_ENV: str = "local"
    APP_VERSION: str = "0.0.1-local"

    AWS_REGION: str
    S3_BUCKET: str
    METADATA_TABLE: str

    PRESIGN_EXPIRES_SECONDS: int

    MINIO_ENDPOINT: str = "s3.amazonaws.com"
    MINIO_ACCESS_KEY: str
    MINIO_SECRET_KEY: str
    MINIO_SECURE: bool = True

    MONGO_URI: str
    MONGO_DB_NAME: str

    LOG_LEVEL: str = "INFO"

    @field_validator("AWS_REGION", "S3_BUCKET", "METADATA_TABLE")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("PRESIGN_EXPIRES_SECONDS")
    @classmethod
    def positive_expiry(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number of seconds")
        return value

    class Config:
        env_file = ".env"


settings = Settings()
