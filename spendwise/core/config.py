# spendwise/core/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Spendwise API"
    DEBUG: bool = False
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"

    # Database Configuration
    DATABASE_URL: str

    # JWT / Security Configuration
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    # Receipt storage. An empty bucket name keeps receipts on local disk.
    S3_BUCKET_NAME: str = ""
    AWS_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str = ""
    UPLOAD_DIR: str = str(BASE_DIR / "uploads")
    MAX_RECEIPT_SIZE: int = 5 * 1024 * 1024

    @property
    def is_sqlite(self) -> bool:
        """SQLite needs a different pool setup and explicit foreign key enforcement"""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def use_s3(self) -> bool:
        return bool(self.S3_BUCKET_NAME)

# Create a global settings instance
settings = Settings()
