from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # JWT Configuration
    SECRET_KEY: str = "your-super-secret-jwt-key-change-in-production"  # IMPORTANT: Change in production!
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # Built-in superuser (never stored in the database, no lockout)
    SUPERUSER_USERNAME: str = "admin"
    SUPERUSER_PASSWORD: str = "admin123"
    SUPERUSER_ID: str = "admin-user"
    SUPERUSER_ROLE: str = "admin"

    # Database
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "mmc"
    DB_PASSWORD: str = "mmc_password"
    DB_NAME: str = "mmc_admin"
    DB_CONNECT_TIMEOUT_SECONDS: int = 10

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # API
    API_PREFIX: str = "/api"
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Security
    MAX_LOGIN_ATTEMPTS: int = 5
    LOCKOUT_DURATION_MINUTES: int = 30

    # File Storage
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_BLOG_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB in bytes
    MAX_NEWSLETTER_PDF_SIZE: int = 50 * 1024 * 1024  # 50MB in bytes

    # Email
    EMAIL_DELIVERY_MODE: str = "simulate"  # "simulate" or "smtp"
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: Optional[str] = None
    EMAIL_FROM_NAME: str = "MMC Newsletter"

    class Config:
        env_file = ".env"
        extra = "ignore"  # Allow extra fields in .env file


settings = Settings()
