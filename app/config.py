"""
Application Configuration
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env file"""

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "STAIRS Talent Hub"
    APP_URL: str = "http://localhost:8000"
    FRONTEND_URL: str = "http://localhost:5173"
    SECRET_KEY: str = "temp-secret-key-change-later"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./stairs.db"

    # JWT
    JWT_SECRET_KEY: str = "temp-jwt-secret-change-later"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24

    # OTP / password reset
    OTP_EXPIRY_MINUTES: int = 10
    RESET_TOKEN_EXPIRY_MINUTES: int = 15

    # Email
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: str = "noreply@stairs.example.com"

    # Payments (Razorpay)
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_COMMISSION_RATE: float = 0.025
    CURRENCY: str = "INR"

    # File Upload
    UPLOAD_DIR: str = "./uploads"
    MAX_RESULT_FILE_SIZE: int = 10485760  # 10MB
    MAX_ROSTER_ROWS: int = 100
    MAX_COACH_ROSTER_ROWS: int = 50

    # Storage (Supabase, optional; local UPLOAD_DIR otherwise)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "stairs"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()
