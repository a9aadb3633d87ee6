"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./wedding_planner.db")
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")

    # Security
    ADMIN_TOKEN: str = os.getenv("ADMIN_TOKEN", "admin_token_123")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

    # Seating
    MAX_TABLE_SEATS: int = 20
    HEAD_TABLE_SEATS: int = 6

    # Budget
    DEFAULT_TOTAL_BUDGET: float = 50000.0
    MAX_EXPENSE_AMOUNT: float = 9999999.0

    # Store calls: bounded retries with exponential backoff under an overall deadline
    STORE_RETRY_ATTEMPTS: int = 3
    STORE_RETRY_BACKOFF: float = 0.5
    STORE_TIMEOUT_SECONDS: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
