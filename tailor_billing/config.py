"""Application configuration.

Environment variables override all defaults. A local .env is loaded first.
"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./tailor_billing.db")

    # Backend the screens talk to
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
    API_TIMEOUT_SECONDS: float = float(os.getenv("API_TIMEOUT_SECONDS", "10"))

    # Payments
    DEFAULT_UPI_ID: str = os.getenv("DEFAULT_UPI_ID", "raghukatti9912-1@okhdfcbank")
    PAYEE_NAME: str = os.getenv("PAYEE_NAME", "MyShop")
    CURRENCY: str = os.getenv("CURRENCY", "INR")

    # Printed bill header
    SHOP_NAME: str = os.getenv("SHOP_NAME", "Raghu Tailors")
    SHOP_TAGLINE: str = os.getenv("SHOP_TAGLINE", "EXCLUSIVE LADIES & CUSTOM TAILOR")
    SHOP_ADDRESS: str = os.getenv("SHOP_ADDRESS", "Main Market, Sector 12")
    PDF_OUTPUT_DIR: str = os.getenv("PDF_OUTPUT_DIR", "generated")

    CORS_ORIGINS: List[str] = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if o.strip()
    ]

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
