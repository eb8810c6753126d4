import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.APP_NAME = os.environ.get("APP_NAME", "Contract Analytics")
        self.ENV = os.environ.get("ENV", "development")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

        # Database Configuration
        # DATABASE_URL wins over the individual DB_* variables when set
        self.DATABASE_URL = os.environ.get("DATABASE_URL", "")

        # Bearer token verification (tokens are issued by the web app)
        self.JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "change-me-in-production-to-random-secret")
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

        # CORS Configuration
        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.environ.get(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000"
            ).split(",")
            if origin.strip()
        ]

        # Report Rendering
        self.REPORT_TITLE = os.environ.get("REPORT_TITLE", "Contract Analysis Report")
        self.REPORT_FOOTER = os.environ.get("REPORT_FOOTER", "Generated by Contract Analize")

        # Headless browser (HTML -> PDF)
        self.BROWSER_LAUNCH_ARGS = [
            arg.strip()
            for arg in os.environ.get(
                "BROWSER_LAUNCH_ARGS",
                "--no-sandbox,--disable-setuid-sandbox"
            ).split(",")
            if arg.strip()
        ]
        self.BROWSER_TIMEOUT_MS = int(os.environ.get("BROWSER_TIMEOUT_MS", "30000"))

    def __repr__(self):
        return (
            f"Settings(APP_NAME={self.APP_NAME}, ENV={self.ENV}, "
            f"LOG_LEVEL={self.LOG_LEVEL}, JWT_ALGORITHM={self.JWT_ALGORITHM}, "
            f"REPORT_TITLE={self.REPORT_TITLE}, BROWSER_TIMEOUT_MS={self.BROWSER_TIMEOUT_MS})"
        )


settings = Settings()
