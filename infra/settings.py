import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass(frozen=True)
class Settings:
    # Signing identity
    APNS_TEAM_ID: str = os.getenv("APNS_TEAM_ID", "")
    APNS_KEY_ID: str = os.getenv("APNS_KEY_ID", "")
    APNS_AUTH_KEY_PATH: str | None = os.getenv("APNS_AUTH_KEY_PATH")
    APNS_AUTH_KEY_ENV: str | None = os.getenv("APNS_AUTH_KEY_ENV")

    # Delivery
    APNS_TOPIC: str | None = os.getenv("APNS_TOPIC")
    APNS_ENVIRONMENT: str = os.getenv("APNS_ENVIRONMENT", "sandbox")
    APNS_TIMEOUT: float = float(os.getenv("APNS_TIMEOUT", "10"))

    # Provider token cache
    APNS_TOKEN_CACHE: bool = os.getenv("APNS_TOKEN_CACHE", "false").lower() == "true"
    APNS_TOKEN_REFRESH_SECONDS: int = int(os.getenv("APNS_TOKEN_REFRESH_SECONDS", "3000"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
