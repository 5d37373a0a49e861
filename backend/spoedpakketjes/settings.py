from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Spoedpakketjes"
    SECRET_KEY: str = "dev-secret"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12
    LOG_LEVEL: str = "INFO"

    # Unset -> in-memory storage
    DATABASE_URL: Optional[str] = None
    SEED_DEMO_DATA: bool = True

    # Demo dispatch
    AUTO_ASSIGN_DRIVERS: bool = True
    SIMULATE_PROGRESS: bool = True
    PICKUP_DELAY_SECONDS: float = 5.0
    TRANSIT_DELAY_SECONDS: float = 5.0

    PRICE_JITTER: float = 2.0
    ENFORCE_FORWARD_TRANSITIONS: bool = True

    # Public map keys handed to the frontend
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    LOCATIONIQ_API_KEY: Optional[str] = None

settings = Settings()
