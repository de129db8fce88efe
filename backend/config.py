from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PRICE_DB_PATH: str = "prices.json"
    DEFAULT_SYSTEM: str = "carlisle-tpo"

    # Breakdown section modifiers (both start switched off)
    DEFAULT_TAX_PERCENT: float = 8.25
    DEFAULT_PROFIT_PERCENT: float = 20.0

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
