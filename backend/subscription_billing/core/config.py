from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_DATABASE_DSN: str = "sqlite:////tmp/database.db"

    # Payment providers
    stripe_api_key: str = ""

    # Subscription creation
    DEFAULT_DAYS_UNTIL_DUE: int = 7
    INCOMPLETE_SUBSCRIPTION_STATUSES: list[str] = ["incomplete", "incomplete_expired"]

    # Invoice display
    DEFAULT_CURRENCY: str = "usd"


settings = Settings()
