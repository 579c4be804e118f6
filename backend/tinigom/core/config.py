import os
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FALLBACK_QUOTE = "Wealth begins where impulse ends."


class Settings(BaseSettings):
    PROJECT_NAME: str = "Tinigom Savings Tracker"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Hosted Postgres in production, SQLite locally
    FINANCE_DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./tinigom.db")

    # Text generation - OpenAI is tried first when configured, then Gemini
    GEMINI_API_KEY: str = Field("", validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_GEMINI_API_KEY"))
    GEMINI_MODEL: str = "gemini-1.5-flash"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"

    # Motivational quotes
    QUOTE_STRATEGY: str = "dual"  # "single" (shared, expiring) or "dual" (one per person)
    QUOTE_TTL_HOURS: int = 12
    QUOTE_TURN_HOURS: int = 6
    QUOTE_HISTORY_LIMIT: int = 10
    FALLBACK_QUOTE: str = FALLBACK_QUOTE

    # Savings
    DEFAULT_SAVINGS_GOAL: float = 150000
    TRANSACTIONS_PER_PAGE: int = 5

    # Invoices
    INVOICE_CURRENCY: str = "AED"
    INVOICE_START_NUMBER: int = 19

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    @property
    def has_generation_credential(self) -> bool:
        return bool(self.GEMINI_API_KEY or self.OPENAI_API_KEY)


settings = Settings()
