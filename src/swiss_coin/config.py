"""Configuration management for Swiss Coin."""

from decimal import Decimal
from pathlib import Path
from uuid import UUID

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .money import AMOUNT_EPSILON, MAX_AMOUNT
from .reconciler import ResidualPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SWISS_COIN_",
        case_sensitive=False,
        extra="ignore",
    )

    # Currency used for new transactions
    default_currency: str = "USD"

    # Split settings
    residual_policy: ResidualPolicy = ResidualPolicy.FIRST
    percentage_tolerance: Decimal = Decimal("0.1")  # sum of percentages vs 100
    amount_tolerance: Decimal = AMOUNT_EPSILON  # sum of amounts vs total
    max_amount: Decimal = MAX_AMOUNT
    max_shares: int = 99  # input convenience cap for share prompts

    # Identity override; normally generated once and kept in the database
    current_user_id: UUID | None = None

    # Database path
    database_path: Path = Path.home() / ".swiss_coin" / "swiss_coin.db"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the SWISS_COIN_* environment "
            f"variables or your .env file.\n"
            f"Error: {e}"
        ) from e
