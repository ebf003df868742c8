"""Application configuration using pydantic-settings."""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_env: str = "development"
    app_debug: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # True = one JSON object per line (prod log shipping)

    # Prediction window
    default_months_back: int = 6
    default_months_ahead: int = 6
    max_months_ahead: int = 36

    # Income recurrence: low variance AND present in enough months of the window
    recurring_variance_threshold: Decimal = Decimal("15")
    recurring_appearance_rate: Decimal = Decimal("0.5")

    # Month health: "tight" when closing balance < health_buffer_months x that month's obligations
    health_buffer_months: Decimal = Decimal("1")

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
