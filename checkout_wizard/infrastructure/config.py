"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Simulated network latency on every step call
    simulated_latency_enabled: bool = True
    latency_min_ms: int = 400
    latency_max_ms: int = 800

    # Step validation
    simulated_failures_enabled: bool = True
    enforce_expiration_format: bool = True

    # Order completion
    delivery_estimate_days: int = 7
    order_total: Decimal = Decimal("124.99")
    currency: str = "USD"

    # Session store: idle sessions are dropped after this long
    session_ttl_seconds: int = 1800

    # HTTP step client (scripts/demo_checkout.py --remote)
    checkout_api_url: str = "http://localhost:8000"
    client_timeout_seconds: float = 10.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
