"""
Centralized configuration management with Pydantic Settings.
All environment variables are validated and typed.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FulfillmentPolicy(str, Enum):
    """What to do with fulfilled quantities outside 0..total."""

    CLAMP = "clamp"
    REJECT = "reject"


@dataclass(frozen=True)
class BusinessRules:
    """
    Business constants shared by commission, payment and reporting code.

    Kept in one place so no call site carries its own copy of the numbers.
    """

    commission_margin: Decimal = Decimal("0.85")
    flat_shipping: Decimal = Decimal("9.99")
    payment_amount_tolerance: Decimal = Decimal("1.00")
    default_affiliate_share: Decimal = Decimal("10")
    fulfillment_policy: FulfillmentPolicy = FulfillmentPolicy.CLAMP


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "OrderDesk API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", pattern="^(development|staging|production)$")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Security
    secret_key: str = Field(min_length=32)
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 12
    staff_email: str = "staff@example.com"
    staff_password_hash: Optional[str] = None

    # CORS - stored as comma-separated string to avoid JSON parsing issues
    allowed_origins_str: str = Field(default="http://localhost:5173", alias="ALLOWED_ORIGINS")

    @property
    def allowed_origins(self) -> List[str]:
        """Parse allowed origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    # Airtable (system of record)
    airtable_api_key: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_api_url: str = "https://api.airtable.com/v0"
    airtable_orders_table: str = "carts"
    airtable_products_table: str = "products"
    airtable_affiliates_table: str = "affiliates"

    # Stripe
    stripe_secret_key: Optional[str] = None

    # EasyPost
    easypost_api_key: Optional[str] = None

    # Notifications
    resend_api_key: Optional[str] = None
    email_from: str = "Orders <orders@example.com>"

    # Sender address for shipping labels
    business_name: str = "Fulfillment Center"
    business_address: str = "456 Warehouse Blvd"
    business_city: str = "Franklin"
    business_state: str = "TN"
    business_zip: str = "37064"
    business_phone: str = "5551234567"

    # Payment status cache
    payment_cache_max_entries: int = 5000
    payment_cache_ttl_seconds: int = 900  # 15 minutes
    payment_check_concurrency: int = 4

    # Observability
    sentry_dsn: Optional[str] = None
    log_level: str = "INFO"

    @property
    def business_rules(self) -> BusinessRules:
        return BUSINESS_RULES


BUSINESS_RULES = BusinessRules()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
