"""Application configuration using pydantic-settings."""

import json
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

AllocationStrategy = Literal["none", "mutex", "redis", "atomic"]
OrderGrouping = Literal["per_item", "per_order"]
ResponseMode = Literal["detailed", "compat"]


def _split_list(value: str) -> list[str]:
    """Parse a comma-separated or JSON array string into a list."""
    if not value:
        return []
    if value.startswith("["):
        result: list[str] = json.loads(value)
        return result
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),  # Load root .env first, then backend/.env (overrides)
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database (AX SQL Server)
    database_url: str = "mssql+aioodbc://ax:ax@localhost:1433/AX?driver=ODBC+Driver+18+for+SQL+Server"
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Redis (only used by the "redis" allocation strategy)
    redis_url: str = "redis://localhost:6379/0"

    # AX contextual constants written into every order
    data_area_id: str = "mrp"
    currency_code: str = "USD"
    delivery_mode: str = "TRUCK"
    language_id: str = "en-us"
    sales_responsible: str = "SALES01"
    dimension_department: str = ""
    dimension_cost_center: str = "0600005"  # DIMENSION2_
    sales_type: int = 3  # SalesType::Sales
    sales_status: int = 1  # SalesStatus::Backorder
    inventtrans_type: int = 0  # InventTransType::Sales
    inventtrans_status_issue: int = 4  # StatusIssue::OnOrder

    # Number sequences
    sales_order_sequence: str = "Sale_1"
    order_code_prefix: str = "SO-"
    inventtrans_sequence: str = "Inve_13"
    inventtrans_suffix: str = "_078"

    # Write pipeline behaviour
    allocation_strategy: AllocationStrategy = "atomic"
    allocation_max_attempts: int = 5
    allocation_lock_ttl_ms: int = 5000
    order_grouping: OrderGrouping = "per_item"
    response_mode: ResponseMode = "detailed"

    # Catalog lookups
    catalog_item_limit: int = 10
    catalog_sites_str: str = Field(
        default="MATCO01,MATCO02,MATCO13,RIVIANA,GODOWNS",
        validation_alias="CATALOG_SITES",
    )

    # Application
    debug: bool = False
    log_level: str = "info"
    log_format: Literal["console", "json"] = "console"

    # CORS origins - stored as string to avoid pydantic-settings JSON parsing
    backend_cors_origins_str: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="BACKEND_CORS_ORIGINS",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def backend_cors_origins(self) -> list[str]:
        """Parse CORS origins from string (comma-separated or JSON array)."""
        return _split_list(self.backend_cors_origins_str)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def catalog_sites(self) -> list[str]:
        """Sites offered in the order entry dropdown."""
        return _split_list(self.catalog_sites_str)


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process settings (overridable in tests)."""
    return settings
