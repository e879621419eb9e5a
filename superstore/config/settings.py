"""
Superstore Sales Analytics
Centralized Configuration Management

Pydantic settings with environment variable support. Every business
threshold used by the cleaning and segmentation stages lives here so an
operator can review or override it without touching code.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Cleaning, segmentation and view configuration"""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    # Outlier flagging
    outlier_sales_threshold: float = Field(default=10000.0, description="Sales above this flag the row as outlier")
    outlier_quantity_threshold: int = Field(default=100, description="Quantity above this flags the row as outlier")

    # Customer value tiers
    high_value_threshold: float = Field(default=5000.0, description="Lifetime revenue at or above this is High Value")
    medium_value_lower: float = Field(default=2000.0, description="Inclusive lower bound of Medium Value")
    medium_value_upper: float = Field(default=4999.0, description="Inclusive upper bound of Medium Value")

    # Validation
    required_fields: List[str] = Field(
        default=["order_id", "customer_name", "sales"],
        description="Fields counted for missing values",
    )
    duplicate_key: List[str] = Field(
        default=["order_id", "product_id", "sales"],
        description="Logical key used to report duplicate candidates",
    )
    remove_duplicates: bool = Field(
        default=False,
        description="Operator opt-in: drop duplicate candidates, keeping the lowest row_id",
    )

    # Output
    view_name: str = Field(default="superstore_data_cleaned", description="Name of the cleaned read-only view")
    top_n_products: int = Field(default=5, description="Products kept per category in the top products report")

    @model_validator(mode="after")
    def validate_tiers(self) -> "PipelineSettings":
        """Medium tier must sit below the high tier"""
        if self.medium_value_lower > self.medium_value_upper:
            raise ValueError("medium_value_lower must not exceed medium_value_upper")
        if self.medium_value_upper > self.high_value_threshold:
            raise ValueError("medium_value_upper must not exceed high_value_threshold")
        return self


class DataLakeSettings(BaseSettings):
    """Data Lake Storage Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    raw_path: str = Field(default="./data/raw", description="Raw data zone path")
    curated_path: str = Field(default="./data/curated", description="Curated zone path")

    # Raw file layout
    raw_delimiter: str = Field(default="\t", description="Field separator of raw sales files")
    raw_encoding: str = Field(default="utf8", description="Encoding of raw sales files")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or console")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE", description="Log file path")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format value"""
        allowed = ["json", "console"]
        if v.lower() not in allowed:
            raise ValueError(f"Log format must be one of: {allowed}")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="superstore-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    data_lake: DataLakeSettings = Field(default_factory=DataLakeSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
