"""
Centralized configuration management.

All engine configuration is loaded and validated here.
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_SERIAL_DATE_HINTS = "date,time,day,month,period,created,updated,timestamp"


class Settings(BaseModel):
    """Engine settings with validation."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="'text' or 'json'")

    # Caller-side cap on how many rows a session hands to the analyzer
    max_analysis_rows: int = Field(default=500, ge=10, le=100000, description="Rows analyzed per session")

    # Column classification
    serial_date_name_hints: str = Field(
        default=DEFAULT_SERIAL_DATE_HINTS,
        description="Comma-separated column name fragments that allow spreadsheet serial dates"
    )

    # Report assembly
    report_data_slice_rows: int = Field(default=50, ge=0, le=5000, description="Rows kept per report chart")
    report_chart_insights: int = Field(default=5, ge=0, le=50, description="Insights attached per report chart")
    report_chart_correlations: int = Field(default=4, ge=0, le=50, description="Correlations attached per report chart")
    report_max_insights: int = Field(default=10, ge=1, le=100, description="Insights listed in the report summary")
    report_brand: str = Field(default="Insight Engine", description="Name shown on rendered reports")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got '{v}'")
        return v.lower()

    @property
    def serial_date_hints_list(self) -> List[str]:
        """Get serial date name hints as a lower-cased list."""
        return [hint.strip().lower() for hint in self.serial_date_name_hints.split(",") if hint.strip()]

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
            max_analysis_rows=int(os.getenv("MAX_ANALYSIS_ROWS", "500")),
            serial_date_name_hints=os.getenv("SERIAL_DATE_NAME_HINTS", DEFAULT_SERIAL_DATE_HINTS),
            report_data_slice_rows=int(os.getenv("REPORT_DATA_SLICE_ROWS", "50")),
            report_chart_insights=int(os.getenv("REPORT_CHART_INSIGHTS", "5")),
            report_chart_correlations=int(os.getenv("REPORT_CHART_CORRELATIONS", "4")),
            report_max_insights=int(os.getenv("REPORT_MAX_INSIGHTS", "10")),
            report_brand=os.getenv("REPORT_BRAND", "Insight Engine"),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get engine settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
