"""
Data Quality Module
"""
from .validators import (
    SalesValidator,
    ValidationCheck,
    ValidationReport,
    ValidationSeverity,
    ValidationStatus,
    create_sales_validator,
)

__all__ = [
    "SalesValidator",
    "ValidationCheck",
    "ValidationReport",
    "ValidationSeverity",
    "ValidationStatus",
    "create_sales_validator",
]
