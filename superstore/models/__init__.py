"""
Sales Data Model
"""
from .records import (
    CLEANED_SCHEMA,
    DERIVED_SCHEMA,
    SALES_SCHEMA,
    CustomerSegment,
    SalesRecord,
    empty_sales_frame,
)
from .view import SalesView

__all__ = [
    "CLEANED_SCHEMA",
    "DERIVED_SCHEMA",
    "SALES_SCHEMA",
    "CustomerSegment",
    "SalesRecord",
    "SalesView",
    "empty_sales_frame",
]
