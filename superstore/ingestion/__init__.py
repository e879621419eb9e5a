"""
Data Ingestion Module
"""
from .loader import (
    FileFormat,
    LoadResult,
    SalesFileConfig,
    SalesFileLoader,
    coerce_sales_frame,
    load_sales_file,
)

__all__ = [
    "FileFormat",
    "LoadResult",
    "SalesFileConfig",
    "SalesFileLoader",
    "coerce_sales_frame",
    "load_sales_file",
]
