"""
Sales Record Model

Column-level schema of the Superstore fact table and a typed row model.

The table itself is handled as a polars DataFrame; ``SALES_SCHEMA`` is the
contract every stage relies on and ``CLEANED_SCHEMA`` is what reporting
consumers receive once the derived columns have been added.
"""

from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

import polars as pl
from pydantic import BaseModel, ConfigDict


class CustomerSegment(str, Enum):
    """Customer value tier derived from lifetime revenue"""
    HIGH_VALUE = "High Value"
    MEDIUM_VALUE = "Medium Value"
    LOW_VALUE = "Low Value"


# Columns as delivered by ingestion, in source order
SALES_SCHEMA: Dict[str, pl.DataType] = {
    "row_id": pl.Int64,
    "order_id": pl.Utf8,
    "order_date": pl.Date,
    "ship_date": pl.Date,
    "ship_mode": pl.Utf8,
    "customer_id": pl.Utf8,
    "customer_name": pl.Utf8,
    "segment": pl.Utf8,
    "country": pl.Utf8,
    "city": pl.Utf8,
    "state": pl.Utf8,
    "postal_code": pl.Utf8,
    "region": pl.Utf8,
    "product_id": pl.Utf8,
    "category": pl.Utf8,
    "sub_category": pl.Utf8,
    "product_name": pl.Utf8,
    "sales": pl.Float64,
    "quantity": pl.Int64,
    "discount": pl.Float64,
    "profit": pl.Float64,
}

# Columns added by the pipeline, recomputed on every run
DERIVED_SCHEMA: Dict[str, pl.DataType] = {
    "outlier_flag": pl.Boolean,
    "customer_segment": pl.Utf8,
    "min_order_date": pl.Date,
    "order_relative_month": pl.Int32,
}

CLEANED_SCHEMA: Dict[str, pl.DataType] = {**SALES_SCHEMA, **DERIVED_SCHEMA}

CURRENCY_COLUMNS = ["sales", "profit"]


class SalesRecord(BaseModel):
    """One transaction line item, optionally carrying its derived fields"""

    model_config = ConfigDict(frozen=True)

    row_id: Optional[int] = None
    order_id: Optional[str] = None
    order_date: Optional[date] = None
    ship_date: Optional[date] = None
    ship_mode: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    segment: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    region: Optional[str] = None
    product_id: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    product_name: Optional[str] = None
    sales: Optional[float] = None
    quantity: Optional[int] = None
    discount: Optional[float] = None
    profit: Optional[float] = None

    # Derived
    outlier_flag: Optional[bool] = None
    customer_segment: Optional[CustomerSegment] = None
    min_order_date: Optional[date] = None
    order_relative_month: Optional[int] = None

    def to_row(self) -> Dict[str, Any]:
        """Plain dict of the base columns, ready for a DataFrame constructor"""
        return self.model_dump(include=set(SALES_SCHEMA))


def empty_sales_frame(schema: Optional[Dict[str, pl.DataType]] = None) -> pl.DataFrame:
    """Zero-row frame with the given (default: raw) schema"""
    return pl.DataFrame(schema=schema or SALES_SCHEMA)
