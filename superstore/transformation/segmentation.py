"""
Customer Value Segmentation

Assigns every sales row the value tier of its customer, based on the
customer's total revenue across the whole table.
"""

from typing import Optional

import polars as pl
import structlog

from superstore.config import get_settings
from superstore.models.records import CustomerSegment
from .grouping import broadcast

logger = structlog.get_logger(__name__)


class CustomerSegmenter:
    """
    Revenue-based customer segmenter.

    Tiers (defaults):
        High Value    revenue >= 5000
        Medium Value  2000 <= revenue <= 4999
        Low Value     everything else

    Revenue strictly between the medium upper bound and the high threshold
    falls to Low Value. Keep it that way until the tier bounds are revised.

    Example:
        segmenter = CustomerSegmenter()
        df = segmenter.assign(df)
    """

    def __init__(
        self,
        high_value_threshold: Optional[float] = None,
        medium_value_lower: Optional[float] = None,
        medium_value_upper: Optional[float] = None,
    ):
        pipeline_settings = get_settings().pipeline
        self.high_value_threshold = (
            pipeline_settings.high_value_threshold
            if high_value_threshold is None else high_value_threshold
        )
        self.medium_value_lower = (
            pipeline_settings.medium_value_lower
            if medium_value_lower is None else medium_value_lower
        )
        self.medium_value_upper = (
            pipeline_settings.medium_value_upper
            if medium_value_upper is None else medium_value_upper
        )

    def segment_expr(self, revenue_col: str = "total_revenue") -> pl.Expr:
        """Tier label for a revenue column"""
        revenue = pl.col(revenue_col)
        return (
            pl.when(revenue >= self.high_value_threshold)
            .then(pl.lit(CustomerSegment.HIGH_VALUE.value))
            .when(revenue.is_between(self.medium_value_lower, self.medium_value_upper, closed="both"))
            .then(pl.lit(CustomerSegment.MEDIUM_VALUE.value))
            .otherwise(pl.lit(CustomerSegment.LOW_VALUE.value))
        )

    def customer_revenue(self, df: pl.DataFrame) -> pl.DataFrame:
        """
        Per-customer revenue and tier.

        Returns:
            DataFrame with customer_id, total_revenue, order_lines and
            customer_segment; rows without a customer_id are ignored
        """
        return (
            df.filter(pl.col("customer_id").is_not_null())
            .group_by("customer_id")
            .agg([
                pl.col("sales").sum().alias("total_revenue"),
                pl.len().alias("order_lines"),
            ])
            .with_columns(self.segment_expr().alias("customer_segment"))
            .sort("customer_id")
        )

    def assign(self, df: pl.DataFrame) -> pl.DataFrame:
        """Set customer_segment on every row from its customer's revenue"""
        revenue = self.customer_revenue(df)
        df = broadcast(df, revenue.select(["customer_id", "customer_segment"]), on="customer_id")

        tier_counts = revenue["customer_segment"].value_counts() if revenue.height else None
        logger.info(
            "Customer segments assigned",
            customers=revenue.height,
            tiers={row["customer_segment"]: row["count"] for row in tier_counts.iter_rows(named=True)} if tier_counts is not None else {},
        )

        return df


def segment_customers(df: pl.DataFrame) -> pl.DataFrame:
    """Convenience function to add customer_segment with default tiers"""
    return CustomerSegmenter().assign(df)
