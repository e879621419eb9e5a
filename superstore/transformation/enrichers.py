"""
Data Enrichment Module

Customer-relative time attributes for the sales table:
- First order date per customer
- Calendar months between the first order and each order (cohort month)
"""

import polars as pl
import structlog

from .grouping import broadcast

logger = structlog.get_logger(__name__)


def month_index(column: str) -> pl.Expr:
    """Months since year 0 for a date column (year * 12 + month)"""
    return pl.col(column).dt.year().cast(pl.Int32) * 12 + pl.col(column).dt.month().cast(pl.Int32)


class TemporalEnricher:
    """
    Adds min_order_date and order_relative_month to sales rows.

    The month offset counts calendar-month boundaries crossed, so orders on
    2020-01-31 and 2020-02-01 are one month apart, and 2020-01-01 and
    2020-01-31 are zero.
    Rows without a customer_id or order_date get null values.

    Example:
        enricher = TemporalEnricher()
        df = enricher.enrich(df)
    """

    def first_orders(self, df: pl.DataFrame) -> pl.DataFrame:
        """Per-customer first order date"""
        return (
            df.filter(pl.col("customer_id").is_not_null())
            .group_by("customer_id")
            .agg(pl.col("order_date").min().alias("min_order_date"))
            .sort("customer_id")
        )

    def enrich(self, df: pl.DataFrame) -> pl.DataFrame:
        """Attach first order date and cohort month to every row"""
        first = self.first_orders(df)
        df = broadcast(df, first, on="customer_id")

        # Undated rows carry no customer-relative dates
        df = df.with_columns(
            pl.when(pl.col("order_date").is_null())
            .then(None)
            .otherwise(pl.col("min_order_date"))
            .alias("min_order_date")
        )
        df = df.with_columns(
            (month_index("order_date") - month_index("min_order_date"))
            .cast(pl.Int32)
            .alias("order_relative_month")
        )

        logger.info(
            "Temporal attributes added",
            customers=first.height,
            max_relative_month=df["order_relative_month"].max() if df.height else None,
        )

        return df


def enrich_order_dates(df: pl.DataFrame) -> pl.DataFrame:
    """Convenience function to add the customer-relative date columns"""
    return TemporalEnricher().enrich(df)
