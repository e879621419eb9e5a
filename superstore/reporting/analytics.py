"""
Sales Analytics

Read-only aggregate views over the cleaned sales table for dashboards:
monthly/yearly trends with year-over-year deltas, category profitability,
regional totals, top products per category and segment totals.
"""

from typing import Dict, Optional, Union

import polars as pl
import structlog

from superstore.config import get_settings
from superstore.models.view import SalesView

logger = structlog.get_logger(__name__)


def _yoy_percent(current: str, previous: str) -> pl.Expr:
    """Percent change vs. last year; null without a usable prior value"""
    return (
        pl.when(pl.col(previous).is_null() | (pl.col(previous) == 0))
        .then(None)
        .otherwise((pl.col(current) - pl.col(previous)) * 100.0 / pl.col(previous))
    )


class SalesAnalytics:
    """
    Aggregation queries over a cleaned SalesView.

    Every method is a pure projection; the view is never modified.

    Example:
        analytics = SalesAnalytics(result.view)
        analytics.top_products(n=5)
    """

    def __init__(self, source: Union[SalesView, pl.DataFrame]):
        self._lazy = source.lazy()

    def monthly_trend(self) -> pl.DataFrame:
        """Sales and profit per calendar month with the same month last year"""
        monthly = (
            self._lazy
            .filter(pl.col("order_date").is_not_null())
            .group_by([
                pl.col("order_date").dt.year().alias("order_year"),
                pl.col("order_date").dt.month().alias("order_month"),
            ])
            .agg([
                pl.col("sales").sum().alias("monthly_sales"),
                pl.col("profit").sum().alias("monthly_profit"),
            ])
        )

        last_year = monthly.select([
            (pl.col("order_year") + 1).alias("order_year"),
            pl.col("order_month"),
            pl.col("monthly_sales").alias("sales_last_year"),
            pl.col("monthly_profit").alias("profit_last_year"),
        ])

        return (
            monthly.join(last_year, on=["order_year", "order_month"], how="left")
            .with_columns([
                _yoy_percent("monthly_sales", "sales_last_year").alias("sales_yoy_percent"),
                _yoy_percent("monthly_profit", "profit_last_year").alias("profit_yoy_percent"),
            ])
            .select([
                "order_month",
                "order_year",
                "monthly_sales",
                "monthly_profit",
                "sales_last_year",
                "sales_yoy_percent",
                "profit_last_year",
                "profit_yoy_percent",
            ])
            .sort(["order_year", "order_month"])
            .collect()
        )

    def yearly_trend(self) -> pl.DataFrame:
        """Sales and profit per year with the previous year's totals"""
        yearly = (
            self._lazy
            .filter(pl.col("order_date").is_not_null())
            .group_by(pl.col("order_date").dt.year().alias("order_year"))
            .agg([
                pl.col("sales").sum().alias("total_sales"),
                pl.col("profit").sum().alias("total_profit"),
            ])
        )

        last_year = yearly.select([
            (pl.col("order_year") + 1).alias("order_year"),
            pl.col("total_sales").alias("last_year_sales"),
            pl.col("total_profit").alias("last_year_profit"),
        ])

        return (
            yearly.join(last_year, on="order_year", how="left")
            .with_columns([
                _yoy_percent("total_sales", "last_year_sales").alias("sales_yoy_percent"),
                _yoy_percent("total_profit", "last_year_profit").alias("profit_yoy_percent"),
            ])
            .sort("order_year")
            .collect()
        )

    def unique_counts(self) -> Dict[str, int]:
        """Distinct orders, customers and products"""
        counts = self._lazy.select([
            pl.col("order_id").drop_nulls().n_unique().alias("unique_orders"),
            pl.col("customer_id").drop_nulls().n_unique().alias("unique_customers"),
            pl.col("product_id").drop_nulls().n_unique().alias("unique_products"),
        ]).collect()
        return {col: int(counts[col][0]) for col in counts.columns}

    def category_profitability(self) -> pl.DataFrame:
        """Totals and profit margin per category and sub-category"""
        return (
            self._lazy
            .group_by(["category", "sub_category"])
            .agg([
                pl.col("sales").sum().alias("total_sales"),
                pl.col("profit").sum().alias("total_profit"),
            ])
            .with_columns(
                pl.when(pl.col("total_sales") == 0)
                .then(None)
                .otherwise(pl.col("total_profit") / pl.col("total_sales"))
                .round(2)
                .alias("profit_margin")
            )
            .sort("profit_margin", descending=True, nulls_last=True)
            .collect()
        )

    def region_sales(self) -> pl.DataFrame:
        """Sales and distinct orders per region"""
        return (
            self._lazy
            .group_by("region")
            .agg([
                pl.col("sales").sum().alias("total_sales"),
                pl.col("order_id").drop_nulls().n_unique().alias("total_orders"),
            ])
            .sort("total_sales", descending=True)
            .collect()
        )

    def top_products(self, n: Optional[int] = None) -> pl.DataFrame:
        """
        Best selling products within each category.

        Ties share a rank and may push a category past ``n`` rows, the same
        as a SQL RANK() window.
        """
        n = n or get_settings().pipeline.top_n_products
        return (
            self._lazy
            .group_by(["product_name", "category"])
            .agg(pl.col("sales").sum().alias("total_sales"))
            .with_columns(
                pl.col("total_sales")
                .rank(method="min", descending=True)
                .over("category")
                .alias("rank_in_category")
            )
            .filter(pl.col("rank_in_category") <= n)
            .sort(["category", "rank_in_category", "product_name"])
            .collect()
        )

    def customer_segment_sales(self) -> pl.DataFrame:
        """Sales per derived customer value tier"""
        return self._totals_by("customer_segment")

    def segment_sales(self) -> pl.DataFrame:
        """Sales per source market segment"""
        return self._totals_by("segment")

    def _totals_by(self, column: str) -> pl.DataFrame:
        return (
            self._lazy
            .group_by(column)
            .agg(pl.col("sales").sum().alias("total_sales"))
            .sort([column, "total_sales"], descending=[False, True])
            .collect()
        )

    def build_all(self) -> Dict[str, pl.DataFrame]:
        """Every report table, keyed by report name"""
        reports = {
            "monthly_trend": self.monthly_trend(),
            "yearly_trend": self.yearly_trend(),
            "category_profitability": self.category_profitability(),
            "region_sales": self.region_sales(),
            "top_products": self.top_products(),
            "customer_segment_sales": self.customer_segment_sales(),
            "segment_sales": self.segment_sales(),
        }
        logger.info("Reports built", reports=list(reports), sizes={k: v.height for k, v in reports.items()})
        return reports

