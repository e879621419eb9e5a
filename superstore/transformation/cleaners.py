"""
Data Cleaning Module

Deterministic repair rules for the sales fact table.
Handles:
- Category whitespace trimming
- Sub-category case normalization
- Inverted ship/order date repair
- Quantity sign correction
- Threshold-based outlier flagging

Every rule is a per-row polars expression, so rules are independent of row
order and re-applying them changes nothing. Negative sales are left alone:
they may be legitimate refunds and are surfaced by the validator instead.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import polars as pl
import structlog

from superstore.config import get_settings

logger = structlog.get_logger(__name__)

_POSITION = "__position"


@dataclass
class CleaningStats:
    """Statistics from cleaning operations"""
    total_rows: int
    categories_trimmed: int = 0
    sub_categories_normalized: int = 0
    ship_dates_repaired: int = 0
    quantities_corrected: int = 0
    outliers_flagged: int = 0
    duplicates_removed: int = 0

    @property
    def rows_repaired(self) -> int:
        return (
            self.categories_trimmed
            + self.sub_categories_normalized
            + self.ship_dates_repaired
            + self.quantities_corrected
        )


def trim_category() -> pl.Expr:
    return pl.col("category").str.strip_chars()


def uppercase_sub_category() -> pl.Expr:
    return pl.col("sub_category").str.to_uppercase()


def repair_ship_date() -> pl.Expr:
    """Ship date never precedes the order date; the order date wins"""
    return (
        pl.when(pl.col("ship_date") < pl.col("order_date"))
        .then(pl.col("order_date"))
        .otherwise(pl.col("ship_date"))
    )


def correct_quantity_sign() -> pl.Expr:
    return pl.col("quantity").abs()


def outlier_flag(sales_threshold: float, quantity_threshold: int) -> pl.Expr:
    """Flag rows with very large sales or quantity; unknown values never flag"""
    return (
        (pl.col("sales") > sales_threshold) | (pl.col("quantity") > quantity_threshold)
    ).fill_null(False)


class SalesCleaner:
    """
    Sales table cleaner.

    Rules run in two steps: the column repairs (independent of each other),
    then the outlier flag, which must see the corrected quantity.

    Example:
        cleaner = SalesCleaner()
        df_clean, stats = cleaner.clean(df)
    """

    def __init__(
        self,
        outlier_sales_threshold: Optional[float] = None,
        outlier_quantity_threshold: Optional[int] = None,
        duplicate_key: Optional[Sequence[str]] = None,
    ):
        pipeline_settings = get_settings().pipeline
        self.outlier_sales_threshold = (
            pipeline_settings.outlier_sales_threshold
            if outlier_sales_threshold is None else outlier_sales_threshold
        )
        self.outlier_quantity_threshold = (
            pipeline_settings.outlier_quantity_threshold
            if outlier_quantity_threshold is None else outlier_quantity_threshold
        )
        self.duplicate_key = list(duplicate_key or pipeline_settings.duplicate_key)
        self._repair_rules: Dict[str, Tuple[str, Callable[[], pl.Expr]]] = {}
        self._register_default_rules()

    def _register_default_rules(self) -> None:
        """Register default repair rules as stat name -> (column, expression)"""
        self._repair_rules = {
            "categories_trimmed": ("category", trim_category),
            "sub_categories_normalized": ("sub_category", uppercase_sub_category),
            "ship_dates_repaired": ("ship_date", repair_ship_date),
            "quantities_corrected": ("quantity", correct_quantity_sign),
        }

    @property
    def rules(self) -> List[str]:
        return list(self._repair_rules)

    def _count_changes(self, df: pl.DataFrame) -> Dict[str, int]:
        """Rows each rule would change on this frame"""
        if df.is_empty():
            return {name: 0 for name in self._repair_rules}

        counts = df.select([
            expr().ne_missing(pl.col(column)).sum().alias(name)
            for name, (column, expr) in self._repair_rules.items()
        ])
        return {name: int(counts[name][0]) for name in self._repair_rules}

    def apply_repairs(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply the per-column repair rules"""
        return df.with_columns([
            expr().alias(column) for column, expr in self._repair_rules.values()
        ])

    def flag_outliers(self, df: pl.DataFrame) -> pl.DataFrame:
        """(Re)compute outlier_flag from the current sales and quantity"""
        return df.with_columns(
            outlier_flag(self.outlier_sales_threshold, self.outlier_quantity_threshold)
            .alias("outlier_flag")
        )

    def clean(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, CleaningStats]:
        """
        Apply every cleaning rule.

        Args:
            df: Schema-conformant sales table

        Returns:
            Tuple of the cleaned DataFrame and CleaningStats
        """
        changes = self._count_changes(df)

        df = self.apply_repairs(df)
        df = self.flag_outliers(df)

        stats = CleaningStats(
            total_rows=df.height,
            outliers_flagged=int(df["outlier_flag"].sum()) if df.height else 0,
            **changes,
        )

        logger.info(
            "Sales cleaning complete",
            rows=stats.total_rows,
            categories_trimmed=stats.categories_trimmed,
            sub_categories_normalized=stats.sub_categories_normalized,
            ship_dates_repaired=stats.ship_dates_repaired,
            quantities_corrected=stats.quantities_corrected,
            outliers_flagged=stats.outliers_flagged,
        )

        return df, stats

    def remove_duplicates(
        self,
        df: pl.DataFrame,
        subset: Optional[Sequence[str]] = None,
    ) -> pl.DataFrame:
        """
        Drop duplicate candidates, keeping the lowest row_id per key.

        Only runs when an operator asks for it; the pipeline never calls it
        by default. Surviving rows keep their input order.
        """
        key = list(subset or self.duplicate_key)
        order = ["row_id", _POSITION] if "row_id" in df.columns else [_POSITION]

        deduplicated = (
            df.with_row_index(_POSITION)
            .sort(order, nulls_last=True)
            .unique(subset=key, keep="first", maintain_order=True)
            .sort(_POSITION)
            .drop(_POSITION)
        )

        removed = df.height - deduplicated.height
        logger.info("Duplicate candidates removed", key=key, removed=removed)

        return deduplicated


def clean_sales_frame(df: pl.DataFrame) -> pl.DataFrame:
    """
    Convenience function to clean a sales DataFrame.

    Args:
        df: Schema-conformant sales table

    Returns:
        Cleaned DataFrame
    """
    cleaned, _ = SalesCleaner().clean(df)
    return cleaned
