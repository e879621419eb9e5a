"""
Sales Pipeline

Runs the cleaning and enrichment stages over the full sales table in a
fixed order and exposes the result as a named read-only view.

Pipeline:
1. Coerce input to the sales schema (the only fatal step)
2. Validate (report only)
3. Drop duplicate candidates, when an operator asked for it
4. Clean
5. Segment customers
6. Add customer-relative dates

Each stage sees the whole table produced by the previous one. Derived
columns are recomputed from scratch, so running the pipeline on its own
output gives the same output.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import polars as pl
import structlog

from superstore.config import get_settings
from superstore.config.settings import PipelineSettings
from superstore.ingestion.loader import SalesInput, coerce_sales_frame
from superstore.models.records import CLEANED_SCHEMA
from superstore.models.view import SalesView
from superstore.quality.validators import SalesValidator, ValidationReport
from .cleaners import CleaningStats, SalesCleaner
from .enrichers import TemporalEnricher
from .segmentation import CustomerSegmenter

logger = structlog.get_logger(__name__)


@dataclass
class PipelineResult:
    """Result of one pipeline run"""
    view: SalesView
    report: ValidationReport
    cleaning: CleaningStats
    input_rows: int
    output_rows: int
    started_at: datetime
    completed_at: datetime
    duration_seconds: float

    @property
    def rows_dropped(self) -> int:
        return self.input_rows - self.output_rows


class SalesPipeline:
    """
    Sales cleaning and enrichment orchestrator.

    Example:
        pipeline = SalesPipeline()
        result = pipeline.run(raw_df)
        result.report.duplicate_groups
        result.view.to_frame()
    """

    def __init__(
        self,
        settings: Optional[PipelineSettings] = None,
        remove_duplicates: Optional[bool] = None,
    ):
        self.settings = settings or get_settings().pipeline
        self.remove_duplicates = (
            self.settings.remove_duplicates if remove_duplicates is None else remove_duplicates
        )
        self.validator = SalesValidator(
            required_fields=self.settings.required_fields,
            duplicate_key=self.settings.duplicate_key,
        )
        self.cleaner = SalesCleaner(
            outlier_sales_threshold=self.settings.outlier_sales_threshold,
            outlier_quantity_threshold=self.settings.outlier_quantity_threshold,
            duplicate_key=self.settings.duplicate_key,
        )
        self.segmenter = CustomerSegmenter(
            high_value_threshold=self.settings.high_value_threshold,
            medium_value_lower=self.settings.medium_value_lower,
            medium_value_upper=self.settings.medium_value_upper,
        )
        self.enricher = TemporalEnricher()

    def run(self, data: SalesInput) -> PipelineResult:
        """
        Run every stage over the input.

        Args:
            data: Raw sales rows (DataFrame or iterable of mappings/SalesRecords)

        Returns:
            PipelineResult holding the cleaned view and the validation report

        Raises:
            MalformedInputError: if the input cannot be coerced to the schema
        """
        started_at = datetime.utcnow()

        df = coerce_sales_frame(data)
        input_rows = df.height

        logger.info("Starting sales pipeline", rows=input_rows, remove_duplicates=self.remove_duplicates)

        report = self.validator.validate(df)

        duplicates_removed = 0
        if self.remove_duplicates:
            deduplicated = self.cleaner.remove_duplicates(df)
            duplicates_removed = df.height - deduplicated.height
            df = deduplicated

        df, cleaning = self.cleaner.clean(df)
        cleaning.duplicates_removed = duplicates_removed

        df = self.segmenter.assign(df)
        df = self.enricher.enrich(df)
        df = df.select(list(CLEANED_SCHEMA))

        view = SalesView(self.settings.view_name, df)
        completed_at = datetime.utcnow()

        result = PipelineResult(
            view=view,
            report=report,
            cleaning=cleaning,
            input_rows=input_rows,
            output_rows=df.height,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

        logger.info(
            "Sales pipeline complete",
            view=view.name,
            input_rows=result.input_rows,
            output_rows=result.output_rows,
            duration_seconds=result.duration_seconds,
        )

        return result


def run_pipeline(data: SalesInput, remove_duplicates: bool = False) -> PipelineResult:
    """
    Convenience function to run the pipeline with configured settings.

    Args:
        data: Raw sales rows
        remove_duplicates: Drop duplicate candidates before cleaning

    Returns:
        PipelineResult
    """
    return SalesPipeline(remove_duplicates=remove_duplicates).run(data)
