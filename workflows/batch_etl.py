"""
Prefect Workflow Orchestration - Superstore Batch ETL

Scheduled batch run over the raw sales exports:
- Load and coerce raw files
- Validate, clean and enrich
- Persist the cleaned view and the report tables
- Alert on validation findings
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import polars as pl
from prefect import flow, task, get_run_logger

from superstore.config import get_settings
from superstore.ingestion import FileFormat, SalesFileConfig, SalesFileLoader
from superstore.reporting import SalesAnalytics
from superstore.transformation import SalesPipeline

settings = get_settings()


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="load_sales_files",
    description="Load and coerce raw sales exports",
    retries=2,
    retry_delay_seconds=30,
)
def load_sales_files(source_dir: str, pattern: str = "*.tsv") -> pl.DataFrame:
    """Load every matching export into one table"""
    logger = get_run_logger()

    loader = SalesFileLoader()
    frames = []
    for file_path in sorted(Path(source_dir).glob(pattern)):
        try:
            file_format = FileFormat(file_path.suffix.lstrip(".").lower())
        except ValueError:
            file_format = FileFormat.TSV
        df, result = loader.load(SalesFileConfig(file_path=file_path, file_format=file_format))
        logger.info(f"Loaded {result.rows_loaded} rows from {file_path.name}")
        frames.append(df)

    if not frames:
        raise FileNotFoundError(f"No files matching {pattern} in {source_dir}")

    return pl.concat(frames, how="vertical")


@task(
    name="run_sales_pipeline",
    description="Validate, clean and enrich the sales table",
)
def run_sales_pipeline(df: pl.DataFrame, remove_duplicates: bool = False):
    """Run the cleaning pipeline"""
    logger = get_run_logger()

    result = SalesPipeline(remove_duplicates=remove_duplicates or None).run(df)

    logger.info(
        f"Pipeline {result.report.status.value}: "
        f"{result.input_rows} -> {result.output_rows} rows, "
        f"{result.report.duplicate_group_count} duplicate groups, "
        f"{result.report.negative_sales_count} negative sales"
    )
    return result


@task(
    name="write_curated_outputs",
    description="Write the cleaned view and report tables",
)
def write_curated_outputs(result, output_dir: str, with_reports: bool = True) -> dict:
    """Persist cleaned view and reports as Parquet"""
    logger = get_run_logger()

    target = Path(output_dir)
    target.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")

    outputs = {}
    view_file = target / f"{result.view.name}_{timestamp}.parquet"
    result.view.to_frame().write_parquet(view_file)
    outputs[result.view.name] = str(view_file)

    if with_reports:
        for name, report in SalesAnalytics(result.view).build_all().items():
            report_file = target / f"{name}_{timestamp}.parquet"
            report.write_parquet(report_file)
            outputs[name] = str(report_file)

    logger.info(f"Written {len(outputs)} curated files to {target}")
    return outputs


@task(
    name="send_alert",
    description="Send alert notification",
)
def send_alert(
    alert_type: str,
    message: str,
    severity: str = "info",
) -> None:
    """Send alert notification"""
    logger = get_run_logger()
    logger.warning(f"[{severity.upper()}] {alert_type}: {message}")


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="superstore_batch_etl",
    description="Batch cleaning and enrichment of Superstore sales exports",
)
def superstore_batch_etl(
    source_dir: Optional[str] = None,
    output_dir: Optional[str] = None,
    pattern: str = "*.tsv",
    remove_duplicates: bool = False,
) -> dict:
    """
    Superstore batch ETL.

    Steps:
    1. Load raw exports
    2. Validate, clean and enrich
    3. Write cleaned view and reports
    4. Alert on findings for operator review
    """
    logger = get_run_logger()

    source_dir = source_dir or settings.data_lake.raw_path
    output_dir = output_dir or settings.data_lake.curated_path

    logger.info(f"Starting Superstore batch ETL from {source_dir}")

    try:
        raw = load_sales_files(source_dir, pattern)
        result = run_sales_pipeline(raw, remove_duplicates)
        outputs = write_curated_outputs(result, output_dir)
    except Exception as e:
        logger.error(f"ETL pipeline failed: {e}")
        send_alert(
            alert_type="Superstore ETL Failed",
            message=str(e),
            severity="critical",
        )
        raise

    summary = result.report.summary()
    if result.report.warning_count:
        send_alert(
            alert_type="Validation findings",
            message=format_summary(summary),
            severity="warning",
        )

    return {
        "status": "success",
        "validation": summary,
        "outputs": outputs,
        "duration_seconds": result.duration_seconds,
    }


def format_summary(summary: dict) -> str:
    return ", ".join(f"{key}={value}" for key, value in summary.items())


if __name__ == "__main__":
    superstore_batch_etl()
