"""
Data Validation Module

Read-only diagnostic pass over the sales table.

Reports:
- Missing values in required fields
- Duplicate candidates on the logical line-item key
- Negative sales (returns/refunds kept for manual review)
- Row and cell counts

Nothing here mutates data or raises on schema-conformant input; every
finding is a warning for operator review.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import polars as pl
import structlog

from superstore.config import get_settings

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation findings"""
    WARNING = "warning"  # Business-rule finding, reported for review
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationReport:
    """Complete diagnostic report for one dataset"""
    status: ValidationStatus
    total_rows: int
    total_cells: int
    missing_counts: Dict[str, int]
    duplicate_groups: pl.DataFrame
    negative_sales: pl.DataFrame
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def duplicate_group_count(self) -> int:
        return self.duplicate_groups.height

    @property
    def duplicate_row_count(self) -> int:
        """Rows that belong to some duplicate group"""
        if self.duplicate_groups.is_empty():
            return 0
        return int(self.duplicate_groups["duplicate_count"].sum())

    @property
    def negative_sales_count(self) -> int:
        return self.negative_sales.height

    @property
    def passed_checks(self) -> int:
        return sum(1 for c in self.checks if c.passed)

    @property
    def warning_count(self) -> int:
        return sum(1 for c in self.checks if not c.passed and c.severity == ValidationSeverity.WARNING)

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if not self.checks:
            return 100.0
        return (self.passed_checks / len(self.checks)) * 100

    def summary(self) -> Dict[str, Any]:
        """Flat summary suitable for logs and CLI output"""
        return {
            "status": self.status.value,
            "total_rows": self.total_rows,
            "total_cells": self.total_cells,
            "missing_counts": dict(self.missing_counts),
            "duplicate_groups": self.duplicate_group_count,
            "duplicate_rows": self.duplicate_row_count,
            "negative_sales": self.negative_sales_count,
        }


class SalesValidator:
    """
    Diagnostic validator for the sales fact table.

    Example:
        validator = SalesValidator()
        report = validator.validate(df)
        report.missing_counts["customer_name"]
    """

    def __init__(
        self,
        required_fields: Optional[Sequence[str]] = None,
        duplicate_key: Optional[Sequence[str]] = None,
    ):
        pipeline_settings = get_settings().pipeline
        self.required_fields = list(required_fields or pipeline_settings.required_fields)
        self.duplicate_key = list(duplicate_key or pipeline_settings.duplicate_key)

    def missing_counts(self, df: pl.DataFrame) -> Dict[str, int]:
        """Null count per required field; an absent column counts every row"""
        counts = {}
        for column in self.required_fields:
            if column in df.columns:
                counts[column] = df[column].null_count()
            else:
                counts[column] = df.height
        return counts

    def duplicate_groups(self, df: pl.DataFrame) -> pl.DataFrame:
        """
        Groups of rows sharing the duplicate key, with more than one member.

        Returns:
            DataFrame with the key columns, ``duplicate_count`` and, when the
            table has row ids, the ``row_ids`` of each group's members
        """
        absent = [col for col in self.duplicate_key if col not in df.columns]
        if absent:
            logger.warning("Duplicate key columns not found", columns=absent)
            return pl.DataFrame(schema={"duplicate_count": pl.UInt32})

        aggregations = [pl.len().alias("duplicate_count")]
        if "row_id" in df.columns:
            aggregations.append(pl.col("row_id").sort().alias("row_ids"))

        return (
            df.group_by(self.duplicate_key)
            .agg(aggregations)
            .filter(pl.col("duplicate_count") > 1)
            .sort(self.duplicate_key, nulls_last=True)
        )

    def negative_sales(self, df: pl.DataFrame) -> pl.DataFrame:
        """Rows with sales below zero"""
        if "sales" not in df.columns:
            return df.clear()
        return df.filter(pl.col("sales") < 0)

    def validate(self, df: pl.DataFrame) -> ValidationReport:
        """
        Run all diagnostics on the DataFrame.

        Args:
            df: Sales table to inspect

        Returns:
            ValidationReport with counts, duplicate groups and negative sales
        """
        started_at = datetime.utcnow()
        total = df.height

        logger.info("Running sales validation", rows=total, columns=df.width)

        missing = self.missing_counts(df)
        duplicates = self.duplicate_groups(df)
        negatives = self.negative_sales(df)

        checks = [
            ValidationCheck(
                name="row_count",
                passed=True,
                severity=ValidationSeverity.INFO,
                message=f"Dataset has {total} rows and {total * df.width} cells",
                details={"rows": total, "cells": total * df.width},
                total_rows=total,
            )
        ]

        for column, null_count in missing.items():
            passed = null_count == 0
            checks.append(ValidationCheck(
                name=f"not_null_{column}",
                passed=passed,
                severity=ValidationSeverity.WARNING,
                message=f"Column '{column}' has {null_count} missing values" if not passed else f"Column '{column}' has no missing values",
                details={"null_count": null_count, "null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
            ))

        duplicate_rows = int(duplicates["duplicate_count"].sum()) if duplicates.height else 0
        checks.append(ValidationCheck(
            name="duplicate_" + "_".join(self.duplicate_key),
            passed=duplicates.is_empty(),
            severity=ValidationSeverity.WARNING,
            message=f"{duplicates.height} duplicate groups covering {duplicate_rows} rows" if duplicates.height else "No duplicate candidates",
            details={"key": self.duplicate_key, "group_count": duplicates.height, "row_count": duplicate_rows},
            failed_rows=duplicate_rows,
            total_rows=total,
        ))

        checks.append(ValidationCheck(
            name="non_negative_sales",
            passed=negatives.is_empty(),
            severity=ValidationSeverity.WARNING,
            message=f"{negatives.height} rows have negative sales" if negatives.height else "No negative sales",
            details={"negative_count": negatives.height},
            failed_rows=negatives.height,
            total_rows=total,
        ))

        for check in checks:
            if not check.passed:
                logger.warning(
                    f"Validation finding: {check.name}",
                    message=check.message,
                    severity=check.severity.value,
                )

        status = ValidationStatus.PASSED if all(c.passed for c in checks) else ValidationStatus.PARTIAL

        report = ValidationReport(
            status=status,
            total_rows=total,
            total_cells=total * df.width,
            missing_counts=missing,
            duplicate_groups=duplicates,
            negative_sales=negatives,
            checks=checks,
            started_at=started_at,
            completed_at=datetime.utcnow(),
        )

        logger.info(
            f"Validation complete: {status.value}",
            passed=report.passed_checks,
            warnings=report.warning_count,
        )

        return report


def create_sales_validator() -> SalesValidator:
    """Create validator configured from settings"""
    settings = get_settings()
    return SalesValidator(
        required_fields=settings.pipeline.required_fields,
        duplicate_key=settings.pipeline.duplicate_key,
    )
