"""
Unit Tests - Data Quality
"""
import pytest
import polars as pl

from superstore.models import SALES_SCHEMA, empty_sales_frame
from superstore.quality.validators import (
    SalesValidator,
    ValidationSeverity,
    ValidationStatus,
    create_sales_validator,
)


class TestSalesValidator:
    """Tests for SalesValidator"""

    def test_missing_counts(self, sample_sales_df):
        """Test null counts for the required fields"""
        report = SalesValidator().validate(sample_sales_df)

        assert report.missing_counts == {
            "order_id": 0,
            "customer_name": 1,
            "sales": 0,
        }

    def test_duplicate_group_reported(self, sample_sales_df):
        """Test same order, product and sales forms one group of two"""
        report = SalesValidator().validate(sample_sales_df)

        assert report.duplicate_group_count == 1
        group = report.duplicate_groups.row(0, named=True)
        assert group["order_id"] == "CA-2020-152156"
        assert group["product_id"] == "FUR-CH-10000454"
        assert group["duplicate_count"] == 2
        assert group["row_ids"] == [2, 6]

    def test_multi_line_order_is_not_duplicate(self, make_sales_frame):
        """Test lines of one order with different products are not duplicates"""
        df = make_sales_frame(
            {"row_id": 1, "order_id": "A", "product_id": "P1", "sales": 10.0},
            {"row_id": 2, "order_id": "A", "product_id": "P2", "sales": 10.0},
            {"row_id": 3, "order_id": "A", "product_id": "P1", "sales": 11.0},
        )

        report = SalesValidator().validate(df)

        assert report.duplicate_group_count == 0
        assert report.duplicate_row_count == 0

    def test_negative_sales_reported(self, sample_sales_df):
        """Test negative sales rows are listed"""
        report = SalesValidator().validate(sample_sales_df)

        assert report.negative_sales_count == 1
        assert report.negative_sales["row_id"].to_list() == [5]

    def test_validation_does_not_mutate(self, sample_sales_df):
        """Test the input frame is unchanged after validation"""
        before = sample_sales_df.clone()

        SalesValidator().validate(sample_sales_df)

        assert sample_sales_df.equals(before)

    def test_findings_are_warnings(self, sample_sales_df):
        """Test findings never mark the report as failed"""
        report = SalesValidator().validate(sample_sales_df)

        assert report.status == ValidationStatus.PARTIAL
        failed = [c for c in report.checks if not c.passed]
        assert failed
        assert all(c.severity == ValidationSeverity.WARNING for c in failed)

    def test_clean_data_passes(self, make_sales_frame):
        """Test a defect-free table passes every check"""
        df = make_sales_frame(
            {"row_id": 1, "product_id": "P1"},
            {"row_id": 2, "product_id": "P2"},
        )

        report = SalesValidator().validate(df)

        assert report.status == ValidationStatus.PASSED
        assert report.success_rate == 100.0

    def test_empty_dataset(self):
        """Test an empty table yields zero counts"""
        report = SalesValidator().validate(empty_sales_frame())

        assert report.total_rows == 0
        assert report.total_cells == 0
        assert all(count == 0 for count in report.missing_counts.values())
        assert report.duplicate_group_count == 0
        assert report.negative_sales_count == 0

    def test_row_and_cell_counts(self, sample_sales_df):
        """Test total rows and cells"""
        report = SalesValidator().validate(sample_sales_df)

        assert report.total_rows == 8
        assert report.total_cells == 8 * len(SALES_SCHEMA)

    def test_absent_required_column_counts_every_row(self):
        """Test a required column missing from the frame counts as all null"""
        df = pl.DataFrame({"order_id": ["A", "B"], "sales": [1.0, 2.0]})

        counts = SalesValidator().missing_counts(df)

        assert counts["customer_name"] == 2

    def test_custom_duplicate_key(self, make_sales_frame):
        """Test duplicate key override"""
        df = make_sales_frame(
            {"row_id": 1, "order_id": "A", "product_id": "P1", "sales": 10.0},
            {"row_id": 2, "order_id": "A", "product_id": "P1", "sales": 12.0},
        )

        validator = SalesValidator(duplicate_key=["order_id", "product_id"])
        groups = validator.duplicate_groups(df)

        assert groups.height == 1
        assert groups["duplicate_count"][0] == 2

    def test_summary(self, sample_sales_df):
        """Test flat summary"""
        summary = create_sales_validator().validate(sample_sales_df).summary()

        assert summary["status"] == "partial"
        assert summary["duplicate_groups"] == 1
        assert summary["duplicate_rows"] == 2
        assert summary["negative_sales"] == 1
