"""
Unit Tests - Reporting
"""
from datetime import date

import pytest
import polars as pl

from superstore.models import CustomerSegment
from superstore.reporting import SalesAnalytics
from superstore.transformation import run_pipeline


@pytest.fixture
def cleaned_df() -> pl.DataFrame:
    """Small cleaned table spanning two years"""
    return pl.DataFrame({
        "order_id": ["O1", "O2", "O3", "O3", "O4"],
        "order_date": [
            date(2020, 1, 10),
            date(2021, 1, 5),
            date(2021, 2, 1),
            date(2021, 2, 1),
            date(2020, 2, 15),
        ],
        "customer_id": ["C1", "C1", "C2", "C2", "C3"],
        "product_id": ["P1", "P1", "P2", "P3", "P4"],
        "product_name": ["Chair A", "Chair A", "Phone X", "Phone Y", "Label"],
        "category": ["Furniture", "Furniture", "Technology", "Technology", "Office Supplies"],
        "sub_category": ["CHAIRS", "CHAIRS", "PHONES", "PHONES", "LABELS"],
        "region": ["West", "West", "East", "East", "South"],
        "segment": ["Consumer", "Consumer", "Corporate", "Corporate", "Consumer"],
        "customer_segment": [
            CustomerSegment.LOW_VALUE.value,
            CustomerSegment.LOW_VALUE.value,
            CustomerSegment.MEDIUM_VALUE.value,
            CustomerSegment.MEDIUM_VALUE.value,
            CustomerSegment.LOW_VALUE.value,
        ],
        "sales": [100.0, 150.0, 200.0, 200.0, 0.0],
        "profit": [10.0, 30.0, -20.0, 0.0, 0.0],
    })


class TestSalesAnalytics:
    """Tests for SalesAnalytics"""

    def test_monthly_trend(self, cleaned_df):
        """Test monthly totals and same-month-last-year comparison"""
        trend = SalesAnalytics(cleaned_df).monthly_trend()

        assert trend.select(["order_year", "order_month"]).rows() == [
            (2020, 1), (2020, 2), (2021, 1), (2021, 2),
        ]
        jan = trend.filter((pl.col("order_year") == 2021) & (pl.col("order_month") == 1)).row(0, named=True)
        assert jan["monthly_sales"] == pytest.approx(150.0)
        assert jan["sales_last_year"] == pytest.approx(100.0)
        assert jan["sales_yoy_percent"] == pytest.approx(50.0)
        assert jan["profit_yoy_percent"] == pytest.approx(200.0)

    def test_monthly_trend_zero_baseline(self, cleaned_df):
        """Test no percentage against a zero or missing prior month"""
        trend = SalesAnalytics(cleaned_df).monthly_trend()

        feb = trend.filter((pl.col("order_year") == 2021) & (pl.col("order_month") == 2)).row(0, named=True)
        assert feb["monthly_sales"] == pytest.approx(400.0)
        assert feb["sales_last_year"] == pytest.approx(0.0)
        assert feb["sales_yoy_percent"] is None

        first = trend.row(0, named=True)
        assert first["sales_last_year"] is None
        assert first["sales_yoy_percent"] is None

    def test_yearly_trend(self, cleaned_df):
        """Test yearly totals and previous-year deltas"""
        trend = SalesAnalytics(cleaned_df).yearly_trend()

        assert trend["order_year"].to_list() == [2020, 2021]
        latest = trend.row(1, named=True)
        assert latest["total_sales"] == pytest.approx(550.0)
        assert latest["last_year_sales"] == pytest.approx(100.0)
        assert latest["sales_yoy_percent"] == pytest.approx(450.0)
        assert latest["profit_yoy_percent"] == pytest.approx(0.0)

    def test_unique_counts(self, cleaned_df):
        """Test distinct orders, customers and products"""
        counts = SalesAnalytics(cleaned_df).unique_counts()

        assert counts == {
            "unique_orders": 4,
            "unique_customers": 3,
            "unique_products": 4,
        }

    def test_category_profitability(self, cleaned_df):
        """Test margin per sub-category, highest first, zero sales last"""
        report = SalesAnalytics(cleaned_df).category_profitability()

        assert report["sub_category"].to_list() == ["CHAIRS", "PHONES", "LABELS"]
        assert report["profit_margin"].to_list() == [0.16, -0.05, None]

    def test_region_sales(self, cleaned_df):
        """Test region totals with distinct order counts"""
        report = SalesAnalytics(cleaned_df).region_sales()

        assert report["region"].to_list() == ["East", "West", "South"]
        assert report["total_orders"].to_list() == [1, 2, 1]

    def test_top_products_ties_share_rank(self, cleaned_df):
        """Test tied products both make the cut"""
        report = SalesAnalytics(cleaned_df).top_products(n=1)

        assert report.select(["category", "product_name"]).rows() == [
            ("Furniture", "Chair A"),
            ("Office Supplies", "Label"),
            ("Technology", "Phone X"),
            ("Technology", "Phone Y"),
        ]
        assert report["rank_in_category"].to_list() == [1, 1, 1, 1]

    def test_top_products_default_limit(self, cleaned_df):
        """Test the configured limit keeps every product here"""
        report = SalesAnalytics(cleaned_df).top_products()

        technology = report.filter(pl.col("category") == "Technology")
        assert technology.height == 2

    def test_customer_segment_sales(self, cleaned_df):
        """Test totals per customer value tier"""
        report = SalesAnalytics(cleaned_df).customer_segment_sales()

        totals = dict(report.iter_rows())
        assert totals[CustomerSegment.LOW_VALUE.value] == pytest.approx(250.0)
        assert totals[CustomerSegment.MEDIUM_VALUE.value] == pytest.approx(400.0)

    def test_segment_sales(self, cleaned_df):
        """Test totals per market segment"""
        report = SalesAnalytics(cleaned_df).segment_sales()

        assert report["segment"].to_list() == ["Consumer", "Corporate"]
        assert report["total_sales"].to_list() == pytest.approx([250.0, 400.0])

    def test_build_all_from_view(self, sample_sales_df):
        """Test every report builds from a pipeline view"""
        view = run_pipeline(sample_sales_df).view

        reports = SalesAnalytics(view).build_all()

        assert set(reports) == {
            "monthly_trend",
            "yearly_trend",
            "category_profitability",
            "region_sales",
            "top_products",
            "customer_segment_sales",
            "segment_sales",
        }
        assert all(isinstance(report, pl.DataFrame) for report in reports.values())
        assert len(view) == 8
