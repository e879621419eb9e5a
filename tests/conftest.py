"""
Test Suite Configuration
"""
from datetime import date
from typing import Any, Callable, Dict

import pytest
import polars as pl

from superstore.config import Settings
from superstore.ingestion import coerce_sales_frame


def sales_row(**overrides: Any) -> Dict[str, Any]:
    """One well-formed line item; keyword arguments replace defaults"""
    row = {
        "row_id": 1,
        "order_id": "CA-2020-100001",
        "order_date": date(2020, 1, 15),
        "ship_date": date(2020, 1, 18),
        "ship_mode": "Standard Class",
        "customer_id": "AA-10000",
        "customer_name": "Alex Avila",
        "segment": "Consumer",
        "country": "United States",
        "city": "Henderson",
        "state": "Kentucky",
        "postal_code": "42420",
        "region": "South",
        "product_id": "FUR-BO-10001798",
        "category": "Furniture",
        "sub_category": "BOOKCASES",
        "product_name": "Bush Somerset Collection Bookcase",
        "sales": 100.0,
        "quantity": 1,
        "discount": 0.0,
        "profit": 10.0,
    }
    row.update(overrides)
    return row


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def make_sales_frame() -> Callable[..., pl.DataFrame]:
    """Build a schema-conformant frame from row override dicts"""
    def build(*rows: Dict[str, Any]) -> pl.DataFrame:
        return coerce_sales_frame([sales_row(**row) for row in rows])
    return build


@pytest.fixture
def sample_sales_df(make_sales_frame) -> pl.DataFrame:
    """
    Small raw table with one of each defect:
    padded category, title-case sub-categories, inverted ship date,
    negative quantity, a refund, a duplicate line, a missing customer
    name and two outliers.
    """
    return make_sales_frame(
        {
            "row_id": 1, "order_id": "CA-2020-152156", "customer_id": "CG-12520",
            "customer_name": "Claire Gute", "product_id": "FUR-BO-10001798",
            "category": "  Furniture ", "sub_category": "Bookcases",
            "order_date": date(2020, 11, 8), "ship_date": date(2020, 11, 11),
            "sales": 261.96, "quantity": 2, "profit": 41.91, "region": "South",
        },
        {
            "row_id": 2, "order_id": "CA-2020-152156", "customer_id": "CG-12520",
            "customer_name": "Claire Gute", "product_id": "FUR-CH-10000454",
            "category": "Furniture", "sub_category": "Chairs",
            "product_name": "Hon Deluxe Fabric Upholstered Stacking Chairs",
            "order_date": date(2020, 11, 8), "ship_date": date(2020, 11, 11),
            "sales": 1731.94, "quantity": 3, "profit": 219.58, "region": "South",
        },
        {
            "row_id": 3, "order_id": "CA-2020-138688", "customer_id": "DV-13045",
            "customer_name": "Darrin Van Huff", "product_id": "OFF-LA-10000240",
            "category": "Office Supplies", "sub_category": "Labels",
            "product_name": "Self-Adhesive Address Labels",
            "order_date": date(2020, 6, 12), "ship_date": date(2020, 6, 10),
            "sales": 14.62, "quantity": -2, "profit": 6.87, "region": "West",
            "segment": "Corporate",
        },
        {
            "row_id": 4, "order_id": "US-2019-108966", "customer_id": "SO-20335",
            "customer_name": "Sean O'Donnell", "product_id": "FUR-TA-10000577",
            "category": "Furniture", "sub_category": "Tables",
            "product_name": "Bretford CR4500 Series Slim Rectangular Table",
            "order_date": date(2019, 10, 11), "ship_date": date(2019, 10, 18),
            "sales": 957.58, "quantity": 5, "profit": -383.03, "region": "South",
        },
        {
            "row_id": 5, "order_id": "US-2019-108966", "customer_id": "SO-20335",
            "customer_name": "Sean O'Donnell", "product_id": "OFF-ST-10000760",
            "category": "Office Supplies", "sub_category": "Storage",
            "product_name": "Eldon Fold 'N Roll Cart System",
            "order_date": date(2019, 10, 11), "ship_date": date(2019, 10, 18),
            "sales": -22.37, "quantity": 2, "profit": 2.52, "region": "South",
        },
        {
            "row_id": 6, "order_id": "CA-2020-152156", "customer_id": "CG-12520",
            "customer_name": "Claire Gute", "product_id": "FUR-CH-10000454",
            "category": "Furniture", "sub_category": "Chairs",
            "product_name": "Hon Deluxe Fabric Upholstered Stacking Chairs",
            "order_date": date(2020, 11, 8), "ship_date": date(2020, 11, 11),
            "sales": 1731.94, "quantity": 3, "profit": 219.58, "region": "South",
        },
        {
            "row_id": 7, "order_id": "CA-2021-117415", "customer_id": "BH-11710",
            "customer_name": None, "product_id": "TEC-PH-10002275",
            "category": "Technology", "sub_category": "Phones",
            "product_name": "Mitel 5320 IP Phone VoIP phone",
            "order_date": date(2021, 6, 9), "ship_date": date(2021, 6, 14),
            "sales": 12000.0, "quantity": 7, "profit": 90.72, "region": "West",
            "segment": "Home Office",
        },
        {
            "row_id": 8, "order_id": "CA-2021-117590", "customer_id": "BH-11710",
            "customer_name": "Brosina Hoffman", "product_id": "TEC-PH-10004977",
            "category": "Technology", "sub_category": "Phones",
            "product_name": "GE 30524EE4",
            "order_date": date(2021, 8, 1), "ship_date": date(2021, 8, 5),
            "sales": 900.0, "quantity": 150, "profit": 68.0, "region": "West",
            "segment": "Home Office",
        },
    )
