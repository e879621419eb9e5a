"""
Superstore Raw Dataset Generator
Writes a tab-delimited raw export with the defects the pipeline repairs
or reports: padded categories, lowercase sub-categories, inverted ship
dates, negative quantities, refunds, duplicate lines and outliers.
"""

import argparse
import random
from datetime import date, timedelta
from pathlib import Path

import numpy as np
import polars as pl
from faker import Faker

fake = Faker()
random.seed(42)
np.random.seed(42)
Faker.seed(42)

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "raw"

CATEGORIES = {
    "Furniture": ["Bookcases", "Chairs", "Furnishings", "Tables"],
    "Office Supplies": ["Appliances", "Art", "Binders", "Envelopes", "Paper", "Storage"],
    "Technology": ["Accessories", "Copiers", "Machines", "Phones"],
}
REGIONS = ["Central", "East", "South", "West"]
SEGMENTS = ["Consumer", "Corporate", "Home Office"]
SHIP_MODES = ["Standard Class", "Second Class", "First Class", "Same Day"]

# Source headers, as exported
HEADERS = [
    "RowID", "OrderID", "OrderDate", "ShipDate", "ShipMode", "CustomerID",
    "CustomerName", "Segment", "Country", "City", "State", "PostalCode",
    "Region", "ProductID", "Category", "SubCategory", "ProductName",
    "Sales", "Quantity", "Discount", "Profit",
]


def generate_customers(n: int) -> pl.DataFrame:
    print(f"📊 Generating {n:,} customers...")
    return pl.DataFrame({
        "CustomerID": [f"{fake.lexify('??').upper()}-{10000 + i}" for i in range(n)],
        "CustomerName": [fake.name() for _ in range(n)],
        "Segment": np.random.choice(SEGMENTS, n, p=[0.52, 0.30, 0.18]),
        "City": [fake.city() for _ in range(n)],
        "State": [fake.state() for _ in range(n)],
        "PostalCode": [fake.postcode() for _ in range(n)],
        "Region": np.random.choice(REGIONS, n),
    })


def generate_products(n: int) -> pl.DataFrame:
    print(f"📊 Generating {n:,} products...")
    categories = np.random.choice(list(CATEGORIES), n)
    return pl.DataFrame({
        "ProductID": [f"{c[:3].upper()}-{i:08d}" for i, c in enumerate(categories)],
        "Category": categories,
        "SubCategory": [random.choice(CATEGORIES[c]) for c in categories],
        "ProductName": [f"{fake.word().title()} {fake.word().title()}" for _ in range(n)],
        "UnitPrice": np.round(np.random.lognormal(3.5, 1.1, n), 2),
    })


def generate_lines(n: int, customers: pl.DataFrame, products: pl.DataFrame) -> pl.DataFrame:
    print(f"📊 Generating {n:,} order lines...")

    start = date(2019, 1, 1)
    customer_idx = np.random.randint(0, customers.height, n)
    product_idx = np.random.randint(0, products.height, n)
    order_dates = [start + timedelta(days=int(d)) for d in np.random.randint(0, 4 * 365, n)]
    ship_dates = [d + timedelta(days=int(s)) for d, s in zip(order_dates, np.random.randint(0, 7, n))]
    quantities = np.random.randint(1, 10, n)
    discounts = np.random.choice([0.0, 0.1, 0.2, 0.3, 0.5], n, p=[0.5, 0.2, 0.15, 0.1, 0.05])
    prices = products["UnitPrice"].to_numpy()[product_idx]
    sales = np.round(prices * quantities * (1 - discounts), 2)
    profit = np.round(sales * np.random.uniform(-0.3, 0.4, n), 2)

    lines = pl.concat([
        customers[customer_idx].select(["CustomerID", "CustomerName", "Segment", "City", "State", "PostalCode", "Region"]),
        products[product_idx].select(["ProductID", "Category", "SubCategory", "ProductName"]),
    ], how="horizontal")

    # Several lines per order: reuse order ids within a customer/day
    order_ids = [f"US-{d.year}-{100000 + (i // 3)}" for i, d in enumerate(order_dates)]

    return lines.with_columns([
        pl.Series("RowID", np.arange(1, n + 1)),
        pl.Series("OrderID", order_ids),
        pl.Series("OrderDate", order_dates),
        pl.Series("ShipDate", ship_dates),
        pl.Series("ShipMode", np.random.choice(SHIP_MODES, n, p=[0.6, 0.2, 0.15, 0.05])),
        pl.lit("United States").alias("Country"),
        pl.Series("Sales", sales),
        pl.Series("Quantity", quantities),
        pl.Series("Discount", discounts),
        pl.Series("Profit", profit),
    ]).select(HEADERS)


def inject_defects(df: pl.DataFrame, rate: float = 0.02) -> pl.DataFrame:
    print("🧪 Injecting defects...")
    n = df.height

    def pick() -> pl.Series:
        return pl.Series(np.random.random(n) < rate)

    df = df.with_columns([
        pl.when(pick()).then(pl.lit("  ") + pl.col("Category") + pl.lit(" ")).otherwise(pl.col("Category")).alias("Category"),
        pl.when(pick()).then(pl.col("SubCategory").str.to_lowercase()).otherwise(pl.col("SubCategory")).alias("SubCategory"),
        pl.when(pick()).then(pl.col("OrderDate") - pl.duration(days=3)).otherwise(pl.col("ShipDate")).alias("ShipDate"),
        pl.when(pick()).then(-pl.col("Quantity")).otherwise(pl.col("Quantity")).alias("Quantity"),
        pl.when(pick()).then(-pl.col("Sales")).otherwise(pl.col("Sales")).alias("Sales"),
        pl.when(pl.Series(np.random.random(n) < rate / 4)).then(None).otherwise(pl.col("CustomerName")).alias("CustomerName"),
    ])
    # Outliers on top of refunds
    df = df.with_columns(
        pl.when(pl.Series(np.random.random(n) < rate / 10)).then(pl.col("Sales") * 500).otherwise(pl.col("Sales")).alias("Sales"),
    )

    duplicates = df.sample(fraction=rate / 2, seed=42).with_columns(
        (pl.col("RowID") + n).alias("RowID")
    )
    return pl.concat([df, duplicates], how="vertical")


def main():
    parser = argparse.ArgumentParser(description="Generate a raw Superstore export")
    parser.add_argument("--rows", type=int, default=10000, help="Order lines to generate")
    parser.add_argument("--customers", type=int, default=800, help="Distinct customers")
    parser.add_argument("--products", type=int, default=1800, help="Distinct products")
    parser.add_argument("--output", type=Path, default=OUTPUT_DIR / "superstore_data_raw.tsv")
    args = parser.parse_args()

    print("=" * 60)
    print("🛒 Superstore Raw Dataset Generator")
    print("=" * 60 + "\n")

    customers = generate_customers(args.customers)
    products = generate_products(args.products)
    lines = inject_defects(generate_lines(args.rows, customers, products))

    args.output.parent.mkdir(parents=True, exist_ok=True)
    lines.write_csv(args.output, separator="\t", date_format="%m/%d/%Y")

    print(f"\n✅ {args.output}: {lines.height:,} rows")


if __name__ == "__main__":
    main()
