"""
Sales Data Loader

Reads raw Superstore exports and coerces them to the declared sales schema.
Supports:
- Tab-delimited text (the raw export layout), CSV, JSON, JSONL and Parquet
- Header matching that ignores case and punctuation ("Sub-Category", "RowID")
- Multi-format date parsing and currency symbol stripping
- Fail-fast on values that cannot be coerced to their column type
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import hashlib
import re

import pandas as pd
import polars as pl
import structlog
from pydantic import BaseModel

from superstore.config import get_settings
from superstore.exceptions import MalformedInputError
from superstore.models.records import (
    CLEANED_SCHEMA,
    CURRENCY_COLUMNS,
    SALES_SCHEMA,
    SalesRecord,
)
from superstore.models.view import SalesView

logger = structlog.get_logger(__name__)

DATE_FORMATS = ["%Y-%m-%d", "%m/%d/%Y", "%d-%m-%Y", "%Y/%m/%d"]
NULL_VALUES = ["", "NULL", "null", "None", "NA", "N/A"]

# "Sub-Category", "SubCategory" and "sub_category" all land on sub_category
_HEADER_LOOKUP = {col.replace("_", ""): col for col in CLEANED_SCHEMA}

SalesInput = Union[pl.DataFrame, pl.LazyFrame, pd.DataFrame, SalesView, Iterable[Union[Mapping[str, Any], SalesRecord]]]


class FileFormat(str, Enum):
    """Supported file formats"""
    TSV = "tsv"
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"


@dataclass
class SalesFileConfig:
    """Configuration for loading one raw sales file"""
    file_path: Union[str, Path]
    file_format: FileFormat = FileFormat.TSV
    delimiter: Optional[str] = None
    encoding: str = "utf8"
    skip_rows: int = 0
    null_values: List[str] = field(default_factory=lambda: list(NULL_VALUES))


class LoadResult(BaseModel):
    """Result of a file load"""
    file_path: str
    rows_loaded: int = 0
    total_cells: int = 0
    columns_missing: List[str] = []
    columns_ignored: List[str] = []
    file_hash: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None


def normalize_header(name: str) -> str:
    """Lowercase and drop everything that is not a letter or digit"""
    return re.sub(r"[^a-z0-9]", "", name.lower())


def _as_frame(data: SalesInput) -> pl.DataFrame:
    """Turn any supported input container into a polars DataFrame"""
    if isinstance(data, pl.DataFrame):
        return data
    if isinstance(data, SalesView):
        return data.to_frame()
    if isinstance(data, pl.LazyFrame):
        return data.collect()
    if isinstance(data, pd.DataFrame):
        return pl.from_pandas(data)

    rows = [
        row.to_row() if isinstance(row, SalesRecord) else dict(row)
        for row in data
    ]
    if not rows:
        return pl.DataFrame()

    try:
        return pl.DataFrame(rows, infer_schema_length=None, strict=False)
    except (TypeError, ValueError, pl.exceptions.PolarsError) as e:
        raise MalformedInputError(f"Records cannot be assembled into a table: {e}") from e


def _rename_columns(df: pl.DataFrame) -> Tuple[pl.DataFrame, List[str]]:
    """Map source headers onto schema column names; return unknown headers"""
    renames: Dict[str, str] = {}
    unknown: List[str] = []

    for col in df.columns:
        target = _HEADER_LOOKUP.get(normalize_header(col))
        if target is None:
            unknown.append(col)
            continue
        if target in renames.values():
            raise MalformedInputError(
                f"Columns map to the same field '{target}'",
                column=target,
            )
        renames[col] = target

    return df.rename(renames), unknown


def _null_where(series: pl.Series, mask: pl.Series) -> pl.Series:
    return pl.select(pl.when(mask).then(None).otherwise(series)).to_series().alias(series.name)


def _blank_to_null(series: pl.Series) -> pl.Series:
    stripped = series.str.strip_chars()
    return _null_where(stripped, (stripped == "").fill_null(False))


def _parse_dates(series: pl.Series) -> pl.Series:
    """Parse a string column with the first format that accepts every value"""
    values = _blank_to_null(series)
    best = None
    for fmt in DATE_FORMATS:
        parsed = values.str.to_date(fmt, strict=False)
        if parsed.null_count() == values.null_count():
            return parsed
        if best is None or parsed.null_count() < best.null_count():
            best = parsed
    return best


def _coerce_series(name: str, series: pl.Series, dtype: pl.DataType) -> pl.Series:
    """
    Coerce one column to its declared dtype.

    Raises:
        MalformedInputError: if any non-null value cannot be converted
    """
    source = series
    if series.dtype == dtype and not dtype.is_float():
        return series
    if series.dtype == pl.Null:
        return series.cast(dtype)

    if dtype == pl.Utf8:
        return series.cast(pl.Utf8)

    if dtype == pl.Date:
        if series.dtype == pl.Datetime:
            return series.dt.date()
        if series.dtype == pl.Utf8:
            source = _blank_to_null(series)
            converted = _parse_dates(series)
        else:
            raise MalformedInputError(
                f"Column '{name}' has type {series.dtype}, expected dates",
                column=name,
                bad_values=series.len() - series.null_count(),
            )
    else:
        if series.dtype == pl.Utf8:
            source = _blank_to_null(series)
            values = source
            if name in CURRENCY_COLUMNS:
                values = values.str.replace_all(r"[$€£¥,]", "")
            converted = values.cast(dtype, strict=False)
        else:
            converted = series.cast(dtype, strict=False)
            if dtype.is_integer() and series.dtype.is_float():
                # Fractional quantities are not integers
                fractional = (series != series.round(0)).fill_null(False)
                converted = _null_where(converted, fractional)

    bad = converted.is_null() & source.is_not_null()
    if dtype.is_float():
        # NaN and infinity are not amounts
        bad = bad | (converted.is_nan() | converted.is_infinite()).fill_null(False)
    bad_count = int(bad.sum())
    if bad_count:
        example = source.filter(bad)[0]
        raise MalformedInputError(
            f"Column '{name}' has {bad_count} values that are not valid {dtype}, e.g. {example!r}",
            column=name,
            bad_values=bad_count,
            example=example,
        )

    return converted.alias(name)


def coerce_sales_frame(data: SalesInput) -> pl.DataFrame:
    """
    Coerce raw input to the sales schema.

    Base columns missing from the input are added as all-null columns;
    derived and unknown columns are dropped so the pipeline recomputes them.

    Args:
        data: polars/pandas DataFrame or an iterable of mappings/SalesRecords

    Returns:
        DataFrame with exactly the SALES_SCHEMA columns and dtypes

    Raises:
        MalformedInputError: if a value cannot be coerced to its column type
    """
    df = _as_frame(data)
    df, unknown = _rename_columns(df)

    if unknown:
        logger.debug("Ignoring unknown columns", columns=unknown)

    missing = [col for col in SALES_SCHEMA if col not in df.columns]
    if missing and df.width:
        logger.warning("Input is missing columns, treating them as null", columns=missing)

    height = df.height
    columns = []
    for col, dtype in SALES_SCHEMA.items():
        if col in df.columns:
            columns.append(_coerce_series(col, df[col], dtype))
        else:
            columns.append(pl.Series(col, [None] * height, dtype=dtype))

    return pl.DataFrame(columns)


class SalesFileLoader:
    """
    Loader for raw Superstore sales exports.

    Reads every column as text and leaves typing to ``coerce_sales_frame``
    so identifiers such as postal codes keep their leading zeros.

    Example:
        loader = SalesFileLoader()
        df, result = loader.load(SalesFileConfig(file_path="data/raw/superstore.tsv"))
    """

    def __init__(self, default_delimiter: Optional[str] = None):
        settings = get_settings()
        self.default_delimiter = default_delimiter or settings.data_lake.raw_delimiter

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for audit logging"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_delimited(self, config: SalesFileConfig) -> pl.DataFrame:
        """Read delimited text with every column as string"""
        if config.delimiter:
            separator = config.delimiter
        elif config.file_format == FileFormat.CSV:
            separator = ","
        else:
            separator = self.default_delimiter

        return pl.read_csv(
            config.file_path,
            separator=separator,
            encoding=config.encoding,
            skip_rows=config.skip_rows,
            null_values=config.null_values,
            infer_schema_length=0,
        )

    def _read_json(self, config: SalesFileConfig) -> pl.DataFrame:
        """Read JSON file"""
        return pl.read_json(config.file_path)

    def _read_jsonl(self, config: SalesFileConfig) -> pl.DataFrame:
        """Read JSON Lines (NDJSON) file"""
        return pl.read_ndjson(config.file_path)

    def _read_parquet(self, config: SalesFileConfig) -> pl.DataFrame:
        """Read Parquet file"""
        return pl.read_parquet(config.file_path)

    def _read_file(self, config: SalesFileConfig) -> pl.DataFrame:
        """Read file based on format"""
        readers = {
            FileFormat.TSV: self._read_delimited,
            FileFormat.CSV: self._read_delimited,
            FileFormat.JSON: self._read_json,
            FileFormat.JSONL: self._read_jsonl,
            FileFormat.PARQUET: self._read_parquet,
        }
        reader = readers.get(config.file_format)
        if not reader:
            raise ValueError(f"Unsupported file format: {config.file_format}")
        return reader(config)

    def load(self, config: SalesFileConfig) -> Tuple[pl.DataFrame, LoadResult]:
        """
        Load and coerce one raw sales file.

        Args:
            config: File configuration

        Returns:
            Tuple of the schema-conformant DataFrame and its LoadResult

        Raises:
            FileNotFoundError: if the file does not exist
            MalformedInputError: if a value cannot be coerced to its column type
        """
        file_path = Path(config.file_path)
        started_at = datetime.utcnow()

        logger.info("Starting sales file load", file=str(file_path), format=config.file_format.value)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_hash = self._compute_file_hash(file_path)
        raw = self._read_file(config)

        known = {normalize_header(col) for col in raw.columns}
        columns_missing = [col for col in SALES_SCHEMA if col.replace("_", "") not in known]
        columns_ignored = [col for col in raw.columns if normalize_header(col) not in _HEADER_LOOKUP]

        df = coerce_sales_frame(raw)
        completed_at = datetime.utcnow()

        result = LoadResult(
            file_path=str(file_path),
            rows_loaded=df.height,
            total_cells=df.height * raw.width,
            columns_missing=columns_missing,
            columns_ignored=columns_ignored,
            file_hash=file_hash,
            load_duration_seconds=(completed_at - started_at).total_seconds(),
            started_at=started_at,
            completed_at=completed_at,
        )

        logger.info(
            "Sales file loaded",
            rows=result.rows_loaded,
            cells=result.total_cells,
            file_hash=file_hash,
            duration_seconds=result.load_duration_seconds,
        )

        return df, result


def load_sales_file(
    file_path: Union[str, Path],
    file_format: Optional[FileFormat] = None,
    delimiter: Optional[str] = None,
) -> pl.DataFrame:
    """
    Convenience function to load a raw sales file.

    The format is inferred from the file extension when not given;
    unknown extensions are read as tab-delimited text.
    """
    path = Path(file_path)
    if file_format is None:
        try:
            file_format = FileFormat(path.suffix.lstrip(".").lower())
        except ValueError:
            file_format = FileFormat.TSV

    df, _ = SalesFileLoader().load(
        SalesFileConfig(
            file_path=path,
            file_format=file_format,
            delimiter=delimiter,
            encoding=get_settings().data_lake.raw_encoding,
        )
    )
    return df
