"""
Data Transformation Module
"""
from .cleaners import CleaningStats, SalesCleaner, clean_sales_frame
from .enrichers import TemporalEnricher, enrich_order_dates
from .pipeline import PipelineResult, SalesPipeline, run_pipeline
from .segmentation import CustomerSegmenter, segment_customers

__all__ = [
    "CleaningStats",
    "SalesCleaner",
    "clean_sales_frame",
    "TemporalEnricher",
    "enrich_order_dates",
    "PipelineResult",
    "SalesPipeline",
    "run_pipeline",
    "CustomerSegmenter",
    "segment_customers",
]
