"""
Superstore Sales Analytics

Cleaning, enrichment and reporting pipeline for Superstore sales data.
"""

__version__ = "1.0.0"
