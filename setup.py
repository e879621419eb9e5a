#!/usr/bin/env python
"""
Superstore Sales Analytics Setup
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="superstore-analytics",
    version="1.0.0",
    description="Cleaning, enrichment and reporting pipeline for Superstore sales data",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
        ],
        "test": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
        "workflows": [
            "prefect>=2.14.0",
        ],
        "generator": [
            "numpy>=1.24.0",
            "faker>=19.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "superstore-etl=superstore.main:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords=[
        "superstore",
        "analytics",
        "data-pipeline",
        "etl",
        "data-quality",
        "polars",
    ],
)
