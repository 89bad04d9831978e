#!/usr/bin/env python3
"""
Setup configuration for GS1 Scan Log
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="gs1-scan-log",
    version="1.0.0",
    author="GS1 Scan Log Team",
    author_email="",
    description="GS1 scan decoder with provider identification and a deduplicated scan log",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "docs", "examples", "scripts"]),
    package_data={
        "gs1_scanlog": [
            "data/*.json",
        ],
    },
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "pandas>=1.5",
        "openpyxl>=3.0",
        "reportlab>=3.6",
        "python-dateutil>=2.8",
        "streamlit>=1.28",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gs1-scanlog=gs1_scanlog.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Healthcare Industry",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    keywords="gs1 barcode scanner gtin expiry healthcare scan-log",
)
