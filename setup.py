#!/usr/bin/env python3
"""
SPARK Signature Library - Setup Script

For development installation:
    pip install -e .[dev]
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read version from package
version = "0.1.0"

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text() if readme_path.exists() else ""

setup(
    name="spark-sig",
    version=version,
    description="ECDSA and EdDSA signatures over short Weierstrass and twisted Edwards curves",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="SPARK Project",
    url="https://github.com/spark-mesh/spark",
    license="Open Source",

    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",

    install_requires=[
        "cryptography>=41.0",
        "asn1crypto>=1.5",
    ],

    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=3.0",
            "black>=22.0",
            "mypy>=0.9",
            "toml>=0.10",
        ],
        "test": [
            "pytest>=7.0",
            "toml>=0.10",
        ],
        "toml": [
            "toml>=0.10",
        ],
    },

    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Security :: Cryptography",
    ],

    keywords="ecdsa eddsa ed25519 ed448 elliptic-curve signatures",
)
