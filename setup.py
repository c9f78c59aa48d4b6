"""Setup script for logstream"""

from setuptools import setup, find_packages

setup(
    name="logstream",
    version="0.1.0",
    author="logstream",
    author_email="admin@localhost.local",
    description="Unified log aggregation from third-party telemetry providers",
    packages=find_packages(include=["logstream", "logstream.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: System :: Logging",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.100",
        "uvicorn[standard]>=0.23",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "httpx>=0.24",
        "python-jose[cryptography]>=3.3",
        "click>=8.0",
        "pyyaml>=6.0",
        "tabulate>=0.9",
        "botocore>=1.31",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
            "cryptography>=41.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "logstream=logstream.cli:cli",
        ],
    },
)
