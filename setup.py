"""Setup script for the companion AI core."""

from setuptools import setup, find_packages

setup(
    name="companion-ai",
    version="1.0.0",
    description="Conversational core of a desktop companion: multi-provider chat, streaming and persistent memory",
    packages=find_packages(include=["companion_ai", "companion_ai.*"]),
    python_requires=">=3.11",
    install_requires=[
        "python-dotenv>=1.0.0",
        "httpx>=0.25.0",
        "structlog>=23.0.0",
        "click>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "companion=companion_ai.cli.main:cli",
        ],
    },
)
