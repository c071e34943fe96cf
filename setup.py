"""
Setup configuration for componentizer package.
"""

from setuptools import setup, find_packages

setup(
    name="componentizer",
    version="0.1.0",
    description="Landing page section detection and React component generation",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "pydantic-graph<2",
        "tenacity",
        "python-dotenv",
        "pyyaml",
        "logfire",
        "anthropic",
        "supabase",
        "playwright",
        "click",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "componentizer=componentizer.cli.main:cli",
        ],
    },
)
