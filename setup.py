"""Setup file for the API Catalog package."""

from setuptools import setup, find_packages

setup(
    name="api-catalog",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click",
        "faiss-cpu",
        "httpx",
        "numpy",
        "postgrest",
        "prometheus-client",
        "pydantic>=2",
        "python-dotenv",
        "pyyaml",
        "rich",
        "sentence-transformers",
        "supabase>=2",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "api-catalog=api_catalog.__main__:main",
        ],
    },
    description="Embedding-indexed catalog and semantic search for deployed API endpoints",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
)
