# setup.py
from setuptools import setup, find_packages

setup(
    name="site_digest",
    version="0.1.0",
    description="Same-domain web crawler that turns a site into per-page content digests",
    packages=find_packages(include=["site_digest", "site_digest.*"]),
    package_data={"site_digest": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["site_digest=site_digest.cli:cli"],
    },
    python_requires=">=3.11",
)
