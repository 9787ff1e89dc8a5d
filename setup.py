# setup.py
from setuptools import setup, find_packages

setup(
    name="site-audit",
    version="0.1.0",
    description="Технический SEO-аудит сайта по sitemap и сравнение UI двух окружений",
    packages=find_packages(exclude=["tests", "tests.*"]),  # автоматически найдёт папку site_audit
    package_data={"site_audit": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=4.9",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.1",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-audit=site_audit.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
