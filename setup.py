# setup.py
from setuptools import setup, find_packages

setup(
    name="access_scout",
    version="0.1.0",
    description="AccessScout: обход сайта, аудит доступности (axe-core) и пояснения ИИ",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"access_scout": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "anthropic>=0.30",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "playwright>=1.40",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "access-scout=access_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
