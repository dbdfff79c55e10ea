# setup.py
from setuptools import setup, find_packages

setup(
    name="armory_scout",
    version="0.1.0",
    description="Асинхронный сервис извлечения экипировки персонажей Warmane Armory",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "playwright>=1.40",
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
        "console_scripts": [
            "armory-scout=armory_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
