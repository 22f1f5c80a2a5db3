# setup.py
from setuptools import setup, find_packages

setup(
    name="web_capture",
    version="0.1.0",
    description="Захват одной веб-страницы: статический HTML, HTML из браузера и снимок экрана",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "playwright>=1.40",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "web-capture=web_capture.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
