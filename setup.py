"""Setup configuration for web-capture package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

playwright_requires = ["playwright>=1.40.0"]
puppeteer_requires = ["pyppeteer>=1.0.2"]
yaml_requires = ["pyyaml>=6.0"]

setup(
    name="web-capture",
    version="1.0.0",
    description="Capture web pages as sanitized HTML, Markdown, or PNG screenshots over HTTP or the command line",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    classifiers=[
        # Development Status
        "Development Status :: 4 - Beta",
        # Intended Audience
        "Intended Audience :: Developers",
        # Environment
        "Environment :: Console",
        "Environment :: Web Environment",
        "Framework :: AsyncIO",
        "Framework :: aiohttp",
        # Topic
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "Topic :: Text Processing :: Markup :: HTML",
        "Topic :: Text Processing :: Markup :: Markdown",
        "Topic :: Utilities",
        # Operating System
        "Operating System :: OS Independent",
        # Programming Language
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: 3 :: Only",
        # Typing
        "Typing :: Typed",
    ],
    python_requires=">=3.9",
    install_requires=[
        "aiohttp>=3.9.0",
        "beautifulsoup4>=4.12.0",
        "html2text>=2020.1.16",
        "pydantic>=2.0.0",
        "charset-normalizer>=3.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "yaml": yaml_requires,
        "playwright": playwright_requires,
        "puppeteer": puppeteer_requires,
        "all": yaml_requires + playwright_requires + puppeteer_requires,
        "dev": yaml_requires
        + [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "webcapture=webcapture.cli:main",
        ],
    },
)
