#!/usr/bin/env python3
"""
Setup configuration for promo-site
Renders a musician promotion site from Markdown content files
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "requests>=2.31.0",
    "pyyaml>=6.0.1",
    "click>=8.1.7",
    "rich-click>=1.7.0",
    "rich>=13.7.0",
    "tqdm>=4.66.1",
    "mutagen>=1.47.0",
    "markdown-it-py>=3.0.0",
    "beautifulsoup4>=4.12.2",
]

setup(
    name="promo-site",
    version="0.1.0",
    author="promo-site",
    description="Content-driven musician promo site: albums, prose sections and audio players from Markdown files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Internet :: WWW/HTTP :: Site Management",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
        ],
    },
    entry_points={
        "console_scripts": [
            "promo-site=promo_site.cli:main",
        ],
    },
    include_package_data=True,
    package_data={
        "promo_site.site": ["templates/*.html"],
    },
    keywords="music promo site markdown albums audio player",
)
