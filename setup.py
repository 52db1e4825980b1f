#!/usr/bin/env python3
"""
Setup configuration for oggify-tagger
Writes Ogg Vorbis streams to disk and tags them with metadata and cover art
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "mutagen>=1.47.0",
    "requests>=2.31.0",
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "tqdm>=4.66.1",
]

setup(
    name="oggify-tagger",
    version="0.1.0",
    author="oggify-tagger Team",
    description="Write and tag Ogg Vorbis streams with Spotify metadata and cover art",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "tag-ogg=oggify_tagger.cli:main",
        ],
    },
    keywords="ogg vorbis tagging metadata cover spotify cli",
)
