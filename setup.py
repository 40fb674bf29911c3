#!/usr/bin/env python3
"""
Setup configuration for blueme-converter
Batch converter producing normalized, ID3v1-tagged MP3 files for the Fiat Blue&Me car radio
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "mutagen>=1.47.0",
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "ffmpeg-python>=0.2.0",
    "tqdm>=4.66.1",
    "colorama>=0.4.6",
    "python-dotenv>=1.0.0",
]

setup(
    name="blueme-converter",
    version="1.0.0",
    author="blueme-converter contributors",
    description="Convert audio files to normalized, ID3v1-tagged MP3s for the Fiat Blue&Me car radio",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio :: Conversion",
    ],
    python_requires=">=3.8",
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
            "blueme=blueme.main:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "blueme": ["config/*.yaml"],
    },
    keywords="fiat blue&me mp3 id3v1 mp3gain ffmpeg car radio converter",
)
