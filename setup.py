# setup.py
"""Setup script for jpgfs."""

import os

from setuptools import setup, find_packages

setup(
    name="jpgfs",
    version="1.0.0",
    description="Read-only FUSE mirror of a directory tree that serves downsized, cached JPEGs",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="jpgfs Team",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "Pillow>=9.3.0",
        "fusepy>=3.0.1",
        "tqdm>=4.50.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
            "pytest-cov>=2.10.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "jpgfs=jpgfs.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Multimedia :: Graphics",
        "Topic :: System :: Filesystems",
    ],
)
