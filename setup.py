#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from setuptools import setup, find_packages

setup(
    name="frame_monitor",
    version="0.1.0",
    description="Periodic time-of-flight frame monitor for particle-transport simulations",
    author="Amanda Shackelford",
    author_email="your.email@example.com",
    url="https://github.com/yourusername/frame_monitor",
    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.19.0",
        "pandas>=1.1.0",
        "matplotlib>=3.4.0",
        "h5py>=3.1.0",
        "pyyaml>=5.4.0",
        "tqdm>=4.50.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.12.0",
            "flake8>=3.9.0",
            "mypy>=0.812",
            "black>=21.5b0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    entry_points={
        "console_scripts": [
            "frame-monitor=frame_monitor.cli:main",
        ],
    },
)
