#!/usr/bin/env python3
"""
Setup script for lcrealtime
"""

from setuptools import setup, find_packages

setup(
    name="lcrealtime",
    version="0.1.0",
    description="asyncio session and typed message codec over a callback-based realtime transport",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click==8.1.7",
        "typer==0.12.3",
        "rich==13.9.2",
        "aioconsole==0.8.1",
        "PyYAML==6.0.2",
    ],
    extras_require={
        "test": [
            "pytest==8.4.2",
            "pytest-asyncio==1.2.0",
        ],
    },
    python_requires=">=3.9",
    entry_points={
        'console_scripts': [
            'lcrealtime=lcrealtime.client.cli:main',
        ],
    },
)
