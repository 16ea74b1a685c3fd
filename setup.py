#!/usr/bin/env python3
"""Setup script for the JIRA custom-field requirements provider.
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read requirements from requirements.txt file
with (Path(__file__).parent / "requirements.txt").open() as f:
    requirements = f.read().splitlines()

# Remove any comments or blank lines from requirements
requirements = [line for line in requirements if line and not line.startswith("#")]

setup(
    name="jira-requirements",
    version="0.1.0",
    description="Requirement trees and test tags from JIRA cascading select custom fields",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.12,<4.0",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=8.0"],
    },
    license="MIT",  # SPDX license identifier
    entry_points={
        "console_scripts": [
            "jira-requirements=jira_requirements.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
